"""
Feedback Cache — per-status views of the remote feedback collection.
======================================================================

Holds, per FeedbackStatus, the last successfully fetched list together with
its loading/error flags, and decides whether a request is served from cache
or goes to the network.

Per status:  EMPTY -> LOADING -> READY(items)
             READY -> LOADING (forced refresh; items stay visible)

Rules:
  - One in-flight fetch per status. A request for a status that is already
    loading returns the current snapshot without a network call.
  - A successful fetch replaces the item list wholesale.
  - A failed fetch keeps the previous items and records an error message.
  - Votes are applied optimistically to the active status and superseded by
    a forced refresh once the vote call resolves.
  - Submissions invalidate IN_REVIEW and the active status; invalidated
    statuses are force-refreshed on their next request.

Only this class writes the status map; readers get frozen FilterState
snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple

from feddy.core.errors import FeddyError, describe_error
from feddy.models.feedback import (
    FeedbackItem,
    FeedbackStatus,
    FeedbackSubmission,
    FeedbackSubmissionResponse,
    VoteResponse,
)
from feddy.services.sdk import Feddy

logger = logging.getLogger(__name__)

INTAKE_STATUS = FeedbackStatus.IN_REVIEW


@dataclass(frozen=True)
class FilterState:
    """Immutable snapshot of one status's cache entry."""
    status: FeedbackStatus
    items: Tuple[FeedbackItem, ...] = ()
    loading: bool = False
    last_error: Optional[str] = None
    stale: bool = False
    fetched: bool = False

    def find(self, item_id: str) -> Optional[FeedbackItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class FeedbackCache:
    """Cache/refresh coordinator for the feedback list, keyed by status."""

    def __init__(self, feddy: Feddy, initial_status: FeedbackStatus = INTAKE_STATUS):
        self._feddy = feddy
        self._active = FeedbackStatus(initial_status)
        self._states: Dict[FeedbackStatus, FilterState] = {
            status: FilterState(status=status) for status in FeedbackStatus
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def active_status(self) -> FeedbackStatus:
        return self._active

    @property
    def items(self) -> Tuple[FeedbackItem, ...]:
        return self._states[self._active].items

    def snapshot(self, status: Optional[FeedbackStatus] = None) -> FilterState:
        return self._states[FeedbackStatus(status) if status else self._active]

    def is_stale(self, status: FeedbackStatus) -> bool:
        return self._states[FeedbackStatus(status)].stale

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def select(self, status: FeedbackStatus) -> FilterState:
        """Make status the active view and load it if needed."""
        self._active = FeedbackStatus(status)
        return await self.request(self._active)

    async def request(self, status: FeedbackStatus, force: bool = False) -> FilterState:
        """Serve status from cache or fetch it.

        Fetches when forced, when the status was invalidated, or when its
        cached list is empty. Never raises for SDK errors: they are recorded
        on the returned snapshot.
        """
        status = FeedbackStatus(status)
        state = self._states[status]

        if state.loading:
            if force and not state.stale:
                # refetch once the in-flight load settles
                self._states[status] = replace(state, stale=True)
            logger.debug("Feedback %s already loading, skipping fetch", status.value)
            return self._states[status]

        if not (force or state.stale) and state.items:
            return state

        # Mark loading before the first await so a concurrent request sees it
        self._states[status] = replace(state, loading=True, last_error=None, stale=False)

        items: Optional[Tuple[FeedbackItem, ...]] = None
        error: Optional[str] = None
        try:
            response = await self._feddy.get_feedbacks(status=status)
            items = tuple(response.feedbacks)
        except FeddyError as e:
            error = describe_error(e)
            logger.warning("Failed to load %s feedback: %s", status.value, error)
        finally:
            current = self._states[status]
            if items is not None:
                self._states[status] = replace(
                    current, items=items, loading=False, last_error=None, fetched=True,
                )
            else:
                self._states[status] = replace(current, loading=False, last_error=error)

        if items is not None:
            logger.debug("Loaded %d %s feedback items", len(items), status.value)
        return self._states[status]

    def invalidate(self, statuses: Iterable[FeedbackStatus]) -> None:
        """Mark statuses for a forced refresh on their next request."""
        for status in statuses:
            status = FeedbackStatus(status)
            self._states[status] = replace(self._states[status], stale=True)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_optimistic_vote(self, item_id: str) -> bool:
        """Mark item_id voted in the active view. Returns False if it is not there."""
        state = self._states[self._active]
        for index, item in enumerate(state.items):
            if item.id == item_id:
                patched = item.model_copy(update={
                    "user_voted": True,
                    "vote_count": item.vote_count + 1,
                })
                items = state.items[:index] + (patched,) + state.items[index + 1:]
                self._states[self._active] = replace(state, items=items)
                return True
        return False

    def _rollback_vote(self, status: FeedbackStatus, patched: FeedbackItem, original: FeedbackItem) -> None:
        # only undo the patch if a refresh has not replaced it yet
        state = self._states[status]
        items = tuple(original if item is patched else item for item in state.items)
        self._states[status] = replace(state, items=items)

    async def vote(self, item_id: str) -> VoteResponse:
        """Vote for item_id with an optimistic update of the active view.

        Failures are re-raised after the optimistic patch is rolled back.
        Either way the status that was active is force-refreshed afterwards.
        """
        self._feddy.require_user()
        status = self._active
        original = self._states[status].find(item_id)
        patched = self._states[status].find(item_id) if self.apply_optimistic_vote(item_id) else None
        try:
            response = await self._feddy.vote_feedback(item_id)
        except FeddyError:
            if patched is not None:
                self._rollback_vote(status, patched, original)
            raise
        finally:
            await self.request(status, force=True)
        return response

    async def submit_feedback(self, submission: FeedbackSubmission) -> FeedbackSubmissionResponse:
        """Submit new feedback and invalidate the views it can appear in."""
        response = await self._feddy.submit_feedback(submission)
        self.invalidate({INTAKE_STATUS, self._active})
        return response
