"""
Tests for FeedbackCache — per-status caching, single-flight loads,
optimistic votes and invalidation after submissions.
"""

import asyncio
import dataclasses

import pytest
from unittest.mock import AsyncMock, MagicMock

from feddy.core.errors import FeddyAPIError, MissingIdentityError
from feddy.models.feedback import (
    FeedbackListResponse,
    FeedbackStatus,
    FeedbackSubmission,
    FeedbackSubmissionResponse,
    VoteResponse,
)
from feddy.models.identity import FeddyUser
from feddy.services.feedback_cache import FeedbackCache
from feddy.services.sdk import Feddy

IN_REVIEW = FeedbackStatus.IN_REVIEW
PLANNED = FeedbackStatus.PLANNED


def listing(*items) -> FeedbackListResponse:
    return FeedbackListResponse(feedbacks=list(items), total=len(items))


@pytest.fixture
def mock_feddy():
    feddy = MagicMock(spec=Feddy)
    feddy.get_feedbacks = AsyncMock(return_value=listing())
    feddy.vote_feedback = AsyncMock()
    feddy.submit_feedback = AsyncMock()
    feddy.require_user.return_value = FeddyUser(user_id="user-1")
    return feddy


@pytest.fixture
def cache(mock_feddy):
    return FeedbackCache(mock_feddy)


class TestRequest:
    @pytest.mark.asyncio
    async def test_first_request_fetches(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"), make_item("b"))

        state = await cache.request(IN_REVIEW)

        mock_feddy.get_feedbacks.assert_awaited_once_with(status=IN_REVIEW)
        assert [item.id for item in state.items] == ["a", "b"]
        assert state.loading is False
        assert state.last_error is None
        assert state.fetched is True

    @pytest.mark.asyncio
    async def test_cached_status_not_refetched(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"))

        await cache.request(IN_REVIEW)
        await cache.request(IN_REVIEW)

        assert mock_feddy.get_feedbacks.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_cache_is_refetched(self, cache, mock_feddy):
        await cache.request(IN_REVIEW)
        await cache.request(IN_REVIEW)

        assert mock_feddy.get_feedbacks.await_count == 2

    @pytest.mark.asyncio
    async def test_forced_refresh_replaces_list(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"), make_item("b"))
        await cache.request(IN_REVIEW)

        mock_feddy.get_feedbacks.return_value = listing(make_item("b"), make_item("c"))
        state = await cache.request(IN_REVIEW, force=True)

        assert [item.id for item in state.items] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_statuses_do_not_leak_into_each_other(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"))
        await cache.request(IN_REVIEW)

        mock_feddy.get_feedbacks.return_value = listing(make_item("p", status="PLANNED"))
        planned = await cache.request(PLANNED)

        assert [item.id for item in planned.items] == ["p"]
        assert [item.id for item in cache.snapshot(IN_REVIEW).items] == ["a"]

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_items(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"))
        before = await cache.request(IN_REVIEW)

        mock_feddy.get_feedbacks.side_effect = FeddyAPIError.network("Network request failed")
        after = await cache.request(IN_REVIEW, force=True)

        assert after.items == before.items
        assert after.last_error == "network: Network request failed"
        assert after.loading is False

    @pytest.mark.asyncio
    async def test_failure_on_empty_cache_records_error(self, cache, mock_feddy):
        mock_feddy.get_feedbacks.side_effect = FeddyAPIError.rate_limited()

        state = await cache.request(PLANNED)

        assert state.items == ()
        assert state.last_error == "rate-limited: Rate limit exceeded"
        assert state.fetched is False

    @pytest.mark.asyncio
    async def test_snapshots_are_immutable(self, cache):
        state = await cache.request(IN_REVIEW)

        with pytest.raises(dataclasses.FrozenInstanceError):
            state.loading = True


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_same_status_single_flight(self, cache, mock_feddy, make_item):
        gate = asyncio.Event()

        async def slow(status=None):
            await gate.wait()
            return listing(make_item("a"))

        mock_feddy.get_feedbacks.side_effect = slow

        first = asyncio.create_task(cache.request(IN_REVIEW))
        await asyncio.sleep(0)
        second = await cache.request(IN_REVIEW)

        assert second.loading is True
        gate.set()
        state = await first

        assert mock_feddy.get_feedbacks.await_count == 1
        assert [item.id for item in state.items] == ["a"]
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_different_statuses_load_independently(self, cache, mock_feddy, make_item):
        gate = asyncio.Event()

        async def slow(status=None):
            await gate.wait()
            return listing(make_item(f"{status.value}-1", status=status.value))

        mock_feddy.get_feedbacks.side_effect = slow

        tasks = [
            asyncio.create_task(cache.request(IN_REVIEW)),
            asyncio.create_task(cache.request(PLANNED)),
        ]
        await asyncio.sleep(0)

        assert cache.snapshot(IN_REVIEW).loading is True
        assert cache.snapshot(PLANNED).loading is True
        assert cache.snapshot(FeedbackStatus.COMPLETED).loading is False

        gate.set()
        await asyncio.gather(*tasks)

        assert mock_feddy.get_feedbacks.await_count == 2
        assert [i.id for i in cache.snapshot(PLANNED).items] == ["PLANNED-1"]

    @pytest.mark.asyncio
    async def test_forced_request_while_loading_marks_stale(self, cache, mock_feddy, make_item):
        gate = asyncio.Event()

        async def slow(status=None):
            await gate.wait()
            return listing(make_item("a"))

        mock_feddy.get_feedbacks.side_effect = slow

        first = asyncio.create_task(cache.request(IN_REVIEW))
        await asyncio.sleep(0)
        await cache.request(IN_REVIEW, force=True)
        gate.set()
        await first

        assert mock_feddy.get_feedbacks.await_count == 1
        assert cache.is_stale(IN_REVIEW)

        await cache.request(IN_REVIEW)
        assert mock_feddy.get_feedbacks.await_count == 2
        assert not cache.is_stale(IN_REVIEW)


class TestOptimisticVote:
    @pytest.mark.asyncio
    async def test_apply_optimistic_vote(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("x", vote_count=3, user_voted=False))
        await cache.request(IN_REVIEW)

        assert cache.apply_optimistic_vote("x") is True

        item = cache.items[0]
        assert item.vote_count == 4
        assert item.user_voted is True

    @pytest.mark.asyncio
    async def test_unknown_item_is_noop(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("x", vote_count=3))
        before = await cache.request(IN_REVIEW)

        assert cache.apply_optimistic_vote("missing") is False
        assert cache.snapshot() == before

    @pytest.mark.asyncio
    async def test_only_active_status_is_patched(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("x", status="PLANNED", vote_count=1))
        await cache.request(PLANNED)

        assert cache.active_status is IN_REVIEW
        assert cache.apply_optimistic_vote("x") is False
        assert cache.snapshot(PLANNED).items[0].vote_count == 1

    @pytest.mark.asyncio
    async def test_vote_is_visible_before_response(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("x", vote_count=3))
        await cache.request(IN_REVIEW)
        gate = asyncio.Event()

        async def slow_vote(feedback_id):
            await gate.wait()
            return VoteResponse(feedback_id=feedback_id, vote_count=4)

        mock_feddy.vote_feedback.side_effect = slow_vote

        task = asyncio.create_task(cache.vote("x"))
        await asyncio.sleep(0)

        assert cache.items[0].vote_count == 4
        assert cache.items[0].user_voted is True

        mock_feddy.get_feedbacks.return_value = listing(make_item("x", vote_count=10, user_voted=True))
        gate.set()
        response = await task

        assert response.vote_count == 4
        # authoritative refresh supersedes the optimistic patch
        assert cache.items[0].vote_count == 10
        assert mock_feddy.get_feedbacks.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_vote_rolls_back_and_raises(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("x", vote_count=3))
        await cache.request(IN_REVIEW)
        mock_feddy.vote_feedback.side_effect = FeddyAPIError.server("boom", 500)
        mock_feddy.get_feedbacks.side_effect = FeddyAPIError.network("Network request failed")

        with pytest.raises(FeddyAPIError):
            await cache.vote("x")

        assert cache.items[0].vote_count == 3
        assert cache.items[0].user_voted is False
        assert mock_feddy.get_feedbacks.await_count == 2

    @pytest.mark.asyncio
    async def test_vote_without_identity_fails_before_network(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("x", vote_count=3))
        await cache.request(IN_REVIEW)
        mock_feddy.require_user.side_effect = MissingIdentityError("User ID unavailable")

        with pytest.raises(MissingIdentityError):
            await cache.vote("x")

        mock_feddy.vote_feedback.assert_not_awaited()
        assert cache.items[0].vote_count == 3

    @pytest.mark.asyncio
    async def test_vote_for_uncached_item_still_sent(self, cache, mock_feddy):
        mock_feddy.vote_feedback.return_value = VoteResponse(feedback_id="y", vote_count=1)

        await cache.vote("y")

        mock_feddy.vote_feedback.assert_awaited_once_with("y")


class TestSubmitAndInvalidate:
    @pytest.mark.asyncio
    async def test_submit_invalidates_intake_and_active(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("p", status="PLANNED"))
        await cache.select(PLANNED)
        mock_feddy.submit_feedback.return_value = FeedbackSubmissionResponse(id="fb-new", status="IN_REVIEW")

        response = await cache.submit_feedback(FeedbackSubmission(
            title="Crash on launch", description="App crashes immediately", type="BUG",
        ))

        assert response.id == "fb-new"
        assert cache.is_stale(IN_REVIEW)
        assert cache.is_stale(PLANNED)
        assert not cache.is_stale(FeedbackStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_stale_status_refetched_despite_cache(self, cache, mock_feddy, make_item):
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"))
        await cache.request(IN_REVIEW)

        cache.invalidate({IN_REVIEW})
        mock_feddy.get_feedbacks.return_value = listing(make_item("a"), make_item("new"))
        state = await cache.request(IN_REVIEW)

        assert [item.id for item in state.items] == ["a", "new"]
        assert not state.stale

    @pytest.mark.asyncio
    async def test_failed_submit_invalidates_nothing(self, cache, mock_feddy):
        mock_feddy.submit_feedback.side_effect = FeddyAPIError.invalid_api_key()

        with pytest.raises(FeddyAPIError):
            await cache.submit_feedback(FeedbackSubmission(title="t", description="d"))

        assert not any(cache.is_stale(status) for status in FeedbackStatus)
