"""
Feddy SDK facade.
=================

Owns the configuration lifecycle and the identity store, and exposes the
feedback operations with identity filled in:

    UNINITIALIZED --configure()--> CONFIGURED --configure()--> RECONFIGURED

A persisted API key puts a fresh instance straight into CONFIGURED. There is
no teardown; reconfiguring swaps in a new FeddyAPIClient built from a new
FeddyConfig.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from feddy.config import FeddyConfig, settings
from feddy.core.errors import FeddyConfigurationError, FeddyNotConfiguredError, MissingIdentityError
from feddy.core.redaction import redact_config
from feddy.core.structured_logging import set_debug_logging
from feddy.models.feedback import (
    CommentListResponse,
    CommentRequest,
    CommentResponse,
    FeedbackListResponse,
    FeedbackStatus,
    FeedbackSubmission,
    FeedbackSubmissionResponse,
    VoteRequest,
    VoteResponse,
)
from feddy.models.identity import FeddyState, FeddyUser
from feddy.services.api_client import FeddyAPIClient
from feddy.services.enrichment import enrich
from feddy.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)

# Lifecycle states
UNINITIALIZED = "uninitialized"
CONFIGURED = "configured"
RECONFIGURED = "reconfigured"


class Feddy:
    """Configured entry point for the Feddy feedback service."""

    def __init__(
        self,
        store: Optional[IdentityStore] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._store = store if store is not None else IdentityStore()
        self._timeout = timeout
        self._transport = transport
        self._config: Optional[FeddyConfig] = None
        self._client: Optional[FeddyAPIClient] = None
        self._lifecycle = UNINITIALIZED

        stored = self._store.get_config()
        if stored.api_key:
            self._apply(FeddyConfig(
                api_key=stored.api_key,
                base_url=stored.base_url,
                enable_debug_logging=stored.debug_logging,
            ))
            self._lifecycle = CONFIGURED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def lifecycle(self) -> str:
        return self._lifecycle

    @property
    def is_configured(self) -> bool:
        return self._config is not None

    @property
    def sdk_version(self) -> str:
        return settings.sdk_version

    @property
    def client(self) -> FeddyAPIClient:
        if self._client is None:
            raise FeddyNotConfiguredError("Feddy SDK is not configured. Call Feddy.configure() first.")
        return self._client

    def configure(
        self,
        api_key: str,
        *,
        base_url: Optional[str] = None,
        enable_debug_logging: bool = False,
    ) -> FeddyState:
        """Validate, persist and apply a new configuration."""
        api_key = (api_key or "").strip()
        if not api_key:
            logger.warning("Configuration failed: API key cannot be empty")
            raise FeddyConfigurationError("API key cannot be empty")

        config = FeddyConfig(api_key=api_key, base_url=base_url, enable_debug_logging=enable_debug_logging)
        self._store.set_config(api_key=config.api_key, base_url=base_url, debug_logging=enable_debug_logging)
        self._store.ensure_user_id()
        self._apply(config)
        self._lifecycle = CONFIGURED if self._lifecycle == UNINITIALIZED else RECONFIGURED

        state = self.get_state()
        logger.debug("Feddy SDK %s: %s", self._lifecycle, redact_config({
            "api_key": state.api_key,
            "base_url": state.base_url,
            "sdk_version": state.sdk_version,
        }))
        return state

    def _apply(self, config: FeddyConfig) -> None:
        self._config = config
        self._client = FeddyAPIClient(config, timeout=self._timeout, transport=self._transport)
        set_debug_logging(config.enable_debug_logging or settings.debug)

    def get_state(self) -> FeddyState:
        return FeddyState(
            api_key=self._config.api_key if self._config else None,
            base_url=self._config.base_url if self._config else settings.base_url,
            is_configured=self.is_configured,
            sdk_version=self.sdk_version,
            user=self._store.get_user(),
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def get_user(self) -> FeddyUser:
        return self._store.get_user()

    def update_user(
        self,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> FeddyUser:
        if not self.is_configured:
            logger.warning("Attempted to update user before configure was called")
            return self._store.get_user()
        return self._store.set_user(user_id=user_id, email=email, name=name)

    def reset_user_data(self) -> FeddyUser:
        if not self.is_configured:
            logger.warning("Attempted to reset user data before configure was called")
            return self._store.get_user()
        return self._store.clear_user()

    def has_persistent_user_data(self) -> bool:
        return self._store.has_persisted_user()

    def require_user(self) -> FeddyUser:
        """Current user, or MissingIdentityError when no user id resolves."""
        user = self._store.get_user()
        if not user.user_id:
            raise MissingIdentityError("User ID unavailable. Configure Feddy with a user first.")
        return user

    # ------------------------------------------------------------------
    # Feedback operations
    # ------------------------------------------------------------------

    async def get_feedbacks(
        self,
        status: Optional[FeedbackStatus] = None,
        user_id: Optional[str] = None,
    ) -> FeedbackListResponse:
        client = self.client
        return await client.get_feedbacks(status=status, user_id=user_id or self._store.get_user().user_id)

    async def submit_feedback(self, submission: FeedbackSubmission) -> FeedbackSubmissionResponse:
        client = self.client
        payload = enrich(submission, self._store.get_user(), self.sdk_version)
        response = await client.submit_feedback(payload)
        logger.info("Submitted feedback %s (status=%s)", response.id, response.status)
        return response

    async def vote_feedback(self, feedback_id: str) -> VoteResponse:
        client = self.client
        user = self.require_user()
        payload = enrich(VoteRequest(feedback_id=feedback_id), user, self.sdk_version)
        return await client.vote_feedback(payload)

    async def get_comments(
        self,
        feedback_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> CommentListResponse:
        return await self.client.get_comments(feedback_id, limit=limit, offset=offset)

    async def add_comment(
        self,
        feedback_id: str,
        content: str,
        parent_id: Optional[str] = None,
    ) -> CommentResponse:
        client = self.client
        user = self.require_user()
        payload = enrich(
            CommentRequest(feedback_id=feedback_id, content=content, parent_id=parent_id),
            user,
            self.sdk_version,
        )
        return await client.add_comment(payload)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------
_feddy: Optional[Feddy] = None


def get_feddy() -> Feddy:
    global _feddy
    if _feddy is None:
        _feddy = Feddy()
    return _feddy
