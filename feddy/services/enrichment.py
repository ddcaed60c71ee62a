"""
Identity enrichment for outbound payloads.

Fills user fields the caller left unset from the current identity and stamps
the SDK version on submissions. Fields the caller set are never overwritten,
so enrich(enrich(p)) == enrich(p).
"""

from typing import Optional, TypeVar, Union

from feddy.models.feedback import CommentRequest, FeedbackSubmission, VoteRequest
from feddy.models.identity import FeddyUser

ANONYMOUS_USER_ID = "anonymous"

Payload = TypeVar("Payload", FeedbackSubmission, VoteRequest, CommentRequest)


def _resolve_user_id(current: Optional[str], user: FeddyUser) -> str:
    return current or user.user_id or ANONYMOUS_USER_ID


def enrich_submission(payload: FeedbackSubmission, user: FeddyUser, sdk_version: str) -> FeedbackSubmission:
    metadata = payload.metadata.model_copy(update={
        "user_id": _resolve_user_id(payload.metadata.user_id, user),
        "sdk_version": payload.metadata.sdk_version or sdk_version,
    })
    return payload.model_copy(update={
        "metadata": metadata,
        "user_name": payload.user_name if payload.user_name is not None else user.name,
        "user_email": payload.user_email if payload.user_email is not None else user.email,
    })


def enrich_participant(
    payload: Union[VoteRequest, CommentRequest], user: FeddyUser,
) -> Union[VoteRequest, CommentRequest]:
    return payload.model_copy(update={
        "user_id": _resolve_user_id(payload.user_id, user),
        "user_name": payload.user_name if payload.user_name is not None else user.name,
        "user_email": payload.user_email if payload.user_email is not None else user.email,
    })


def enrich(payload: Payload, user: FeddyUser, sdk_version: str) -> Payload:
    """Return a copy of payload with identity fields filled in."""
    if isinstance(payload, FeedbackSubmission):
        return enrich_submission(payload, user, sdk_version)
    if isinstance(payload, (VoteRequest, CommentRequest)):
        return enrich_participant(payload, user)
    raise TypeError(f"Cannot enrich {type(payload).__name__}")
