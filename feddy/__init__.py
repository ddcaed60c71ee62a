"""Feddy SDK: collect, list, vote on, and comment on feedback."""

from feddy.config import SDK_VERSION, FeddyConfig, settings
from feddy.core.errors import (
    FeddyAPIError,
    FeddyAPIErrorType,
    FeddyConfigurationError,
    FeddyError,
    FeddyNotConfiguredError,
    MissingIdentityError,
)
from feddy.models import (
    CommentItem,
    CommentListResponse,
    CommentRequest,
    CommentResponse,
    CommentType,
    FeddyState,
    FeddyUser,
    FeedbackItem,
    FeedbackListResponse,
    FeedbackMetadata,
    FeedbackPriority,
    FeedbackStatus,
    FeedbackSubmission,
    FeedbackSubmissionResponse,
    FeedbackType,
    VoteRequest,
    VoteResponse,
)
from feddy.services.api_client import FeddyAPIClient
from feddy.services.comment_thread import CommentThread
from feddy.services.enrichment import enrich
from feddy.services.feedback_cache import FeedbackCache, FilterState
from feddy.services.identity_store import IdentityStore
from feddy.services.sdk import Feddy, get_feddy

__version__ = SDK_VERSION
