from feddy.models.feedback import (
    MAX_COMMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    APIResponse,
    APIResponseMeta,
    CommentAuthor,
    CommentItem,
    CommentListResponse,
    CommentPagination,
    CommentRequest,
    CommentResponse,
    CommentType,
    FeedbackItem,
    FeedbackListResponse,
    FeedbackMetadata,
    FeedbackPriority,
    FeedbackStatus,
    FeedbackSubmission,
    FeedbackSubmissionResponse,
    FeedbackType,
    ProjectInfo,
    VoteRequest,
    VoteResponse,
)
from feddy.models.identity import FeddyState, FeddyUser, StoredConfig
