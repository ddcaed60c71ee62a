"""
Feedback Wire & Domain Models
=============================

Pydantic models for the Feddy HTTP+JSON protocol: feedback items, comments,
votes, submissions, and the {success, data, error, meta} response envelope.

Wire names are camelCase; Python attributes are snake_case. Every model
accepts either form on input and dumps camelCase (by_alias=True) for the wire.
"""

import platform
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_TITLE_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 500
MAX_COMMENT_LENGTH = 1000

T = TypeVar("T")


class FeedbackStatus(str, Enum):
    """Workflow status; also the cache partition key."""
    IN_REVIEW = "IN_REVIEW"
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class FeedbackType(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    QUESTION = "question"


class FeedbackPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CommentType(str, Enum):
    ADMIN = "ADMIN"
    AUTHOR = "AUTHOR"
    USER = "USER"


class WireModel(BaseModel):
    """Base for outbound payloads: camelCase aliases, populate by name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DomainModel(BaseModel):
    """Base for server-provided entities: camelCase aliases, immutable."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# --- Feedback ---

class ProjectInfo(DomainModel):
    id: str
    name: str


class FeedbackItem(DomainModel):
    """A single feedback entry as shown in a list."""
    id: str
    title: str
    description: str
    type: FeedbackType
    priority: FeedbackPriority
    status: FeedbackStatus
    vote_count: int = Field(ge=0)
    user_voted: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("type", "priority", mode="before")
    @classmethod
    def lower_case(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("status", mode="before")
    @classmethod
    def upper_case(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("user_voted", mode="before")
    @classmethod
    def null_is_false(cls, value):
        return False if value is None else value


class FeedbackListResponse(DomainModel):
    feedbacks: List[FeedbackItem] = Field(default_factory=list)
    total: int = 0
    project: Optional[ProjectInfo] = None

    @field_validator("feedbacks", mode="before")
    @classmethod
    def null_is_empty(cls, value):
        return [] if value is None else value


def _default_platform() -> str:
    return f"{platform.system().upper()} {platform.release()}".strip()


class FeedbackMetadata(WireModel):
    user_id: str = ""
    platform: str = Field(default_factory=_default_platform)
    app_version: Optional[str] = None
    sdk_version: Optional[str] = None


class FeedbackSubmission(WireModel):
    """Outbound feedback. Title and description are trimmed before length checks."""
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str = Field(min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    type: str = "BUG"
    priority: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    user_agent: Optional[str] = None
    device_info: Optional[str] = None
    screenshot: Optional[str] = None
    logs: Optional[str] = None
    metadata: FeedbackMetadata = Field(default_factory=FeedbackMetadata)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("user_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        value = _strip(value)
        return value or None


class FeedbackSubmissionResponse(DomainModel):
    id: str
    status: str
    project: Optional[ProjectInfo] = None


# --- Votes ---

class VoteRequest(WireModel):
    feedback_id: str = Field(min_length=1)
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class VoteResponse(DomainModel):
    feedback_id: str
    vote_count: int = Field(ge=0)


# --- Comments ---

class CommentAuthor(DomainModel):
    user_id: str
    user_name: Optional[str] = None


class CommentItem(DomainModel):
    """A comment with at most one level of embedded replies."""
    id: str
    content: str = Field(min_length=1)
    comment_type: CommentType
    author: CommentAuthor
    parent_id: Optional[str] = None
    replies: Optional[List["CommentItem"]] = None
    created_at: datetime

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value):
        return _strip(value)

    @field_validator("comment_type", mode="before")
    @classmethod
    def upper_case(cls, value):
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def replies_point_here(self) -> "CommentItem":
        for reply in self.replies or []:
            if reply.parent_id is not None and reply.parent_id != self.id:
                raise ValueError(
                    f"reply {reply.id!r} has parentId {reply.parent_id!r}, expected {self.id!r}"
                )
        return self


class CommentPagination(DomainModel):
    limit: int
    offset: int
    count: int


class CommentListResponse(DomainModel):
    comments: List[CommentItem] = Field(default_factory=list)
    feedback_id: str
    pagination: Optional[CommentPagination] = None

    @field_validator("comments", mode="before")
    @classmethod
    def null_is_empty(cls, value):
        return [] if value is None else value


class CommentRequest(WireModel):
    feedback_id: str = Field(min_length=1)
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)
    parent_id: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value):
        return _strip(value)


class CommentResponse(DomainModel):
    comment_id: str
    feedback_id: str
    comment_type: CommentType

    @field_validator("comment_type", mode="before")
    @classmethod
    def upper_case(cls, value):
        return value.upper() if isinstance(value, str) else value


# --- Envelope ---

class APIResponseMeta(DomainModel):
    timestamp: str


class APIResponse(DomainModel, Generic[T]):
    """Response envelope. `data` is only meaningful when `success` is true."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    meta: Optional[APIResponseMeta] = None
