"""
Comment thread for a single feedback item.

Loads one page of comments and posts new ones, reloading after a successful
post. Load failures keep the comments already shown and record a message;
post failures are raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from feddy.core.errors import FeddyError, describe_error
from feddy.models.feedback import CommentItem, CommentResponse
from feddy.services.sdk import Feddy

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


class CommentThread:
    def __init__(self, feddy: Feddy, feedback_id: str, page_size: int = DEFAULT_PAGE_SIZE):
        self._feddy = feddy
        self.feedback_id = feedback_id
        self.page_size = page_size
        self.comments: Tuple[CommentItem, ...] = ()
        self.loading = False
        self.last_error: Optional[str] = None

    async def load(self, offset: int = 0) -> Tuple[CommentItem, ...]:
        if self.loading:
            return self.comments
        self.loading = True
        self.last_error = None
        try:
            result = await self._feddy.get_comments(self.feedback_id, limit=self.page_size, offset=offset)
            self.comments = tuple(result.comments)
        except FeddyError as e:
            self.last_error = describe_error(e)
            logger.warning("Failed to load comments for %s: %s", self.feedback_id, self.last_error)
        finally:
            self.loading = False
        return self.comments

    async def post(self, content: str, parent_id: Optional[str] = None) -> CommentResponse:
        """Send a comment (trimmed, 1..1000 chars) and reload the thread.

        Raises:
            pydantic.ValidationError: empty or over-long content, before any call.
            FeddyError: identity or transport failure.
        """
        response = await self._feddy.add_comment(self.feedback_id, content, parent_id=parent_id)
        logger.debug("Posted comment %s on %s", response.comment_id, self.feedback_id)
        await self.load()
        return response
