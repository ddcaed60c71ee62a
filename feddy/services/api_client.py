"""
Feddy API Client — HTTP client for the Feddy feedback endpoints.
=================================================================

Wraps GET/POST /api/feedback, /api/feedback/submit, /api/feedback/vote and
GET/POST /api/feedback/comment. Every response arrives in the envelope
{success, data, error, meta}; this client unwraps `data` into a typed model
or raises FeddyAPIError with exactly one FeddyAPIErrorType.

No retries: a failed call is reported once and the caller decides.

Classification order, first match wins:
    URL build -> body encode -> network -> body read -> 401/429 -> text decode
    (lenient) -> JSON parse -> other non-2xx -> missing envelope/data -> payload schema
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from feddy.config import FeddyConfig, settings
from feddy.core.errors import FeddyAPIError
from feddy.core.structured_logging import request_id_var
from feddy.models.feedback import (
    APIResponse,
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

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

API_KEY_HEADER = "X-API-Key"


class FeddyAPIClient:
    """Async HTTP client for the Feddy feedback service."""

    def __init__(
        self,
        config: FeddyConfig,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = config.api_key
        base_url = config.base_url
        self._base_url = base_url[:-1] if base_url.endswith("/") else base_url
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_feedbacks(
        self,
        status: Optional[FeedbackStatus] = None,
        user_id: Optional[str] = None,
    ) -> FeedbackListResponse:
        """GET /api/feedback"""
        return await self.send(
            "/api/feedback",
            "GET",
            query={
                "status": FeedbackStatus(status).value if status else None,
                "userId": user_id,
            },
            response_model=FeedbackListResponse,
        )

    async def submit_feedback(self, submission: FeedbackSubmission) -> FeedbackSubmissionResponse:
        """POST /api/feedback/submit"""
        return await self.send(
            "/api/feedback/submit",
            "POST",
            body=submission,
            response_model=FeedbackSubmissionResponse,
        )

    async def vote_feedback(self, vote: VoteRequest) -> VoteResponse:
        """POST /api/feedback/vote"""
        return await self.send(
            "/api/feedback/vote",
            "POST",
            body=vote,
            response_model=VoteResponse,
        )

    async def get_comments(
        self,
        feedback_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> CommentListResponse:
        """GET /api/feedback/comment"""
        return await self.send(
            "/api/feedback/comment",
            "GET",
            query={
                "feedbackId": feedback_id,
                "limit": str(limit) if limit is not None else None,
                "offset": str(offset) if offset is not None else None,
            },
            response_model=CommentListResponse,
        )

    async def add_comment(self, comment: CommentRequest) -> CommentResponse:
        """POST /api/feedback/comment"""
        return await self.send(
            "/api/feedback/comment",
            "POST",
            body=comment,
            response_model=CommentResponse,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def send(
        self,
        path: str,
        method: str,
        *,
        query: Optional[Mapping[str, Optional[str]]] = None,
        body: Any = None,
        response_model: Type[T],
    ) -> T:
        """Perform one request and return the envelope's typed `data`.

        Raises:
            FeddyAPIError: on any failure, classified per the module docstring.
        """
        token = request_id_var.set(uuid.uuid4().hex[:12])
        try:
            return await self._send(path, method, query, body, response_model)
        except FeddyAPIError as e:
            logger.warning(
                "Feddy API %s %s failed: type=%s status=%s message=%s",
                method, path, e.type.value, e.status_code, e.message,
            )
            raise
        finally:
            request_id_var.reset(token)

    async def _send(
        self,
        path: str,
        method: str,
        query: Optional[Mapping[str, Optional[str]]],
        body: Any,
        response_model: Type[T],
    ) -> T:
        try:
            url = self._build_url(path, query)
        except (httpx.InvalidURL, ValueError) as e:
            raise FeddyAPIError.invalid_url(e) from e

        headers = {
            "Content-Type": "application/json",
            API_KEY_HEADER: self._api_key,
        }

        content: Optional[bytes] = None
        if body is not None:
            try:
                content = self._encode_body(body)
            except (TypeError, ValueError, PydanticSerializationError) as e:
                raise FeddyAPIError.decoding("Failed to encode request body", e) from e

        logger.debug("Feddy API request: %s %s", method, url)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            request = client.build_request(method, url, headers=headers, content=content)
            try:
                response = await client.send(request, stream=True)
            except httpx.HTTPError as e:
                raise FeddyAPIError.network("Network request failed", e) from e

            try:
                raw = await response.aread()
            except httpx.HTTPError as e:
                raise FeddyAPIError.decoding("Failed to read response body", e, response.status_code) from e
            finally:
                await response.aclose()

        status_code = response.status_code
        logger.debug("Feddy API response: %s %s -> %d (%d bytes)", method, path, status_code, len(raw))

        # 401 and 429 are decided by status alone, whatever the body holds
        if status_code in (401, 429):
            raise self._classify_status(status_code, None)

        # undecodable bytes become U+FFFD rather than failing the call
        text = response.text

        payload: Any = None
        if text:
            try:
                payload = json.loads(text)
            except ValueError as e:
                raise FeddyAPIError.decoding("Failed to parse response JSON", e, status_code) from e

        if not response.is_success:
            raise self._classify_status(status_code, payload)

        if not isinstance(payload, dict) or payload.get("data") is None or payload.get("success") is not True:
            if isinstance(payload, dict) and payload.get("success") is False:
                # 2xx with success=false is reported as no-data; keep the server's reason in the log
                logger.warning(
                    "Feddy API %s %s returned success=false: %s", method, path, payload.get("error"),
                )
            raise FeddyAPIError.no_data(status_code)

        try:
            envelope = APIResponse[response_model].model_validate(payload)
        except ValidationError as e:
            raise FeddyAPIError.decoding(
                f"Unexpected {response_model.__name__} payload", e, status_code,
            ) from e

        return envelope.data

    def _build_url(self, path: str, query: Optional[Mapping[str, Optional[str]]]) -> httpx.URL:
        params = {
            key: str(value)
            for key, value in (query or {}).items()
            if value is not None and value != ""
        }
        url = httpx.URL(self._base_url + path, params=params)
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Not an absolute http(s) URL: {self._base_url + path!r}")
        return url

    @staticmethod
    def _encode_body(body: Any) -> bytes:
        if isinstance(body, BaseModel):
            data = body.model_dump(mode="json", by_alias=True)
        else:
            data = body
        return json.dumps(data, allow_nan=False).encode("utf-8")

    @staticmethod
    def _classify_status(status_code: int, payload: Any) -> FeddyAPIError:
        if status_code == 401:
            return FeddyAPIError.invalid_api_key()
        if status_code == 429:
            return FeddyAPIError.rate_limited()
        error = payload.get("error") if isinstance(payload, dict) else None
        message = error if isinstance(error, str) and error else f"HTTP {status_code}"
        return FeddyAPIError.server(message, status_code)
