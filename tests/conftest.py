"""
Pytest configuration for Feddy SDK tests.
Points the identity store at a temp directory and provides an in-process
fake of the Feddy HTTP service built on httpx.MockTransport.
"""

import json
import os
import tempfile

# Keep tests away from ~/.feddy - must be set before any feddy imports
_test_data_dir = tempfile.mkdtemp(prefix="feddy_test_")
os.environ.setdefault("FEDDY_DATA_DIR", _test_data_dir)
os.environ.setdefault("FEDDY_BASE_URL", "https://feddy.test")

import httpx
import pytest

from feddy.models.feedback import FeedbackItem
from feddy.services.identity_store import IdentityStore
from feddy.services.sdk import Feddy

TEST_API_KEY = "fdk_test_key_1234567890"
TEST_BASE_URL = "https://feddy.test"
META = {"timestamp": "2026-01-15T10:30:00Z"}


def envelope(data=None, success=True, error=None) -> dict:
    body = {"success": success, "meta": META}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return body


class FakeFeddyServer:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict = {}

    def route(self, method, path, status=200, json_body=None, content=None, raises=None, handler=None):
        self._routes[(method, path)] = (status, json_body, content, raises, handler)

    def ok(self, method, path, data):
        self.route(method, path, 200, json_body=envelope(data))

    def requests_to(self, method, path) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last_json(self, method, path) -> dict:
        return json.loads(self.requests_to(method, path)[-1].content)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json=envelope(success=False, error="Not found"))
        status, json_body, content, raises, handler = route
        if raises is not None:
            raise raises
        if handler is not None:
            return await handler(request)
        if json_body is not None:
            return httpx.Response(status, json=json_body)
        return httpx.Response(status, content=content or b"")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


def item_payload(item_id="fb-1", status="IN_REVIEW", vote_count=0, user_voted=False, **overrides) -> dict:
    payload = {
        "id": item_id,
        "title": f"Feedback {item_id}",
        "description": "Something worth fixing",
        "type": "bug",
        "priority": "medium",
        "status": status,
        "voteCount": vote_count,
        "userVoted": user_voted,
        "createdAt": "2026-01-10T08:00:00Z",
        "updatedAt": "2026-01-11T08:00:00Z",
    }
    payload.update(overrides)
    return payload


def list_payload(*items) -> dict:
    return {
        "feedbacks": list(items),
        "total": len(items),
        "project": {"id": "proj-1", "name": "Demo"},
    }


@pytest.fixture
def server():
    return FakeFeddyServer()


@pytest.fixture
def store(tmp_path):
    return IdentityStore(path=str(tmp_path / "identity.json"))


@pytest.fixture
def feddy(store, server):
    sdk = Feddy(store, transport=server.transport)
    sdk.configure(TEST_API_KEY, base_url=TEST_BASE_URL)
    return sdk


@pytest.fixture
def make_item():
    def _make(item_id="fb-1", **kwargs) -> FeedbackItem:
        return FeedbackItem.model_validate(item_payload(item_id, **kwargs))
    return _make
