from __future__ import annotations

from typing import Any, Callable

import pytest
from requests import PreparedRequest, Response
from requests.adapters import BaseAdapter

from cloudauth.auth.token import Token


class RecordingAdapter(BaseAdapter):
    """Adapter that records what it is asked to send and answers 200."""

    def __init__(self, status_code: int = 200) -> None:
        super().__init__()
        self.status_code = status_code
        self.sent: list[PreparedRequest] = []
        self.kwargs: list[dict[str, Any]] = []
        self.closed = False

    def send(self, request: PreparedRequest, **kwargs: Any) -> Response:
        self.sent.append(request)
        self.kwargs.append(kwargs)
        resp = Response()
        resp.status_code = self.status_code
        resp.request = request
        resp.url = request.url
        resp._content = b"{}"
        return resp

    def close(self) -> None:
        self.closed = True


class StaticProvider:
    """Token provider that counts calls and always returns the same token."""

    def __init__(self, token: Token | None = None) -> None:
        self._token = token or Token("static-token")
        self.calls = 0

    def token(self) -> Token:
        self.calls += 1
        return self._token


@pytest.fixture()
def make_adapter() -> Callable[..., RecordingAdapter]:
    return RecordingAdapter


@pytest.fixture()
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture()
def provider() -> StaticProvider:
    return StaticProvider()


@pytest.fixture()
def make_provider() -> Callable[..., StaticProvider]:
    return StaticProvider
