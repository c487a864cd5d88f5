from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from textgen_gateway.common.config import GatewaySettings

_SETTINGS_ENV = [
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "AI_STUDIO_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_FALLBACK_MODELS",
    "GEMINI_BASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "HOST",
    "PORT",
    "STATIC_ROOT",
    "LOG_LEVEL",
    "UPSTREAM_TIMEOUT",
]


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None) -> None:
        self.status_code = status_code
        self._json = json_data

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("not JSON")
        return self._json


def gemini_reply(text: str) -> FakeResponse:
    return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def openai_reply(text: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"index": 0, "message": {"role": "assistant", "content": text}}]})


def error_reply(status_code: int, message: str) -> FakeResponse:
    return FakeResponse(status_code, {"error": {"code": status_code, "message": message}})


class FakeUpstream:
    """Records outbound calls and answers from a queue, then from ``default``."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.replies: list[FakeResponse | Exception] = []
        self.default: Callable[[dict[str, Any]], FakeResponse] = lambda call: gemini_reply("hi")
        self.timeouts: list[Any] = []

    def queue(self, *replies: FakeResponse | Exception) -> None:
        self.replies.extend(replies)

    @property
    def gemini_models(self) -> list[str]:
        return [c["url"].split("/models/", 1)[1].split(":generateContent", 1)[0] for c in self.calls]

    def client(self, timeout: Any = None) -> "_FakeClient":
        self.timeouts.append(timeout)
        return _FakeClient(self)


class _FakeClient:
    def __init__(self, upstream: FakeUpstream) -> None:
        self.upstream = upstream

    def __enter__(self) -> "_FakeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None

    def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,  # noqa: A002
    ) -> FakeResponse:
        call = {"url": url, "params": params, "headers": headers, "json": json}
        self.upstream.calls.append(call)
        if self.upstream.replies:
            reply = self.upstream.replies.pop(0)
        else:
            reply = self.upstream.default(call)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:  # noqa: ANN001
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_settings(monkeypatch: pytest.MonkeyPatch) -> Callable[..., GatewaySettings]:
    def _make(**env: str) -> GatewaySettings:
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return GatewaySettings(_env_file=None)

    return _make


@pytest.fixture
def upstream(monkeypatch: pytest.MonkeyPatch) -> FakeUpstream:
    fake = FakeUpstream()
    # Providers resolve httpx.Client at call time, so patching the module attribute is enough.
    monkeypatch.setattr(httpx, "Client", fake.client)
    return fake
