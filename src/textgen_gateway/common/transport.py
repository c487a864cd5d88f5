"""Narrow interface between the gateway handler and its hosting transport.

A transport hands the handler an ``InboundRequest`` and a response sink.
Sinks are plain classes in each transport package; they only need to match
``ResponseSink`` structurally.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
GENERIC_ERROR = "Internal server error."


@dataclass(frozen=True)
class InboundRequest:
    method: str
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)


class ResponseSink(Protocol):
    def set_header(self, name: str, value: str) -> None:
        ...

    def status(self, code: int) -> "ResponseSink":
        ...

    def json(self, payload: dict[str, Any]) -> None:
        """Finalize and send the response. Only the first call may succeed."""
        ...


class ResponseAlreadySent(RuntimeError):
    pass
