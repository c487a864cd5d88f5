"""AWS Lambda entry points (API Gateway proxy integration), one per provider.

Configure the function handler as
``textgen_gateway.serve_lambda.lambda_handler.gemini`` or ``...openai``.
Both REST (payload v1) and HTTP API (payload v2) events are accepted.
"""
from __future__ import annotations
import base64
import json
import logging
from typing import Any

from textgen_gateway.common.config import GatewaySettings
from textgen_gateway.common.logging_setup import setup_logging
from textgen_gateway.common.transport import (
    GENERIC_ERROR,
    JSON_CONTENT_TYPE,
    InboundRequest,
    ResponseAlreadySent,
)
from textgen_gateway.gateway.handler import INVALID_JSON, GatewayHandler, build_handlers

LOGGER = logging.getLogger("textgen_gateway.serve_lambda")

_HANDLERS: dict[str, GatewayHandler] | None = None


class LambdaResponseSink:
    """Builds the proxy-integration response dict returned to API Gateway."""

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.result: dict[str, Any] | None = None

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def status(self, code: int) -> "LambdaResponseSink":
        self.status_code = code
        return self

    def json(self, payload: dict[str, Any]) -> None:
        if self.result is not None:
            raise ResponseAlreadySent("response already sent")
        self.headers["Content-Type"] = JSON_CONTENT_TYPE
        self.result = {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": json.dumps(payload),
            "isBase64Encoded": False,
        }


def request_from_event(event: dict[str, Any]) -> InboundRequest:
    """Translate an API Gateway event; the body stays a string for the handler to parse."""
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method", "")
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        body = base64.b64decode(body)
    return InboundRequest(method=str(method), body=body, headers=event.get("headers") or {})


def get_handlers() -> dict[str, GatewayHandler]:
    """Settings and handlers are built once per cold start."""
    global _HANDLERS
    if _HANDLERS is None:
        settings = GatewaySettings()
        setup_logging(settings.log_level)
        _HANDLERS = build_handlers(settings)
    return _HANDLERS


def invoke(provider: str, event: dict[str, Any]) -> dict[str, Any]:
    sink = LambdaResponseSink()
    try:
        handler = get_handlers()[provider]
        try:
            request = request_from_event(event)
        except ValueError:
            return _error_response(400, INVALID_JSON)
        handler.handle(request, sink)
    except Exception:
        LOGGER.exception("Unhandled error in serverless invocation")
        if sink.result is None:
            return _error_response(500, GENERIC_ERROR)
    if sink.result is None:
        LOGGER.error("Handler finished without responding")
        return _error_response(500, GENERIC_ERROR)
    return sink.result


def _error_response(status_code: int, message: str) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": JSON_CONTENT_TYPE},
        "body": json.dumps({"error": message}),
        "isBase64Encoded": False,
    }


def gemini(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    return invoke("gemini", event)


def openai(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    return invoke("openai", event)
