"""Gateway handler: validate, call the provider, normalize the result.

The handler is transport-neutral. Transports call ``handle(request, response)``
with an InboundRequest-shaped object and a ResponseSink.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from textgen_gateway.common.config import GatewaySettings
from textgen_gateway.common.errors import (
    ConfigurationError,
    GatewayError,
    MethodNotAllowedError,
    ValidationError,
)
from textgen_gateway.common.schema import (
    MISSING_PROMPT,
    GenerationRequest,
    GenerationResult,
    parse_generation_request,
)
from textgen_gateway.common.transport import InboundRequest, ResponseSink
from textgen_gateway.providers.base import Provider
from textgen_gateway.providers.gemini import GeminiProvider
from textgen_gateway.providers.openai_compat import OpenAICompatProvider

LOGGER = logging.getLogger("textgen_gateway.gateway")

INVALID_JSON = "Request body must be valid JSON."
METHOD_NOT_ALLOWED = "Method not allowed. Use POST."


class GatewayHandler:
    def __init__(self, provider: Provider) -> None:
        self.provider = provider

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one normalized request through the provider."""
        try:
            if not request.prompt:
                raise ValidationError(MISSING_PROMPT)
            self._require_credential()
            text = self.provider.generate(request)
        except GatewayError as e:
            return GenerationResult.failure(e.message, e.status_code)
        return GenerationResult.success(text)

    def handle(self, request: InboundRequest, response: ResponseSink) -> None:
        try:
            if request.method.upper() != "POST":
                response.set_header("Allow", "POST")
                raise MethodNotAllowedError(METHOD_NOT_ALLOWED)
            self._require_credential()
            body = _decode_body(request.body)
            result = self.generate(parse_generation_request(body))
        except GatewayError as e:
            result = GenerationResult.failure(e.message, e.status_code)

        if result.ok:
            LOGGER.info("%s generated %d chars", self.provider.label, len(result.text or ""))
        else:
            LOGGER.warning("%s request failed (%s): %s", self.provider.label, result.status_code, result.error)
        response.status(result.status_code).json(result.payload())

    def _require_credential(self) -> None:
        if not self.provider.api_key:
            raise ConfigurationError(self.provider.missing_key_message())


def _decode_body(body: Any) -> Any:
    if not isinstance(body, (str, bytes, bytearray)):
        return body
    try:
        text = body if isinstance(body, str) else body.decode("utf-8")
        return json.loads(text) if text.strip() else {}
    except ValueError as e:
        raise ValidationError(INVALID_JSON) from e


def build_providers(settings: GatewaySettings) -> list[Provider]:
    return [GeminiProvider(settings), OpenAICompatProvider(settings)]


def build_handlers(settings: GatewaySettings) -> dict[str, GatewayHandler]:
    """Map each provider name to its handler, e.g. {"gemini": GatewayHandler(...)}."""
    return {p.name: GatewayHandler(p) for p in build_providers(settings)}
