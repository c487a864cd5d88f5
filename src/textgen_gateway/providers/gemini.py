"""Google Gemini provider (generateContent), with model fallback.

Endpoint: POST {base_url}/models/{model}:generateContent?key=...
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from textgen_gateway.common.config import GatewaySettings
from textgen_gateway.common.errors import (
    UpstreamEmptyError,
    UpstreamModelUnavailable,
    UpstreamRequestError,
    UpstreamUnreachableError,
)
from textgen_gateway.common.schema import GenerationRequest
from textgen_gateway.providers.base import (
    candidate_models,
    decode_json,
    error_message,
    is_model_unavailable,
    run_with_fallback,
)

LOGGER = logging.getLogger("textgen_gateway.providers.gemini")


class GeminiProvider:
    name = "gemini"
    label = "Gemini"

    def __init__(self, settings: GatewaySettings) -> None:
        self.settings = settings
        self.base_url = settings.gemini_base_url.rstrip("/")
        self.models = candidate_models(settings.gemini_model, settings.gemini_fallback_models)

    @property
    def api_key(self) -> str | None:
        return self.settings.gemini_api_key

    def missing_key_message(self) -> str:
        return (
            "Missing Gemini API key. Set GEMINI_API_KEY (or GOOGLE_API_KEY) "
            "in your environment and redeploy/restart."
        )

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": request.prompt}]}]}
        if request.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": request.system_instruction}]}
        if request.is_json:
            payload["generationConfig"] = {"responseMimeType": "application/json"}
        return payload

    def endpoint(self, model: str) -> str:
        return f"{self.base_url}/models/{quote(model, safe='')}:generateContent"

    def generate(self, request: GenerationRequest) -> str:
        payload = self.build_payload(request)
        try:
            with httpx.Client(timeout=self.settings.upstream_timeout) as client:
                data = run_with_fallback(
                    self.models, lambda model: self._call(client, model, payload)
                )
        except httpx.RequestError as e:
            LOGGER.error("Gemini request failed: %s", e)
            raise UpstreamUnreachableError("Failed to reach Gemini API.") from e

        text = extract_text(data)
        if not text:
            raise UpstreamEmptyError("Gemini returned an empty response.")
        return text

    def _call(self, client: httpx.Client, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        r = client.post(self.endpoint(model), params={"key": self.api_key}, json=payload)
        data = decode_json(r)
        if r.is_success:
            LOGGER.debug("Gemini model %s answered", model)
            return data

        message = error_message(data, "Gemini request failed.")
        if is_model_unavailable(r.status_code, message):
            raise UpstreamModelUnavailable(message, r.status_code)
        LOGGER.error("Gemini rejected request on model %s (%s): %s", model, r.status_code, message)
        raise UpstreamRequestError(message, r.status_code)


def extract_text(data: dict[str, Any]) -> str:
    """Join the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    first = candidates[0] if isinstance(candidates, list) and candidates else {}
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = [p.get("text") for p in parts if isinstance(p, dict)]
    return "\n".join(t if isinstance(t, str) else "" for t in texts).strip()
