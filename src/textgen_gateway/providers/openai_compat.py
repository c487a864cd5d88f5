"""OpenAI-compatible chat completions provider.

Works against api.openai.com or any server exposing the same API (vLLM, etc.).
A single configured model; upstream failures are surfaced as-is.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from textgen_gateway.common.config import GatewaySettings
from textgen_gateway.common.errors import (
    UpstreamEmptyError,
    UpstreamRequestError,
    UpstreamUnreachableError,
)
from textgen_gateway.common.schema import GenerationRequest
from textgen_gateway.providers.base import decode_json, error_message

LOGGER = logging.getLogger("textgen_gateway.providers.openai")


class OpenAICompatProvider:
    name = "openai"
    label = "OpenAI"

    def __init__(self, settings: GatewaySettings) -> None:
        self.settings = settings
        self.base_url = settings.openai_base_url.rstrip("/")
        self.model = settings.openai_model

    @property
    def api_key(self) -> str | None:
        return self.settings.openai_api_key

    def missing_key_message(self) -> str:
        return "Missing OpenAI API key. Set OPENAI_API_KEY in your environment and redeploy/restart."

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        messages = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        messages.append({"role": "user", "content": request.prompt})
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
        }
        if request.is_json:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def generate(self, request: GenerationRequest) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = self.build_payload(request)

        try:
            with httpx.Client(timeout=self.settings.upstream_timeout) as client:
                r = client.post(url, headers=headers, json=payload)
        except httpx.RequestError as e:
            LOGGER.error("OpenAI request failed: %s", e)
            raise UpstreamUnreachableError("Failed to reach OpenAI API.") from e

        data = decode_json(r)
        if not r.is_success:
            message = error_message(data, "OpenAI request failed.")
            LOGGER.error("OpenAI rejected request (%s): %s", r.status_code, message)
            raise UpstreamRequestError(message, r.status_code)

        text = extract_text(data)
        if not text:
            raise UpstreamEmptyError("OpenAI returned an empty response.")
        return text


def extract_text(data: dict[str, Any]) -> str:
    """First non-empty message content across the returned choices."""
    choices = data.get("choices")
    if not isinstance(choices, list):
        return ""
    for choice in choices:
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str) and content.strip():
            return content.strip()
    return ""
