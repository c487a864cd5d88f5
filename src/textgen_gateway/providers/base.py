from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Protocol, TypeVar

import httpx

from textgen_gateway.common.errors import (
    UpstreamModelUnavailable,
    UpstreamRequestError,
)
from textgen_gateway.common.schema import GenerationRequest

LOGGER = logging.getLogger("textgen_gateway.providers")

T = TypeVar("T")

MODEL_UNAVAILABLE_STATUSES = {400, 404}
# Matched against provider wording, which can change without notice.
MODEL_UNAVAILABLE_MARKERS = ("not found", "unsupported", "not available")


class Provider(Protocol):
    name: str
    label: str

    @property
    def api_key(self) -> str | None:
        ...

    def missing_key_message(self) -> str:
        ...

    def generate(self, request: GenerationRequest) -> str:
        """Return the generated text or raise a GatewayError."""
        ...


def candidate_models(preferred: str | None, fallbacks: Iterable[str]) -> list[str]:
    """Preferred model first, then fallbacks; blanks and duplicates dropped."""
    ordered = [preferred or "", *fallbacks]
    return list(dict.fromkeys(m.strip() for m in ordered if m and m.strip()))


def is_model_unavailable(status_code: int, message: str) -> bool:
    """Heuristic: does this failure blame the model rather than the request?"""
    if status_code not in MODEL_UNAVAILABLE_STATUSES:
        return False
    lowered = str(message).lower()
    return any(marker in lowered for marker in MODEL_UNAVAILABLE_MARKERS)


def run_with_fallback(models: list[str], attempt: Callable[[str], T]) -> T:
    """
    Call ``attempt`` for each model in order until one does not report the model unavailable.

    Args:
        models: Ordered candidate list, at least one entry.
        attempt: Performs one upstream call; raises UpstreamModelUnavailable to move on.

    Raises:
        UpstreamRequestError: the last observed failure once every candidate is exhausted.
    """
    if not models:
        raise ValueError("at least one model candidate is required")
    failures: list[UpstreamModelUnavailable] = []
    for model in models:
        try:
            return attempt(model)
        except UpstreamModelUnavailable as exc:
            LOGGER.warning("Model %s unavailable (%s): %s", model, exc.status_code, exc.message)
            failures.append(exc)
    last = failures[-1]
    raise UpstreamRequestError(last.message, last.status_code) from last


def decode_json(response: httpx.Response) -> dict[str, Any]:
    """Decoded JSON object body, or {} when the body is not a JSON object."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_message(data: dict[str, Any], default: str) -> str:
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return default
