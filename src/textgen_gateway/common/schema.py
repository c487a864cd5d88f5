"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from textgen_gateway.common.errors import ValidationError

MISSING_PROMPT = "Missing required field: prompt."


class GenerationRequest(BaseModel):
    """Normalized generate-text request, built from the inbound JSON body.

    Text fields are trimmed and non-string values count as absent, so a
    blank prompt is always the empty string.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    prompt: str = ""
    system_instruction: str = Field(default="", alias="systemInstruction")
    is_json: bool = Field(default=False, alias="isJson")

    @field_validator("prompt", "system_instruction", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("is_json", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


def parse_generation_request(body: Any) -> GenerationRequest:
    """
    Validate a decoded JSON body into a GenerationRequest.

    Args:
        body: Decoded JSON value; anything but an object is treated as empty.

    Raises:
        ValidationError: when the prompt is missing or blank.
    """
    if not isinstance(body, dict):
        body = {}
    request = GenerationRequest.model_validate(body)
    if not request.prompt:
        raise ValidationError(MISSING_PROMPT)
    return request


@dataclass(frozen=True)
class GenerationResult:
    """Either generated text (status 200) or an error with its status."""
    status_code: int
    text: str | None = None
    error: str | None = None

    @classmethod
    def success(cls, text: str) -> "GenerationResult":
        return cls(status_code=200, text=text)

    @classmethod
    def failure(cls, error: str, status_code: int) -> "GenerationResult":
        return cls(status_code=status_code, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def payload(self) -> dict[str, str]:
        if self.error is not None:
            return {"error": self.error}
        return {"text": self.text or ""}
