"""Process-wide gateway settings, read once at startup.

Sources, highest priority first: keyword arguments, the process environment,
a ``.env`` file, then an optional ``gateway.yaml``. Values already present in
the environment always win over the ``.env`` file.
"""
from __future__ import annotations
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_GEMINI_FALLBACKS = ["gemini-2.0-flash", "gemini-1.5-flash"]


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="gateway.yaml",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "AI_STUDIO_API_KEY"),
    )
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_fallback_models: list[str] = Field(default_factory=lambda: list(DEFAULT_GEMINI_FALLBACKS))
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    host: str = "127.0.0.1"
    port: int = 3000
    static_root: Path = Path(".")
    log_level: str = "INFO"
    # None disables client timeouts entirely.
    upstream_timeout: float | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )
