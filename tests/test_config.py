from __future__ import annotations

import logging
from pathlib import Path

from textgen_gateway.common.config import GatewaySettings
from textgen_gateway.common.logging_setup import setup_logging


def test_defaults(make_settings) -> None:  # noqa: ANN001
    s = make_settings()
    assert s.gemini_api_key is None
    assert s.gemini_model == "gemini-2.0-flash"
    assert s.gemini_fallback_models == ["gemini-2.0-flash", "gemini-1.5-flash"]
    assert s.port == 3000
    assert s.upstream_timeout is None


def test_gemini_key_alias_order(make_settings) -> None:  # noqa: ANN001
    s = make_settings(GOOGLE_API_KEY="google", AI_STUDIO_API_KEY="studio")
    assert s.gemini_api_key == "google"
    s = make_settings(GEMINI_API_KEY="gemini")
    assert s.gemini_api_key == "gemini"


def test_dotenv_does_not_override_environment(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    env_file = tmp_path / ".env"
    env_file.write_text('PORT=4000\nGEMINI_MODEL="gemini-from-file"\n# comment\n', encoding="utf-8")
    monkeypatch.setenv("PORT", "5000")
    s = GatewaySettings(_env_file=env_file)
    assert s.port == 5000
    assert s.gemini_model == "gemini-from-file"


def test_yaml_file_is_lowest_priority(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    (tmp_path / "gateway.yaml").write_text(
        "gemini_model: yaml-model\ngemini_fallback_models: [x, y]\nopenai_model: yaml-openai\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("OPENAI_MODEL", "env-openai")
    s = GatewaySettings(_env_file=None)
    assert s.gemini_model == "yaml-model"
    assert s.gemini_fallback_models == ["x", "y"]
    assert s.openai_model == "env-openai"


def test_setup_logging_accepts_level_names() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    setup_logging("not-a-level")
    assert logging.getLogger().level == logging.INFO
