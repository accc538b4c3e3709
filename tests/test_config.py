"""
test_config.py -- Settings from environment variables and .env files.
"""

import os

from synthesis.config import DEFAULT_MODEL, load_settings

ENV_NAMES = (
    "CLAUDE_MODEL",
    "GENERATION_MAX_TOKENS",
    "GENERATION_TIMEOUT_SECONDS",
    "GENERATION_MAX_RETRIES",
    "GENERATION_BACKOFF_SECONDS",
)


def test_defaults_without_environment(tmp_path, monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    settings = load_settings(tmp_path / "missing.env")
    assert settings.model == DEFAULT_MODEL
    assert settings.max_retries == 0
    assert settings.timeout_seconds == 120.0


def test_env_file_is_loaded(tmp_path, monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("GENERATION_MAX_RETRIES=2\nCLAUDE_MODEL=test-model\n", encoding="utf-8")
    try:
        settings = load_settings(env_file)
    finally:
        os.environ.pop("GENERATION_MAX_RETRIES", None)
        os.environ.pop("CLAUDE_MODEL", None)
    assert settings.max_retries == 2
    assert settings.model == "test-model"
