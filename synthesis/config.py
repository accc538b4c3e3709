"""
config.py -- Generation settings read from the environment.

Values come from environment variables, with a project-root .env file loaded
first when present. Every setting has a default so the pipeline can run
without any configuration.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_MODEL: str = "claude-sonnet-4-6"
ENV_PATH: Path = Path(__file__).resolve().parent.parent / ".env"


class GenerationSettings(BaseModel):
    """Provider call limits for one generation request."""

    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=4096, ge=1)
    timeout_seconds: float = Field(default=120.0, gt=0)
    max_retries: int = Field(default=0, ge=0)
    initial_backoff_seconds: float = Field(default=2.0, ge=0)
    max_backoff_seconds: float = Field(default=30.0, ge=0)


def load_settings(env_path: Optional[Path] = None) -> GenerationSettings:
    """Build GenerationSettings from CLAUDE_MODEL and GENERATION_* variables."""
    path = env_path or ENV_PATH
    if path.exists():
        load_dotenv(path)
        logger.info("Loaded environment from %s", path)

    settings = GenerationSettings(
        model=os.getenv("CLAUDE_MODEL", DEFAULT_MODEL),
        max_tokens=int(os.getenv("GENERATION_MAX_TOKENS", "4096")),
        timeout_seconds=float(os.getenv("GENERATION_TIMEOUT_SECONDS", "120")),
        max_retries=int(os.getenv("GENERATION_MAX_RETRIES", "0")),
        initial_backoff_seconds=float(os.getenv("GENERATION_BACKOFF_SECONDS", "2")),
    )
    logger.info(
        "Generation settings: model=%s, timeout=%.0fs, max_retries=%d",
        settings.model,
        settings.timeout_seconds,
        settings.max_retries,
    )
    return settings
