"""
profile_json.py -- Adapter for client profiles exported as JSON.

Accepts the web application's camelCase export (therapyGoals, journalEntries,
copingStrategies, ...) as well as snake_case field names.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from synthesis.models import ProfileContext, SessionNote

logger = logging.getLogger(__name__)


def _read_json(path: Union[str, Path]) -> Any:
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Profile file not found: {json_path}")
    with open(json_path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_profile(path: Union[str, Path]) -> ProfileContext:
    """Load one ProfileContext from a JSON object file."""
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    profile = ProfileContext.model_validate(data)
    logger.info(
        "Loaded profile '%s': %d challenges, %d journal entries",
        profile.id or "anonymous",
        len(profile.challenges),
        len(profile.history),
    )
    return profile


def load_session_notes(path: Union[str, Path]) -> list[SessionNote]:
    """Load session notes from a JSON array file, or an object with a "sessionNotes" array."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("sessionNotes", data.get("session_notes", []))
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of session notes in {path}")
    notes = [SessionNote.model_validate(item) for item in data]
    logger.info("Loaded %d session notes from %s", len(notes), Path(path).name)
    return notes
