"""
assembler.py -- Merge extracted fields with fallbacks into output records.

Responsibility:
- Overlay extracted values on the kind's complete default field dict
- Compute derived fields (reading time, word count, tags, category, ...)
- Pad homework plans to exactly one task per day
- Stamp identity and timestamp, return an immutable record

Assembly never raises for any provider text. Extraction gaps are resolved
here and only here.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Optional

from synthesis.classifier import (
    build_tags,
    categorize_topic,
    detect_call_to_action,
    detect_techniques,
    detect_themes,
    mentioned_in,
)
from synthesis.extractors import ExtractedFields
from synthesis.fallbacks import (
    DEFAULT_PERSONALIZATION_NOTES,
    DEFAULT_TAGS,
    DEFAULT_TECHNIQUES,
    DEFAULT_THEMES,
    default_daily_task,
    defaults_for,
)
from synthesis.models import (
    AIPersona,
    ClinicalSynthesis,
    ContentAsset,
    DailyTask,
    HomeworkPlan,
    MoodTrend,
    Narrative,
    OutputRecord,
    ProfileContext,
    RolePlayScenario,
)

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE: int = 200

_HEADING_RE = re.compile(r"^[ \t]*#{1,6}[ \t]+(\S.*)$", re.MULTILINE)


def _present(value: Any) -> bool:
    return value is not None and value != "" and value != [] and value != {}


def word_count(text: str) -> int:
    return len(text.split())


def reading_minutes(text: str) -> int:
    """Estimated reading time at WORDS_PER_MINUTE, at least one minute."""
    return max(1, math.ceil(word_count(text) / WORDS_PER_MINUTE))


def merge_fields(
    defaults: dict[str, Any],
    extracted: ExtractedFields,
) -> tuple[dict[str, Any], list[str]]:
    """
    Overlay extracted values on defaults.

    Dotted keys address nested dicts. Keys with no default are ignored, as
    are empty values. Returns the merged dict and the extracted keys used.
    """
    merged = dict(defaults)
    used: list[str] = []
    for key, value in extracted.items():
        if not _present(value):
            continue
        if "." in key:
            parent, child = key.split(".", 1)
            if not isinstance(merged.get(parent), dict) or child not in merged[parent]:
                continue
            merged[parent] = {**merged[parent], child: value}
        elif key in merged and key != "daily_tasks":
            merged[key] = value
        else:
            continue
        used.append(key)
    return merged, used


def _personalization_notes(content: str, profile: Optional[ProfileContext]) -> list[str]:
    if profile is None:
        return list(DEFAULT_PERSONALIZATION_NOTES)
    notes = [f"Addresses {c}" for c in mentioned_in(content, profile.challenges)]
    notes += [f"Incorporates {p}" for p in mentioned_in(content, profile.preferences)]
    return notes or list(DEFAULT_PERSONALIZATION_NOTES)


def _build_narrative(
    kind: Any,
    fields: dict[str, Any],
    extracted: ExtractedFields,
    profile: Optional[ProfileContext],
) -> Narrative:
    content = fields["content"]
    if "themes" not in extracted and "content" in extracted:
        fields["themes"] = detect_themes(content) or list(DEFAULT_THEMES)
    fields["duration"] = reading_minutes(content)
    fields["personalization_notes"] = _personalization_notes(content, profile)
    return Narrative(**fields)


def _build_role_play(
    kind: Any,
    fields: dict[str, Any],
    extracted: ExtractedFields,
    profile: Optional[ProfileContext],
) -> RolePlayScenario:
    fields["ai_persona"] = AIPersona(**fields["ai_persona"])
    return RolePlayScenario(**fields)


def _build_clinical(
    kind: Any,
    fields: dict[str, Any],
    extracted: ExtractedFields,
    profile: Optional[ProfileContext],
) -> ClinicalSynthesis:
    fields["mood_trend"] = MoodTrend(**fields["mood_trend"])
    return ClinicalSynthesis(**fields)


def _build_homework(
    kind: Any,
    fields: dict[str, Any],
    extracted: ExtractedFields,
    profile: Optional[ProfileContext],
) -> HomeworkPlan:
    found: dict[int, dict[str, Any]] = extracted.get("daily_tasks") or {}
    tasks: list[DailyTask] = []
    for day in range(1, kind.duration_days + 1):
        task = default_daily_task(day)
        for key, value in found.get(day, {}).items():
            if key in task and key != "day" and _present(value):
                task[key] = value
        tasks.append(DailyTask(**task))
    fields["daily_tasks"] = tasks
    fields["duration"] = kind.duration_days
    return HomeworkPlan(**fields)


def _build_content_asset(
    kind: Any,
    fields: dict[str, Any],
    extracted: ExtractedFields,
    profile: Optional[ProfileContext],
) -> ContentAsset:
    content = fields["content"]
    if "title" not in extracted:
        heading = _HEADING_RE.search(content)
        title = heading.group(1).rstrip(" \t#").strip() if heading else ""
        if title:
            fields["title"] = title
    if "techniques" not in extracted:
        fields["techniques"] = detect_techniques(content) or list(DEFAULT_TECHNIQUES)
    if "call_to_action" not in extracted:
        fields["call_to_action"] = detect_call_to_action(content) or fields["call_to_action"]
    fields["tags"] = build_tags(kind.topic, content, extracted.get("tags")) or list(DEFAULT_TAGS)
    fields["category"] = categorize_topic(kind.topic)
    fields["word_count"] = word_count(content)
    return ContentAsset(**fields)


_BUILDERS = {
    "narrative": _build_narrative,
    "role_play": _build_role_play,
    "clinical_synthesis": _build_clinical,
    "homework": _build_homework,
    "content_asset": _build_content_asset,
}


def assemble(
    kind: Any,
    extracted: ExtractedFields,
    raw_text: str = "",
    profile: Optional[ProfileContext] = None,
) -> OutputRecord:
    """
    Build the final record for ``kind``.

    Every field takes the extracted value when present and non-empty, else
    the fallback default. ``raw_text`` is only used to log how much of the
    response the extractors covered.
    """
    defaults = defaults_for(kind, profile)
    fields, used = merge_fields(defaults, extracted)
    record = _BUILDERS[kind.kind](kind, fields, extracted, profile)

    days_found = len(extracted.get("daily_tasks") or {})
    logger.info(
        "Assembled %s record %s: %d fields from text, %d day blocks, %d chars of response",
        kind.kind,
        record.id,
        len(used),
        days_found,
        len(raw_text or ""),
    )
    logger.debug("Fields taken from text for %s: %s", kind.kind, used)
    return record
