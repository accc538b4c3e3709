"""
extractors.py -- Declarative field tables that decompose provider text.

Each generation kind has one FieldExtractorSet: a fixed table of
(field, section label, coercion) rules. Every rule runs on its own, so a
missing section never stops the others. The result holds only the fields
that were found; anything absent is left for the fallback policy.

Nested record fields are addressed with dotted paths ("ai_persona.role").
Homework plans additionally carry a "daily_tasks" entry mapping day number
to the partial task fields found in that day's "Day N:" block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Optional

from synthesis.sections import Block, find_section, remove_spans, split_day_blocks

logger = logging.getLogger(__name__)

ExtractedFields = dict[str, Any]


class Coercion(str, Enum):
    LINE = "line"
    PARAGRAPH = "paragraph"
    SCALAR = "scalar"
    LIST = "list"
    INTEGER = "integer"


def coerce(block: Block, coercion: Coercion) -> Any:
    """Convert a block to the rule's value type. Empty results become None."""
    if coercion is Coercion.LINE:
        value: Any = block.as_line()
    elif coercion is Coercion.PARAGRAPH:
        value = block.as_paragraph()
    elif coercion is Coercion.SCALAR:
        value = block.as_scalar()
    elif coercion is Coercion.LIST:
        value = block.as_list()
    else:
        number = block.as_int()
        value = number if number is not None and number > 0 else None
    if value == "" or value == []:
        return None
    return value


@dataclass(frozen=True)
class FieldRule:
    """Read ``field`` from the section introduced by ``label``."""

    field: str
    label: str
    coercion: Coercion

    def apply(self, text: str) -> Any:
        block = find_section(text, self.label)
        if block is None:
            return None
        return coerce(block, self.coercion)


class FieldExtractorSet(NamedTuple):
    kind: str
    rules: tuple[FieldRule, ...]
    # Sections cut out of the text to form the residual "content" body.
    # (label, whole_section): True removes the label and its first paragraph,
    # False removes the line the value was read from (see Block.as_line).
    body_strip: tuple[tuple[str, bool], ...] = ()


L, P, S, LIST, INT = (
    Coercion.LINE,
    Coercion.PARAGRAPH,
    Coercion.SCALAR,
    Coercion.LIST,
    Coercion.INTEGER,
)

NARRATIVE_FIELDS = FieldExtractorSet(
    kind="narrative",
    rules=(
        FieldRule("title", "title", L),
        FieldRule("themes", "themes", LIST),
    ),
    body_strip=(("title", False), ("themes", True)),
)

ROLE_PLAY_FIELDS = FieldExtractorSet(
    kind="role_play",
    rules=(
        FieldRule("title", "title", L),
        FieldRule("description", "description", P),
        FieldRule("context", "context", P),
        FieldRule("objective", "objective", P),
        FieldRule("ai_persona.role", "role", L),
        FieldRule("ai_persona.personality", "personality", P),
        FieldRule("ai_persona.opening_line", "opening_line", P),
        FieldRule("ai_persona.adaptation_rules", "adaptation_rules", LIST),
        FieldRule("user_guidance", "user_guidance", LIST),
        FieldRule("success_metrics", "success_metrics", LIST),
    ),
)

CLINICAL_FIELDS = FieldExtractorSet(
    kind="clinical_synthesis",
    rules=(
        FieldRule("key_themes", "key_themes", LIST),
        FieldRule("emotional_patterns", "emotional_patterns", LIST),
        FieldRule("coping_strategies", "coping_strategies", LIST),
        FieldRule("progress_indicators", "progress_indicators", LIST),
        FieldRule("concern_areas", "concern_areas", LIST),
        FieldRule("suggested_topics", "suggested_topics", LIST),
        FieldRule("mood_trend.pattern", "mood_pattern", P),
        FieldRule("mood_trend.analysis", "mood_analysis", P),
        FieldRule("mood_trend.recommendations", "recommendations", LIST),
        FieldRule("next_session_focus", "next_session_focus", LIST),
        FieldRule("summary", "summary", S),
    ),
)

HOMEWORK_FIELDS = FieldExtractorSet(
    kind="homework",
    rules=(
        FieldRule("title", "title", L),
        FieldRule("description", "description", P),
        FieldRule("objectives", "objective", LIST),
        FieldRule("personalization_notes", "personalizations", LIST),
        FieldRule("progress_tracking", "progress_tracking", LIST),
    ),
)

DAILY_TASK_RULES: tuple[FieldRule, ...] = (
    FieldRule("title", "title", L),
    FieldRule("instructions", "instructions", S),
    FieldRule("duration_minutes", "duration", INT),
    FieldRule("materials", "materials", LIST),
    FieldRule("reflection_prompts", "reflection_prompts", LIST),
)

# Top-level homework labels that end the last day's block.
DAY_BLOCK_TERMINATORS: list[str] = [
    "objective",
    "personalizations",
    "progress_tracking",
    "description",
    "daily_tasks",
]

CONTENT_ASSET_FIELDS = FieldExtractorSet(
    kind="content_asset",
    rules=(
        FieldRule("title", "title", L),
        FieldRule("techniques", "techniques", LIST),
        FieldRule("call_to_action", "call_to_action", P),
        FieldRule("tags", "tags", LIST),
    ),
    body_strip=(
        ("title", False),
        ("techniques", True),
        ("call_to_action", True),
        ("tags", True),
        ("word_count", False),
    ),
)

FIELD_SETS: dict[str, FieldExtractorSet] = {
    fs.kind: fs
    for fs in (
        NARRATIVE_FIELDS,
        ROLE_PLAY_FIELDS,
        CLINICAL_FIELDS,
        HOMEWORK_FIELDS,
        CONTENT_ASSET_FIELDS,
    )
}


def residual_body(text: str, strip: tuple[tuple[str, bool], ...]) -> str:
    """The text with the given metadata sections cut out, trimmed."""
    spans: list[tuple[int, int]] = []
    for label, whole_section in strip:
        block = find_section(text, label)
        if block is None:
            continue
        end = block.paragraph_end if whole_section else block.value_line_end
        spans.append((block.label_start, end))
    return remove_spans(text, spans).strip()


def _day_heading(block: Block) -> str:
    first_line = block.text.split("\n", 1)[0]
    return first_line.strip().strip("*_").strip()


def extract_daily_task(block: Block) -> dict[str, Any]:
    """Partial DailyTask fields found inside one "Day N:" block."""
    task: dict[str, Any] = {}
    for rule in DAILY_TASK_RULES:
        value = rule.apply(block.text)
        if value is not None:
            task[rule.field] = value

    heading = _day_heading(block)
    if "title" not in task and heading:
        task["title"] = heading
    if "instructions" not in task:
        body = block.text[len(block.text.split("\n", 1)[0]):] if heading else block.text
        leftover = residual_body(
            body,
            (("title", False), ("duration", False), ("materials", True), ("reflection_prompts", True)),
        )
        if leftover:
            task["instructions"] = leftover
    return task


def extract_daily_tasks(day_blocks: dict[int, Block], duration: int) -> dict[int, dict[str, Any]]:
    """Partial tasks for days 1..duration that have a block; others are omitted."""
    tasks: dict[int, dict[str, Any]] = {}
    for day in range(1, duration + 1):
        block = day_blocks.get(day)
        if block is not None:
            tasks[day] = extract_daily_task(block)
    return tasks


def run_rules(rules: tuple[FieldRule, ...], text: str) -> ExtractedFields:
    extracted: ExtractedFields = {}
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            extracted[rule.field] = value
    return extracted


def extract_fields(kind: Any, text: Optional[str]) -> ExtractedFields:
    """
    Decompose provider text into the fields of ``kind``'s record.

    Returns only what was found. Never raises on any input text.
    """
    text = text or ""
    field_set = FIELD_SETS[kind.kind]

    source = text
    day_tasks: dict[int, dict[str, Any]] = {}
    if kind.kind == "homework":
        source, day_blocks = split_day_blocks(text, DAY_BLOCK_TERMINATORS)
        day_tasks = extract_daily_tasks(day_blocks, kind.duration_days)

    extracted = run_rules(field_set.rules, source)
    if kind.kind == "homework":
        extracted["daily_tasks"] = day_tasks

    if field_set.body_strip:
        body = residual_body(text, field_set.body_strip)
        if body:
            extracted["content"] = body

    hits = sum(1 for rule in field_set.rules if rule.field in extracted)
    if kind.kind == "homework":
        logger.info(
            "Extraction for %s: %d/%d sections found, %d/%d day blocks",
            kind.kind,
            hits,
            len(field_set.rules),
            len(day_tasks),
            kind.duration_days,
        )
    else:
        logger.info(
            "Extraction for %s: %d/%d sections found",
            kind.kind,
            hits,
            len(field_set.rules),
        )
    return extracted
