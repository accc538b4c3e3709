"""
sections.py -- Locate labelled sections in free-form provider text.

A section starts at a line that begins with a known label followed by a colon
("KEY THEMES:", "**Objective:**", "3. Coping Strategies:") and runs until the
next line that starts with any known label, a "Day N:" marker, or the end of
the text. Markdown decoration around the label is tolerated.

Nothing in this module raises on bad input: a label that is not present
yields None, and every Block accessor returns an empty value rather than
failing.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Label registry -- every label here also acts as a section boundary
# ---------------------------------------------------------------------------

LABELS: dict[str, str] = {
    "title": r"title",
    "description": r"description",
    "themes": r"themes?",
    "context": r"(?:scenario\s+)?context",
    "objective": r"objectives?",
    "ai_persona": r"ai\s+persona",
    "role": r"(?:ai\s+)?role",
    "personality": r"personality",
    "opening_line": r"(?:initial\s+response|opening\s+line)",
    "adaptation_rules": r"adaptation\s+rules?",
    "user_guidance": r"(?:user\s+)?guidance",
    "success_metrics": r"success\s+metrics?",
    "key_themes": r"key\s+(?:emotional\s+)?themes?",
    "emotional_patterns": r"emotional\s+patterns?",
    "coping_strategies": r"coping\s+strateg(?:y|ies)",
    "progress_indicators": r"progress\s+indicators?",
    "concern_areas": r"(?:concern\s+areas?|areas?\s+of\s+concern)",
    "suggested_topics": r"suggested\s+(?:discussion\s+)?topics?",
    "mood_trend": r"mood\s+trends?(?:\s+analysis)?",
    "mood_pattern": r"(?:mood\s+(?:trend\s+)?)?pattern",
    "mood_analysis": r"(?:mood\s+)?analysis",
    "recommendations": r"(?:mood\s+)?recommendations?",
    "next_session_focus": r"next\s+session\s+(?:focus|recommendations?)",
    "summary": r"(?:clinical\s+)?summary",
    "daily_tasks": r"daily\s+tasks?",
    "instructions": r"instructions?",
    "duration": r"duration",
    "materials": r"materials?(?:\s+needed)?",
    "reflection_prompts": r"reflection(?:\s+(?:prompts?|questions?))?",
    "personalizations": r"(?:client\s+)?personali[sz]ations?(?:\s+notes?)?",
    "progress_tracking": r"progress\s+tracking",
    "techniques": r"(?:key\s+)?techniques?",
    "call_to_action": r"call\s+to\s+action",
    "tags": r"tags?",
    "word_count": r"(?:estimated\s+)?word\s+count",
}

# Whitespace runs are followed by a non-blank lookahead so they never give
# characters back; a long blank line is then scanned once per search.
_WS = r"[ \t]*(?![ \t])"
_PREFIX = (
    r"^" + _WS + r"(?:#{1,6}" + _WS + r")?(?:[-*•][ \t]" + _WS + r")?"
    r"(?:\d{1,2}[.)]" + _WS + r")?(?:(?:\*\*|__)" + _WS + r")?"
)
_SUFFIX = _WS + r"(?:(?:\*\*|__)" + _WS + r")?:(?:" + _WS + r"(?:\*\*|__))?"
_DAY_MARKER = (
    r"^" + _WS + r"(?:#{1,6}" + _WS + r")?(?:(?:\*\*|__)" + _WS + r")?"
    r"day[ \t]" + _WS + r"(?P<day>\d{1,2})"
    + _WS + r"(?:(?:\*\*|__)" + _WS + r")?[:\-–—](?:" + _WS + r"(?:\*\*|__))?"
)
_FLAGS = re.IGNORECASE | re.MULTILINE

_BULLET_RE = re.compile(r"^[-*•](?!\*)\s*")
# Digit runs longer than six are not read as numbers at all.
_INT_RE = re.compile(r"(?<!\d)\d{1,6}(?!\d)")
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")


def _label_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(_PREFIX + "(?:" + pattern + ")" + _SUFFIX, _FLAGS)


DAY_MARKER_RE: re.Pattern[str] = re.compile(_DAY_MARKER, _FLAGS)
_BOUNDARY_RE: re.Pattern[str] = re.compile(
    "(?:"
    + _PREFIX
    + "(?:"
    + "|".join(LABELS.values())
    + ")"
    + _SUFFIX
    + ")|(?:"
    + _DAY_MARKER
    + ")",
    _FLAGS,
)
_LABEL_RES: dict[str, re.Pattern[str]] = {
    name: _label_regex(pattern) for name, pattern in LABELS.items()
}


class Block(BaseModel):
    """The text of one section, with its position in the source text."""

    model_config = ConfigDict(frozen=True)

    text: str
    label_start: int = 0
    start: int = 0
    end: int = 0

    def as_scalar(self) -> str:
        return self.text.strip()

    def _value_line(self) -> tuple[str, int]:
        # The label line, or the line right below a bare label; never past a blank line.
        offset = 0
        for line in self.text.split("\n")[:2]:
            offset += len(line) + 1
            cleaned = line.strip().strip("*_").strip()
            if cleaned:
                return cleaned, min(offset, len(self.text))
        return "", -1

    def as_line(self) -> str:
        """Value on the label line (or the next line), without markdown emphasis."""
        return self._value_line()[0]

    def as_paragraph(self) -> str:
        """Text up to the first blank line."""
        return _BLANK_LINE_RE.split(self.text.strip(), maxsplit=1)[0].strip()

    def as_list(self) -> list[str]:
        """Bullet items in order, markers and whitespace stripped."""
        items: list[str] = []
        for line in self.text.splitlines():
            stripped = line.strip()
            if not _BULLET_RE.match(stripped):
                continue
            item = _BULLET_RE.sub("", stripped, count=1).strip()
            if item:
                items.append(item)
        return items

    def as_int(self) -> Optional[int]:
        match = _INT_RE.search(self.text)
        return int(match.group(0)) if match else None

    @property
    def label_line_end(self) -> int:
        """Offset just past the line holding the label."""
        newline = self.text.find("\n")
        return self.end if newline == -1 else self.start + newline + 1

    @property
    def value_line_end(self) -> int:
        """Offset just past the line that as_line() reads its value from."""
        value, offset = self._value_line()
        return self.start + offset if value else self.label_line_end

    @property
    def paragraph_end(self) -> int:
        """Offset just past the first paragraph after the label."""
        lead = len(self.text) - len(self.text.lstrip())
        match = _BLANK_LINE_RE.search(self.text, lead)
        return self.end if match is None else self.start + match.start() + 1


def label_regex(label: str) -> re.Pattern[str]:
    """Compiled regex for a registered label name or a raw label pattern."""
    compiled = _LABEL_RES.get(label)
    if compiled is None:
        compiled = _label_regex(label)
    return compiled


def _next_boundary(text: str, pos: int, boundary: re.Pattern[str]) -> int:
    match = boundary.search(text, pos)
    return match.start() if match else len(text)


def find_section(
    text: str,
    label: str,
    boundary: Optional[re.Pattern[str]] = None,
) -> Optional[Block]:
    """
    Find the first section introduced by ``label``.

    ``label`` is a key of LABELS or a raw regex for the label words. The
    returned block starts right after the label's colon (so an inline value
    on the label line is included) and stops at the next boundary line.
    """
    if not text:
        return None
    match = label_regex(label).search(text)
    if match is None:
        return None
    start = match.end()
    end = _next_boundary(text, start, boundary or _BOUNDARY_RE)
    return Block(text=text[start:end], label_start=match.start(), start=start, end=end)


def boundary_for(labels: list[str]) -> re.Pattern[str]:
    """Boundary regex matching only the given labels and day markers."""
    patterns = "|".join(LABELS[name] for name in labels)
    return re.compile(
        "(?:" + _PREFIX + "(?:" + patterns + ")" + _SUFFIX + ")|(?:" + _DAY_MARKER + ")",
        _FLAGS,
    )


def split_day_blocks(
    text: str,
    terminators: list[str],
) -> tuple[str, dict[int, Block]]:
    """
    Cut "Day N:" blocks out of ``text``.

    Each day block runs from its marker to the next day marker or the next
    line starting with one of the ``terminators`` labels. Returns the text
    with all day blocks removed, and the blocks keyed by day number (first
    occurrence wins).
    """
    if not text:
        return "", {}
    stop = boundary_for(terminators)
    blocks: dict[int, Block] = {}
    spans: list[tuple[int, int]] = []
    for match in DAY_MARKER_RE.finditer(text):
        start = match.end()
        end = _next_boundary(text, start, stop)
        spans.append((match.start(), end))
        day = int(match.group("day"))
        if day not in blocks:
            blocks[day] = Block(text=text[start:end], label_start=match.start(), start=start, end=end)
    if len(spans) > len(blocks):
        logger.debug("Ignored %d repeated day markers", len(spans) - len(blocks))
    return remove_spans(text, spans), blocks


def remove_spans(text: str, spans: list[tuple[int, int]]) -> str:
    """Delete the given (start, end) spans from text; overlaps are merged."""
    if not spans:
        return text
    pieces: list[str] = []
    cursor = 0
    for start, end in sorted(spans):
        if end <= cursor:
            continue
        pieces.append(text[cursor:max(start, cursor)])
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)
