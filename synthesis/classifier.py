"""
classifier.py -- Keyword classification of topics and generated prose.

Responsibility:
- Map a free-form content topic to a content category
- Detect named therapeutic techniques and story themes in generated content
- Build a bounded tag list from the topic and content
- Describe a 1-5 mood rating in words
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY: str = "General Wellness"
MAX_TAGS: int = 8

CATEGORY_MAP: dict[str, str] = {
    "anxiety": "Anxiety Management",
    "depression": "Depression Support",
    "stress": "Stress Management",
    "mindfulness": "Mindfulness & Meditation",
    "relationship": "Relationship Skills",
    "communication": "Communication Skills",
    "sleep": "Sleep & Wellness",
    "trauma": "Trauma Recovery",
    "addiction": "Addiction Recovery",
}

KNOWN_TECHNIQUES: list[str] = [
    "Cognitive Behavioral Therapy",
    "Mindfulness",
    "Deep Breathing",
    "Progressive Relaxation",
    "Grounding Techniques",
    "Thought Challenging",
    "Behavioral Activation",
    "Exposure Therapy",
    "EMDR",
    "Dialectical Behavior Therapy",
    "Acceptance and Commitment Therapy",
]

COMMON_TAGS: list[str] = [
    "mental health",
    "therapy",
    "wellness",
    "coping",
    "healing",
    "growth",
    "mindfulness",
    "anxiety",
    "depression",
    "stress",
    "resilience",
]

CALL_TO_ACTION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bremember\b.*\bsupport\b", re.IGNORECASE),
    re.compile(r"\bseek\b.*\bprofessional\b", re.IGNORECASE),
    re.compile(r"\bcontact\b.*\btherapist\b", re.IGNORECASE),
    re.compile(r"\breach\s+out\b", re.IGNORECASE),
]

THEME_KEYWORDS: list[str] = [
    "resilience",
    "growth",
    "hope",
    "courage",
    "peace",
    "strength",
    "healing",
    "transformation",
]

_SENTENCE_RE = re.compile(r"[^.!?\n]+[.!?]?")

_STOPWORDS: set[str] = {"a", "an", "and", "for", "in", "of", "on", "the", "to", "with"}


def categorize_topic(topic: str) -> str:
    """Map a content topic to its category, or the general category."""
    normalized = topic.strip().lower()
    for keyword, category in CATEGORY_MAP.items():
        if keyword in normalized:
            return category
    logger.debug("No category keyword in topic %r, using %s", topic, DEFAULT_CATEGORY)
    return DEFAULT_CATEGORY


def detect_techniques(content: str) -> list[str]:
    """Named techniques that appear in the content, in catalogue order."""
    lowered = content.lower()
    return [t for t in KNOWN_TECHNIQUES if t.lower() in lowered]


def detect_call_to_action(content: str) -> str:
    """First sentence of the content that reads like a call to action."""
    sentences = [m.group(0).strip() for m in _SENTENCE_RE.finditer(content)]
    for pattern in CALL_TO_ACTION_PATTERNS:
        for sentence in sentences:
            if sentence and pattern.search(sentence):
                return sentence
    return ""


def detect_themes(content: str) -> list[str]:
    """Theme keywords the content mentions, in keyword order."""
    lowered = content.lower()
    return [theme for theme in THEME_KEYWORDS if theme in lowered]


def build_tags(topic: str, content: str, extra: list[str] | None = None) -> list[str]:
    """Topic words, then explicit tags, then common tags found in the content."""
    tags: list[str] = []

    def add(tag: str) -> None:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in tags:
            tags.append(cleaned)

    for word in re.findall(r"[a-z0-9'-]+", topic.lower()):
        if word not in _STOPWORDS:
            add(word)
    for tag in extra or []:
        add(tag)
    lowered = content.lower()
    for tag in COMMON_TAGS:
        if tag in lowered:
            add(tag)
    return tags[:MAX_TAGS]


def describe_mood(mood: int) -> str:
    """Plain-language description of a 1-5 mood rating."""
    if mood <= 1:
        return "Very low mood - needing immediate support and gentle encouragement"
    if mood <= 2:
        return "Low mood - requiring compassionate support and hope"
    if mood <= 3:
        return "Moderate mood - open to growth and positive messaging"
    if mood <= 4:
        return "Good mood - ready for challenges and empowerment"
    return "Very positive mood - celebrating progress and building on strengths"


def mentioned_in(content: str, phrases: list[str]) -> list[str]:
    """Phrases from the list that the content mentions, case-insensitively."""
    lowered = content.lower()
    return [p for p in phrases if p.strip() and p.strip().lower() in lowered]
