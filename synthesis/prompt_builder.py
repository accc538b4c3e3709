"""
prompt_builder.py -- Three-layer prompt assembly.

Layer 1 (Context): the client's profile, or the session notes, summarised.
Layer 2 (Task): what to generate, with kind-specific instructions.
Layer 3 (Format): the exact section labels the response must use.

Profile free text is clipped to a single line before it is embedded, so an
echoed profile field can never start a labelled section in the response.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from synthesis.classifier import describe_mood
from synthesis.models import (
    ClinicalSynthesisKind,
    ContentAssetKind,
    HomeworkKind,
    NarrativeKind,
    ProfileContext,
    RolePlayKind,
)

logger = logging.getLogger(__name__)

MAX_FIELD_CHARS: int = 200
MAX_HISTORY_ENTRIES: int = 5
MAX_NOTE_CHARS: int = 1200

_WHITESPACE_RE = re.compile(r"\s+")

NARRATIVE_GUIDANCE: dict[str, str] = {
    "story": "Create an allegorical story with characters that mirror their challenges and growth.",
    "meditation": "Create a guided meditation with progressive relaxation and positive visualization.",
    "visualization": "Create a detailed mental journey focusing on overcoming their specific challenge.",
    "allegory": "Create a symbolic narrative that provides insight into their situation through metaphor.",
}

HOMEWORK_GUIDANCE: dict[str, str] = {
    "mindfulness": "Include guided meditations, breathing exercises, and present-moment awareness.",
    "cognitive": "Include thought challenging, reframing exercises, and CBT techniques.",
    "behavioral": "Include activity scheduling, behavioral experiments, and habit building.",
    "journaling": "Include structured prompts, gratitude practice, and emotional processing.",
    "exposure": "Include graduated exposure exercises with anxiety management techniques.",
    "creative": "Include art therapy, creative writing, and expressive activities.",
}

ASSET_GUIDANCE: dict[str, str] = {
    "article": "Structure with clear headings, practical tips, and a compelling call to action.",
    "exercise": "Include step-by-step instructions, variations for different needs, and reflection questions.",
    "worksheet": "Create interactive elements with clear instructions and space for personal reflection.",
    "guide": "Provide comprehensive information with practical steps and resources.",
    "script": "Write a natural, engaging script suitable for audio/video content.",
}


def _clip(text: str, limit: int = MAX_FIELD_CHARS) -> str:
    """Collapse whitespace to single spaces and truncate with an ellipsis."""
    flat = _WHITESPACE_RE.sub(" ", text or "").strip()
    if len(flat) > limit:
        return flat[: limit - 3].rstrip() + "..."
    return flat


def _join(items: list[str], empty: str = "none recorded") -> str:
    cleaned = [_clip(item) for item in items if item and item.strip()]
    return ", ".join(cleaned) if cleaned else empty


def build_profile_layer(profile: ProfileContext, focus: list[str] | None = None) -> str:
    """Layer 1 -- the client as the provider should see them."""
    challenges = focus if focus else profile.challenges
    lines = [
        "CLIENT CONTEXT:",
        f"- Challenges: {_join(challenges, 'general anxiety')}",
        f"- Current Mood: {profile.mood}/5 ({describe_mood(profile.mood)})",
        f"- Therapy Goals: {_join(profile.goals)}",
        f"- Preferences: {_join(profile.preferences)}",
        f"- Known Triggers: {_join(profile.triggers)}",
        f"- Effective Coping Strategies: {_join(profile.coping_strategies)}",
        f"- Current Progress Areas: {_join(profile.progress_areas)}",
    ]
    recent = profile.history[-MAX_HISTORY_ENTRIES:]
    if recent:
        lines.append("- Recent Journal Insights:")
        for entry in recent:
            lines.append(
                f"  * {_clip(entry.date, 40)} (mood {entry.mood}/5): {_clip(entry.content)}"
            )
    return chr(10).join(lines)


def build_session_layer(kind: ClinicalSynthesisKind, profile: ProfileContext) -> str:
    """Layer 1 for clinical synthesis -- the session notes being analysed."""
    notes = kind.session_notes
    lines = [
        "CLIENT INFORMATION:",
        f"- Client ID: {_clip(profile.id, 64) or 'unassigned'}",
        f"- Number of Sessions: {len(notes)}",
        f"- Date Range: {_clip(notes[0].date, 40)} to {_clip(notes[-1].date, 40)}",
        "",
        "SESSION NOTES:",
    ]
    for note in notes:
        lines.append(
            f"* Session {_clip(note.date, 40)} (mood {note.mood}/5): "
            f"{_clip(note.content, MAX_NOTE_CHARS)}"
        )
        if note.interventions:
            lines.append(f"  Interventions: {_join(note.interventions)}")
    return chr(10).join(lines)


def build_task_layer(kind: Any) -> str:
    """Layer 2 -- kind-specific generation instructions."""
    if isinstance(kind, NarrativeKind):
        focus = _clip(kind.specific_challenge) if kind.specific_challenge else "their primary challenge"
        return chr(10).join([
            f"Generate a {kind.subtype} for therapeutic healing and personal growth.",
            "",
            "REQUIREMENTS:",
            f"- Create a {kind.subtype} specifically addressing {focus}",
            "- Incorporate themes of resilience, growth, and hope",
            "- Use metaphors and imagery that resonate with their personal journey",
            "- Include subtle therapeutic insights without being preachy",
            "- Duration: 5-8 minutes of reading/listening",
            "- Tone: Warm, supportive, and empowering",
            f"- {NARRATIVE_GUIDANCE[kind.subtype]}",
        ])
    if isinstance(kind, RolePlayKind):
        scenario = _clip(kind.scenario_type, 80)
        return chr(10).join([
            "Create a dynamic role-playing scenario for therapeutic practice.",
            "",
            "SCENARIO REQUIREMENTS:",
            f"- Type: {scenario}",
            f"- Difficulty: {kind.difficulty}",
            "- Focus: Practice real-world communication and boundary-setting skills",
            "- The AI persona should be realistic but supportive of growth",
            "",
            "The AI character should:",
            "1. Start with realistic resistance or challenges",
            "2. Gradually become more receptive if the user demonstrates good skills",
            "3. Provide natural, human-like responses",
            "4. Adapt based on the user's approach",
        ])
    if isinstance(kind, ClinicalSynthesisKind):
        return chr(10).join([
            "Analyze and synthesize the clinical session notes above for a comprehensive client assessment.",
            "Identify recurring emotional patterns, effective coping mechanisms, mood trends,",
            "therapeutic gains, potential risk factors, and 3-5 specific topics for the next session.",
            "Maintain objectivity while highlighting actionable insights.",
        ])
    if isinstance(kind, HomeworkKind):
        return chr(10).join([
            f"Create a personalized {kind.duration_days}-day therapeutic homework plan.",
            "",
            "HOMEWORK SPECIFICATIONS:",
            f"- Type: {kind.homework_type}",
            f"- Duration: {kind.duration_days} days",
            f"- Difficulty Level: {kind.difficulty}",
            "- Focus: Address primary challenges while building on existing strengths",
            "- Progressive difficulty building over the plan",
            f"- {HOMEWORK_GUIDANCE[kind.homework_type]}",
        ])
    if isinstance(kind, ContentAssetKind):
        return chr(10).join([
            "Create high-quality therapeutic content for a digital mental health platform.",
            "",
            "CONTENT SPECIFICATIONS:",
            f"- Type: {kind.asset_type}",
            f"- Topic: {_clip(kind.topic, 120)}",
            f"- Target Audience: {_join(kind.target_audience, 'clients')}",
            f"- Word Count: ~{kind.word_count_target} words",
            f"- Tone: {kind.tone}",
            "",
            "The content must be evidence-based, accessible, practical, culturally sensitive,",
            "and must encourage professional support where appropriate.",
            f"- {ASSET_GUIDANCE[kind.asset_type]}",
        ])
    raise TypeError(f"Unsupported generation kind: {type(kind).__name__}")


def build_format_layer(kind: Any) -> str:
    """Layer 3 -- the section labels the extractor reads back."""
    if isinstance(kind, NarrativeKind):
        sections = [
            "Title: <one line>",
            "Themes:",
            "- <theme>",
            "",
            f"Then the full {kind.subtype} text as plain paragraphs.",
        ]
    elif isinstance(kind, RolePlayKind):
        sections = [
            "Title: <one line>",
            "Description: <one paragraph>",
            "Context: <one paragraph>",
            "Objective: <one paragraph>",
            "AI Persona:",
            "Role: <one line>",
            "Personality: <one paragraph>",
            "Initial Response: <the persona's opening line>",
            "Adaptation Rules:",
            "- <rule>",
            "User Guidance:",
            "- <tip>",
            "Success Metrics:",
            "- <metric>",
        ]
    elif isinstance(kind, ClinicalSynthesisKind):
        sections = [
            "KEY THEMES:",
            "- <theme>",
            "EMOTIONAL PATTERNS:",
            "- <pattern>",
            "COPING STRATEGIES:",
            "- <strategy>",
            "PROGRESS INDICATORS:",
            "- <indicator>",
            "CONCERN AREAS:",
            "- <concern>",
            "SUGGESTED TOPICS:",
            "- <topic>",
            "MOOD PATTERN: <one paragraph>",
            "ANALYSIS: <one paragraph>",
            "RECOMMENDATIONS:",
            "- <recommendation>",
            "NEXT SESSION FOCUS:",
            "- <focus>",
            "CLINICAL SUMMARY: <about 200 words>",
        ]
    elif isinstance(kind, HomeworkKind):
        sections = [
            "Title: <one line>",
            "Description: <one paragraph>",
            f"Then one block per day, Day 1 through Day {kind.duration_days}:",
            "Day 1: <task title>",
            "Instructions: <what to do>",
            "Duration: <minutes>",
            "Materials:",
            "- <item>",
            "Reflection Prompts:",
            "- <prompt>",
            "",
            "Objectives:",
            "- <objective>",
            "Personalizations:",
            "- <how the plan fits this client>",
            "Progress Tracking:",
            "- <method>",
        ]
    elif isinstance(kind, ContentAssetKind):
        sections = [
            "Title: <one line>",
            f"Then the {kind.asset_type} text itself.",
            "Techniques:",
            "- <technique>",
            "Call to Action: <one sentence>",
            "Tags:",
            "- <tag>",
        ]
    else:
        raise TypeError(f"Unsupported generation kind: {type(kind).__name__}")

    return chr(10).join([
        "FORMAT:",
        "Use exactly these section labels, each at the start of its own line.",
        "List items start with '- '.",
        "",
        *sections,
    ])


def build_prompt(profile: ProfileContext, kind: Any) -> str:
    """
    Assemble the three-layer prompt for one generation request.

    Pure: the same profile and kind always give the same prompt.
    """
    layers: list[str] = []
    # Content assets are written for the platform, not for one client.
    if isinstance(kind, ClinicalSynthesisKind):
        layers.append(build_session_layer(kind, profile))
    elif isinstance(kind, NarrativeKind) and kind.specific_challenge:
        layers.append(build_profile_layer(profile, focus=[kind.specific_challenge]))
    elif not isinstance(kind, ContentAssetKind):
        layers.append(build_profile_layer(profile))
    layers += [build_task_layer(kind), build_format_layer(kind)]
    prompt = (chr(10) + chr(10)).join(layers)

    logger.info(
        "Assembled prompt: kind='%s', %d chars, %d history entries",
        kind.kind,
        len(prompt),
        min(len(profile.history), MAX_HISTORY_ENTRIES),
    )
    return prompt
