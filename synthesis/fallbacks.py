"""
fallbacks.py -- Default values for every field of every output record.

The assembler uses a default whenever extraction found nothing (or found an
empty value) for a field, which is what guarantees a fully populated record
for any provider text, including the empty string.

Defaults depend only on the generation kind's parameters and, for the
client-facing kinds, on the profile. They never depend on provider text.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from synthesis.classifier import describe_mood
from synthesis.models import (
    ClinicalSynthesisKind,
    ContentAssetKind,
    HomeworkKind,
    NarrativeKind,
    ProfileContext,
    RolePlayKind,
)

# ---------------------------------------------------------------------------
# Narrative
# ---------------------------------------------------------------------------

DEFAULT_THEMES: list[str] = ["resilience", "growth", "hope"]
DEFAULT_CHALLENGE: str = "general anxiety"
DEFAULT_PERSONALIZATION_NOTES: list[str] = [
    "Written for your current challenges",
    "Paced for your present mood",
]
DEFAULT_NARRATIVE_CONTENT: dict[str, str] = {
    "story": (
        "There was once a traveller who carried a heavy pack up a long hill. "
        "Each morning the pack felt a little lighter, not because the road grew "
        "easier, but because the traveller learned where to rest, whom to ask for "
        "help, and how to notice the view. One evening, looking back, the traveller "
        "saw how far they had come, and understood that every small step had counted."
    ),
    "meditation": (
        "Find a comfortable position and let your eyes soften. Breathe in slowly "
        "through your nose, and breathe out a little longer than you breathed in. "
        "Notice where your body meets the chair or the floor. With each breath, let "
        "your shoulders settle. If thoughts arrive, greet them and let them pass like "
        "clouds. Stay here for a few more breaths, knowing you can return whenever you need."
    ),
    "visualization": (
        "Picture a quiet path at the edge of a forest in the early morning. The air is "
        "cool and the light is soft. As you walk, each step feels steady and sure. Ahead "
        "is a clearing where you can see yourself handling today's challenge calmly, "
        "speaking clearly and feeling grounded. Hold that picture, and carry its calm "
        "with you as you return to the room."
    ),
    "allegory": (
        "A small river once believed the stone in its path would stop it forever. It "
        "pushed and pushed and grew tired. Then it began to move around the stone, "
        "finding a new channel, and in time it carved a valley no one had imagined. "
        "The stone was still there, but the river had become something larger than its obstacle."
    ),
}

# ---------------------------------------------------------------------------
# Role play
# ---------------------------------------------------------------------------

DEFAULT_ROLE_PLAY: dict[str, Any] = {
    "context": "Practice scenario context",
    "objective": "Build communication skills",
    "ai_persona": {
        "role": "Colleague",
        "personality": "Professional but demanding",
        "opening_line": '"I need this done immediately."',
        "adaptation_rules": [
            "Becomes more understanding with clear communication",
            "Responds positively to firm boundaries",
        ],
    },
    "user_guidance": [
        "Stay calm and clear",
        'Use "I" statements',
        "Be specific about your needs",
    ],
    "success_metrics": [
        "Clear communication",
        "Maintained boundaries",
        "Positive resolution",
    ],
}

# ---------------------------------------------------------------------------
# Clinical synthesis
# ---------------------------------------------------------------------------

UNASSIGNED_CLIENT_ID: str = "unassigned"

DEFAULT_CLINICAL: dict[str, Any] = {
    "key_themes": ["Anxiety management", "Stress coping", "Communication skills"],
    "emotional_patterns": ["Mood variability", "Stress responses", "Emotional regulation"],
    "coping_strategies": ["Deep breathing", "Mindfulness practice", "Social support"],
    "progress_indicators": [
        "Improved mood stability",
        "Better sleep patterns",
        "Increased confidence",
    ],
    "concern_areas": ["Sleep disturbances", "Social anxiety", "Work stress"],
    "suggested_topics": [
        "Stress management techniques",
        "Sleep hygiene",
        "Communication skills",
    ],
    "mood_trend": {
        "pattern": "Variable with weekly cycles",
        "analysis": "Mood shows improvement with therapy engagement",
        "recommendations": [
            "Continue current interventions",
            "Monitor sleep patterns",
            "Practice daily mindfulness",
        ],
    },
    "next_session_focus": [
        "Review homework progress",
        "Explore new coping strategies",
        "Address current stressors",
    ],
    "summary": (
        "Client showing steady progress with continued therapy engagement "
        "and skill development."
    ),
}

# ---------------------------------------------------------------------------
# Homework
# ---------------------------------------------------------------------------

DEFAULT_TASK_MINUTES: int = 15
DEFAULT_REFLECTION_PROMPTS: list[str] = [
    "How did this exercise make you feel?",
    "What insights did you gain today?",
]

DEFAULT_HOMEWORK: dict[str, Any] = {
    "description": "Personalized therapeutic homework to support your healing journey.",
    "objectives": [
        "Build coping skills",
        "Increase self-awareness",
        "Practice daily mindfulness",
    ],
    "personalization_notes": [
        "Tailored to your specific challenges",
        "Incorporates your preferences",
        "Builds on your strengths",
    ],
    "progress_tracking": [
        "Daily mood ratings",
        "Exercise completion",
        "Personal insights journal",
    ],
}

# ---------------------------------------------------------------------------
# Content asset
# ---------------------------------------------------------------------------

DEFAULT_CONTENT_TITLE: str = "Therapeutic Content"
DEFAULT_CALL_TO_ACTION: str = "Remember, professional support is available when you need it."
DEFAULT_TECHNIQUES: list[str] = ["Mindfulness", "Deep Breathing"]
DEFAULT_TAGS: list[str] = ["mental health", "wellness"]


def _capitalize(text: str) -> str:
    text = text.strip()
    return text[:1].upper() + text[1:]


def default_daily_task(day: int) -> dict[str, Any]:
    """A complete DailyTask field dict for a day the provider did not describe."""
    return {
        "day": day,
        "title": f"Day {day} Practice",
        "instructions": "Continue with your personalized exercises for the day.",
        "duration_minutes": DEFAULT_TASK_MINUTES,
        "materials": [],
        "reflection_prompts": list(DEFAULT_REFLECTION_PROMPTS),
    }


def narrative_challenges(kind: NarrativeKind, profile: Optional[ProfileContext]) -> list[str]:
    if kind.specific_challenge and kind.specific_challenge.strip():
        return [kind.specific_challenge.strip()]
    if profile and profile.challenges:
        return list(profile.challenges)
    return [DEFAULT_CHALLENGE]


def mood_context(profile: Optional[ProfileContext]) -> str:
    if profile is None:
        return "Mood not recorded"
    return f"{profile.mood}/5 - {describe_mood(profile.mood)}"


def _narrative_defaults(kind: NarrativeKind, profile: Optional[ProfileContext]) -> dict[str, Any]:
    return {
        "title": f"Personalized {_capitalize(kind.subtype)}",
        "content": DEFAULT_NARRATIVE_CONTENT[kind.subtype],
        "subtype": kind.subtype,
        "themes": list(DEFAULT_THEMES),
        "target_challenges": narrative_challenges(kind, profile),
        "mood_context": mood_context(profile),
        "personalization_notes": list(DEFAULT_PERSONALIZATION_NOTES),
    }


def _role_play_defaults(kind: RolePlayKind, profile: Optional[ProfileContext]) -> dict[str, Any]:
    scenario = kind.scenario_type.strip()
    defaults = {
        "title": f"{_capitalize(scenario)} Practice Session",
        "description": f"A guided practice conversation for {scenario} in a safe environment.",
        "difficulty": kind.difficulty,
    }
    defaults.update(copy.deepcopy(DEFAULT_ROLE_PLAY))
    return defaults


def _clinical_defaults(
    kind: ClinicalSynthesisKind, profile: Optional[ProfileContext]
) -> dict[str, Any]:
    defaults = {
        "client_id": (profile.id if profile and profile.id else UNASSIGNED_CLIENT_ID),
        "session_ids": [note.id for note in kind.session_notes],
    }
    defaults.update(copy.deepcopy(DEFAULT_CLINICAL))
    return defaults


def _homework_defaults(kind: HomeworkKind, profile: Optional[ProfileContext]) -> dict[str, Any]:
    defaults = {
        "title": f"{_capitalize(kind.homework_type)} Practice Plan",
        "homework_type": kind.homework_type,
        "difficulty": kind.difficulty,
        "duration": kind.duration_days,
        "daily_tasks": [default_daily_task(day) for day in range(1, kind.duration_days + 1)],
    }
    defaults.update(copy.deepcopy(DEFAULT_HOMEWORK))
    return defaults


def _content_asset_defaults(
    kind: ContentAssetKind, profile: Optional[ProfileContext]
) -> dict[str, Any]:
    topic = kind.topic.strip()
    return {
        "title": DEFAULT_CONTENT_TITLE,
        "asset_type": kind.asset_type,
        "content": (
            f"This {kind.asset_type} on {topic} offers practical, evidence-based ideas "
            f"you can try at your own pace. Start small, notice what helps, and be "
            f"patient with yourself as you practise. {DEFAULT_CALL_TO_ACTION}"
        ),
        "target_audience": list(kind.target_audience) or ["clients"],
        "techniques": list(DEFAULT_TECHNIQUES),
        "call_to_action": DEFAULT_CALL_TO_ACTION,
        "tags": list(DEFAULT_TAGS),
        "tone": kind.tone,
    }


_DEFAULT_BUILDERS = {
    "narrative": _narrative_defaults,
    "role_play": _role_play_defaults,
    "clinical_synthesis": _clinical_defaults,
    "homework": _homework_defaults,
    "content_asset": _content_asset_defaults,
}


def defaults_for(kind: Any, profile: Optional[ProfileContext] = None) -> dict[str, Any]:
    """Complete default field dict for the record produced by ``kind``."""
    return _DEFAULT_BUILDERS[kind.kind](kind, profile)

