"""
models.py -- Pydantic models for the therapeutic content synthesis pipeline.

Defines: ProfileContext, the GenerationKind variants, RawResponse and the five
output records (Narrative, RolePlayScenario, ClinicalSynthesis, HomeworkPlan,
ContentAsset). All data crossing component boundaries uses these models.

Attribute names are snake_case; every model also accepts and emits the
camelCase field names used by the web application.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Valid enumerations
# ---------------------------------------------------------------------------

NarrativeSubtype = Literal["story", "meditation", "visualization", "allegory"]
Difficulty = Literal["beginner", "intermediate", "advanced"]
HomeworkType = Literal[
    "mindfulness", "cognitive", "behavioral", "journaling", "exposure", "creative"
]
AssetType = Literal["article", "exercise", "worksheet", "guide", "script"]
Tone = Literal["compassionate", "educational", "motivational", "clinical"]

MAX_HOMEWORK_DAYS: int = 30

GENERATION_KINDS: dict[str, dict[str, Any]] = {
    "narrative": {
        "label": "Personalized Narrative",
        "description": "A story, meditation, visualization or allegory built around the client's challenges.",
        "parameters": ["subtype", "specificChallenge"],
    },
    "role_play": {
        "label": "Role-Play Scenario",
        "description": "A practice conversation with an adaptive AI persona.",
        "parameters": ["scenarioType", "difficulty"],
    },
    "clinical_synthesis": {
        "label": "Clinical Synthesis",
        "description": "A synthesis of session notes: themes, patterns, mood trend and next-session focus.",
        "parameters": ["sessionNotes"],
    },
    "homework": {
        "label": "Homework Plan",
        "description": "A multi-day therapeutic homework plan with one task per day.",
        "parameters": ["homeworkType", "durationDays", "difficulty"],
    },
    "content_asset": {
        "label": "Content Asset",
        "description": "An article, exercise, worksheet, guide or script on a mental-health topic.",
        "parameters": ["assetType", "topic", "wordCountTarget", "tone", "targetAudience"],
    },
}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class FrozenModel(BaseModel):
    """Immutable model that reads and writes camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------------------------------------------------------------------------
# Input models -- the subject of generation
# ---------------------------------------------------------------------------

class HistoryEntry(FrozenModel):
    """One journal entry from the client's history."""

    date: str
    content: str = ""
    mood: int = Field(default=3, ge=1, le=5)
    themes: list[str] = Field(default_factory=list)


class ProfileContext(FrozenModel):
    """Everything the pipeline knows about the client a request is for."""

    id: str = ""
    challenges: list[str] = Field(default_factory=list)
    mood: int = Field(default=3, ge=1, le=5)
    goals: list[str] = Field(default_factory=list, alias="therapyGoals")
    preferences: list[str] = Field(default_factory=list)
    history: list[HistoryEntry] = Field(default_factory=list, alias="journalEntries")
    coping_strategies: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)
    progress_areas: list[str] = Field(default_factory=list)


class SessionNote(FrozenModel):
    """A therapist's note for one session, input to clinical synthesis."""

    id: str
    date: str
    content: str
    themes: list[str] = Field(default_factory=list)
    interventions: list[str] = Field(default_factory=list)
    mood: int = Field(default=3, ge=1, le=5)


# ---------------------------------------------------------------------------
# GenerationKind -- closed tagged variant selecting what to generate
# ---------------------------------------------------------------------------

class NarrativeKind(FrozenModel):
    kind: Literal["narrative"] = "narrative"
    subtype: NarrativeSubtype = "story"
    specific_challenge: Optional[str] = None


class RolePlayKind(FrozenModel):
    kind: Literal["role_play"] = "role_play"
    scenario_type: str = Field(min_length=1)
    difficulty: Difficulty = "intermediate"


class ClinicalSynthesisKind(FrozenModel):
    kind: Literal["clinical_synthesis"] = "clinical_synthesis"
    session_notes: list[SessionNote] = Field(min_length=1)


class HomeworkKind(FrozenModel):
    kind: Literal["homework"] = "homework"
    homework_type: HomeworkType = "mindfulness"
    duration_days: int = Field(default=7, ge=1, le=MAX_HOMEWORK_DAYS)
    difficulty: Difficulty = "intermediate"


class ContentAssetKind(FrozenModel):
    kind: Literal["content_asset"] = "content_asset"
    asset_type: AssetType = "article"
    topic: str = Field(min_length=1)
    word_count_target: int = Field(default=500, ge=50, le=5000)
    tone: Tone = "compassionate"
    target_audience: list[str] = Field(default_factory=lambda: ["clients"])


GenerationKind = Annotated[
    Union[NarrativeKind, RolePlayKind, ClinicalSynthesisKind, HomeworkKind, ContentAssetKind],
    Field(discriminator="kind"),
]


class RawResponse(FrozenModel):
    """Provider text for one request. Discarded once fields are extracted."""

    text: str
    kind: GenerationKind


# ---------------------------------------------------------------------------
# Output records
# ---------------------------------------------------------------------------

class GeneratedRecord(FrozenModel):
    """Identity and timestamp shared by every assembled record."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = Field(default_factory=_utc_now, alias="created")


class Narrative(GeneratedRecord):
    title: str
    content: str
    subtype: NarrativeSubtype = Field(alias="type")
    themes: tuple[str, ...]
    duration: int = Field(ge=1)  # minutes
    target_challenges: tuple[str, ...]
    mood_context: str
    personalization_notes: tuple[str, ...] = Field(alias="personalizations")


class AIPersona(FrozenModel):
    role: str
    personality: str
    opening_line: str = Field(alias="initialResponse")
    adaptation_rules: tuple[str, ...]


class RolePlayScenario(GeneratedRecord):
    title: str
    description: str
    context: str
    objective: str
    difficulty: Difficulty
    ai_persona: AIPersona
    user_guidance: tuple[str, ...]
    success_metrics: tuple[str, ...]


class MoodTrend(FrozenModel):
    pattern: str
    analysis: str
    recommendations: tuple[str, ...]


class ClinicalSynthesis(GeneratedRecord):
    client_id: str
    session_ids: tuple[str, ...]
    key_themes: tuple[str, ...]
    emotional_patterns: tuple[str, ...]
    coping_strategies: tuple[str, ...]
    progress_indicators: tuple[str, ...]
    concern_areas: tuple[str, ...]
    suggested_topics: tuple[str, ...]
    mood_trend: MoodTrend = Field(alias="moodTrends")
    next_session_focus: tuple[str, ...]
    summary: str


class DailyTask(FrozenModel):
    day: int = Field(ge=1)
    title: str
    instructions: str
    duration_minutes: int = Field(ge=1, alias="duration")
    materials: tuple[str, ...] = Field(default_factory=tuple)
    reflection_prompts: tuple[str, ...]


class HomeworkPlan(GeneratedRecord):
    title: str
    description: str
    homework_type: HomeworkType = Field(alias="type")
    difficulty: Difficulty
    duration: int = Field(ge=1)  # days
    daily_tasks: tuple[DailyTask, ...]
    objectives: tuple[str, ...]
    personalization_notes: tuple[str, ...] = Field(alias="clientPersonalizations")
    progress_tracking: tuple[str, ...]


class ContentAsset(GeneratedRecord):
    title: str
    asset_type: AssetType = Field(alias="type")
    category: str
    content: str
    word_count: int
    target_audience: tuple[str, ...]
    techniques: tuple[str, ...]
    call_to_action: str
    tags: tuple[str, ...]
    tone: Tone


OutputRecord = Union[Narrative, RolePlayScenario, ClinicalSynthesis, HomeworkPlan, ContentAsset]
