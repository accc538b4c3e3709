"""
pipeline.py -- Public entry points of the synthesis pipeline.

One request flows straight through:
    profile + kind -> prompt -> provider text -> extracted fields -> record

Everything except the provider call is pure. The provider call gets a
timeout, an optional bounded retry with exponential backoff for transient
failures, and a cooperative cancellation check before and after it.
GenerationError is the only exception that leaves this module, and it always
names the kind that was being generated.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from pydantic import TypeAdapter

from synthesis.assembler import assemble
from synthesis.client import as_client
from synthesis.config import GenerationSettings
from synthesis.errors import (
    GenerationCancelled,
    GenerationError,
    GenerationTimeout,
    ProviderError,
)
from synthesis.extractors import extract_fields
from synthesis.models import (
    ClinicalSynthesis,
    ClinicalSynthesisKind,
    ContentAsset,
    ContentAssetKind,
    GenerationKind,
    HomeworkKind,
    HomeworkPlan,
    Narrative,
    NarrativeKind,
    OutputRecord,
    ProfileContext,
    RawResponse,
    RolePlayKind,
    RolePlayScenario,
)
from synthesis.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

KIND_ADAPTER: TypeAdapter[Any] = TypeAdapter(GenerationKind)


def parse_kind(data: dict[str, Any]) -> Any:
    """Validate a dict (camelCase or snake_case) into a GenerationKind variant."""
    return KIND_ADAPTER.validate_python(data)


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a request."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, kind: str, stage: str) -> None:
        if self._cancelled:
            logger.info("Generation of %s cancelled %s provider call", kind, stage)
            raise GenerationCancelled(f"Cancelled {stage} provider call", kind=kind)


def synthesize_from_text(
    kind: Any,
    raw_text: str,
    profile: Optional[ProfileContext] = None,
) -> OutputRecord:
    """Extract and assemble a record from provider text. Pure and total."""
    extracted = extract_fields(kind, raw_text)
    return assemble(kind, extracted, raw_text, profile)


async def _call_provider(
    client: Any,
    prompt: str,
    kind: str,
    settings: GenerationSettings,
    cancel_token: Optional[CancellationToken],
) -> str:
    """Call the provider with timeout and bounded retry on transient failures."""
    attempts = settings.max_retries + 1
    backoff = settings.initial_backoff_seconds

    for attempt in range(1, attempts + 1):
        try:
            logger.info("Provider call attempt %d/%d for %s", attempt, attempts, kind)
            return await asyncio.wait_for(
                client.generate(prompt), timeout=settings.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            error: GenerationError = GenerationTimeout(
                f"Provider call exceeded {settings.timeout_seconds:.1f}s", kind=kind
            )
            cause: Optional[Exception] = exc
        except GenerationError as exc:
            if not exc.kind:
                exc.kind = kind
            error = exc
            cause = None
        except Exception as exc:
            error = ProviderError(f"Malformed provider response: {exc}", kind=kind)
            cause = exc

        if not error.transient or attempt == attempts:
            logger.error("Provider call for %s failed (attempt %d/%d): %s", kind, attempt, attempts, error)
            if cause is None:
                raise error
            raise error from cause

        logger.warning(
            "Transient provider failure for %s (attempt %d/%d): %s; retrying in %.1fs",
            kind,
            attempt,
            attempts,
            error,
            backoff,
        )
        await asyncio.sleep(backoff)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(kind, "before")
        backoff = min(backoff * 2, settings.max_backoff_seconds)

    raise GenerationError("Exhausted retries for provider call", kind=kind)


async def synthesize(
    client: Any,
    profile: ProfileContext,
    kind: Any,
    settings: Optional[GenerationSettings] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> OutputRecord:
    """
    Generate one record of ``kind`` for ``profile``.

    Args:
        client: A GenerativeClient, or a plain ``generate(prompt)`` function.
        profile: The client the content is for.
        kind: One GenerationKind variant (NarrativeKind, HomeworkKind, ...).
        settings: Timeout and retry limits (defaults: 120s, no retry).
        cancel_token: Checked before and after the provider call.

    Returns:
        A fully populated, immutable record.

    Raises:
        GenerationError: the provider failed, timed out, or the request was
            cancelled. ``error.kind`` names the kind being generated.
    """
    settings = settings or GenerationSettings()
    provider = as_client(client)

    if cancel_token is not None:
        cancel_token.raise_if_cancelled(kind.kind, "before")

    prompt = build_prompt(profile, kind)
    text = await _call_provider(provider, prompt, kind.kind, settings, cancel_token)
    raw = RawResponse(text=text, kind=kind)

    if cancel_token is not None:
        cancel_token.raise_if_cancelled(kind.kind, "after")

    record = synthesize_from_text(raw.kind, raw.text, profile)
    logger.info("Generated %s record %s (%d chars of provider text)", kind.kind, record.id, len(text))
    return record


# ---------------------------------------------------------------------------
# Per-kind conveniences
# ---------------------------------------------------------------------------

async def generate_narrative(
    client: Any,
    profile: ProfileContext,
    subtype: str = "story",
    specific_challenge: Optional[str] = None,
    **options: Any,
) -> Narrative:
    kind = NarrativeKind(subtype=subtype, specific_challenge=specific_challenge)
    return await synthesize(client, profile, kind, **options)


async def generate_role_play(
    client: Any,
    profile: ProfileContext,
    scenario_type: str,
    difficulty: str = "intermediate",
    **options: Any,
) -> RolePlayScenario:
    kind = RolePlayKind(scenario_type=scenario_type, difficulty=difficulty)
    return await synthesize(client, profile, kind, **options)


async def generate_clinical_synthesis(
    client: Any,
    profile: ProfileContext,
    session_notes: list[Any],
    **options: Any,
) -> ClinicalSynthesis:
    kind = ClinicalSynthesisKind(session_notes=session_notes)
    return await synthesize(client, profile, kind, **options)


async def generate_homework(
    client: Any,
    profile: ProfileContext,
    homework_type: str = "mindfulness",
    duration_days: int = 7,
    difficulty: str = "intermediate",
    **options: Any,
) -> HomeworkPlan:
    kind = HomeworkKind(
        homework_type=homework_type, duration_days=duration_days, difficulty=difficulty
    )
    return await synthesize(client, profile, kind, **options)


async def generate_content_asset(
    client: Any,
    topic: str,
    asset_type: str = "article",
    word_count_target: int = 500,
    tone: str = "compassionate",
    target_audience: Optional[list[str]] = None,
    profile: Optional[ProfileContext] = None,
    **options: Any,
) -> ContentAsset:
    kind = ContentAssetKind(
        asset_type=asset_type,
        topic=topic,
        word_count_target=word_count_target,
        tone=tone,
        target_audience=target_audience or ["clients"],
    )
    return await synthesize(client, profile or ProfileContext(), kind, **options)
