"""
test_pipeline.py -- Provider call handling: retry, timeout, cancellation, errors.

Fake clients stand in for the provider; nothing here touches the network.
"""

import asyncio

import pytest

from synthesis.config import GenerationSettings
from synthesis.errors import (
    GenerationCancelled,
    GenerationError,
    GenerationTimeout,
    ProviderError,
)
from synthesis.models import HomeworkKind, NarrativeKind, RolePlayKind
from synthesis.pipeline import (
    CancellationToken,
    generate_content_asset,
    generate_homework,
    parse_kind,
    synthesize,
)

NARRATIVE_TEXT = "Title: Calm Harbor\n\nThe boats rocked gently in the evening light."
FAST = GenerationSettings(initial_backoff_seconds=0, max_backoff_seconds=0)


class ScriptedClient:
    """Returns or raises the scripted outcomes in order, recording prompts."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SlowClient:
    async def generate(self, prompt: str) -> str:
        await asyncio.sleep(5)
        return NARRATIVE_TEXT


@pytest.mark.asyncio
async def test_synthesize_with_client(profile):
    client = ScriptedClient(NARRATIVE_TEXT)
    record = await synthesize(client, profile, NarrativeKind())
    assert record.title == "Calm Harbor"
    assert record.content == "The boats rocked gently in the evening light."
    assert len(client.prompts) == 1
    assert "FORMAT:" in client.prompts[0]


@pytest.mark.asyncio
async def test_plain_functions_are_accepted(profile):
    def sync_generate(prompt):
        return NARRATIVE_TEXT

    async def async_generate(prompt):
        return NARRATIVE_TEXT

    for fn in (sync_generate, async_generate):
        record = await synthesize(fn, profile, NarrativeKind())
        assert record.title == "Calm Harbor"


@pytest.mark.asyncio
async def test_non_string_result_is_a_provider_error(profile):
    with pytest.raises(ProviderError) as exc_info:
        await synthesize(lambda prompt: None, profile, NarrativeKind())
    assert exc_info.value.kind == "narrative"


@pytest.mark.asyncio
async def test_permanent_failure_is_not_retried(profile):
    client = ScriptedClient(ProviderError("bad request"))
    settings = FAST.model_copy(update={"max_retries": 3})
    with pytest.raises(GenerationError) as exc_info:
        await synthesize(client, profile, HomeworkKind(), settings=settings)
    assert exc_info.value.kind == "homework"
    assert exc_info.value.transient is False
    assert "homework" in str(exc_info.value)
    assert len(client.prompts) == 1


@pytest.mark.asyncio
async def test_transient_failure_is_retried(profile):
    client = ScriptedClient(ProviderError("rate limited", transient=True), NARRATIVE_TEXT)
    settings = FAST.model_copy(update={"max_retries": 2})
    record = await synthesize(client, profile, NarrativeKind(), settings=settings)
    assert record.title == "Calm Harbor"
    assert len(client.prompts) == 2


@pytest.mark.asyncio
async def test_retries_are_bounded(profile):
    client = ScriptedClient(ProviderError("overloaded", transient=True))
    settings = FAST.model_copy(update={"max_retries": 1})
    with pytest.raises(ProviderError) as exc_info:
        await synthesize(client, profile, RolePlayKind(scenario_type="conflict"), settings=settings)
    assert exc_info.value.kind == "role_play"
    assert exc_info.value.transient is True
    assert len(client.prompts) == 2


@pytest.mark.asyncio
async def test_backoff_doubles_up_to_the_cap(profile, monkeypatch):
    delays = []

    async def record_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", record_sleep)
    client = ScriptedClient(ProviderError("overloaded", transient=True))
    settings = GenerationSettings(max_retries=4, initial_backoff_seconds=1, max_backoff_seconds=3)
    with pytest.raises(ProviderError):
        await synthesize(client, profile, NarrativeKind(), settings=settings)
    assert delays == [1, 2, 3, 3]
    assert len(client.prompts) == 5


@pytest.mark.asyncio
async def test_cancel_while_waiting_to_retry(profile):
    token = CancellationToken()
    calls = []

    async def generate(prompt):
        calls.append(prompt)
        asyncio.get_running_loop().call_later(0.01, token.cancel)
        raise ProviderError("rate limited", transient=True)

    settings = GenerationSettings(max_retries=2, initial_backoff_seconds=0.2, max_backoff_seconds=0.2)
    with pytest.raises(GenerationCancelled) as exc_info:
        await synthesize(generate, profile, NarrativeKind(), settings=settings, cancel_token=token)
    assert exc_info.value.kind == "narrative"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_no_retry_by_default(profile):
    client = ScriptedClient(ProviderError("overloaded", transient=True), NARRATIVE_TEXT)
    with pytest.raises(ProviderError):
        await synthesize(client, profile, NarrativeKind(), settings=FAST)
    assert len(client.prompts) == 1


@pytest.mark.asyncio
async def test_timeout_raises_generation_timeout(profile):
    settings = GenerationSettings(timeout_seconds=0.05)
    with pytest.raises(GenerationTimeout) as exc_info:
        await synthesize(SlowClient(), profile, NarrativeKind(), settings=settings)
    assert exc_info.value.kind == "narrative"
    assert exc_info.value.transient is True


@pytest.mark.asyncio
async def test_unexpected_client_exception_is_wrapped(profile):
    client = ScriptedClient(KeyError("content"))
    with pytest.raises(ProviderError) as exc_info:
        await synthesize(client, profile, NarrativeKind())
    assert exc_info.value.kind == "narrative"
    assert isinstance(exc_info.value.__cause__, KeyError)


@pytest.mark.asyncio
async def test_cancel_before_call_skips_provider(profile):
    client = ScriptedClient(NARRATIVE_TEXT)
    token = CancellationToken()
    token.cancel()
    with pytest.raises(GenerationCancelled) as exc_info:
        await synthesize(client, profile, NarrativeKind(), cancel_token=token)
    assert exc_info.value.kind == "narrative"
    assert client.prompts == []


@pytest.mark.asyncio
async def test_cancel_during_call_discards_response(profile):
    token = CancellationToken()
    calls = []

    async def generate(prompt):
        calls.append(prompt)
        token.cancel()
        return NARRATIVE_TEXT

    with pytest.raises(GenerationCancelled):
        await synthesize(generate, profile, NarrativeKind(), cancel_token=token)
    assert len(calls) == 1
    assert token.cancelled


@pytest.mark.asyncio
async def test_generate_homework_convenience(profile):
    record = await generate_homework(
        ScriptedClient("Day 1: Walk\n"), profile, homework_type="behavioral", duration_days=3
    )
    assert len(record.daily_tasks) == 3
    assert record.daily_tasks[0].title == "Walk"
    assert record.homework_type == "behavioral"


@pytest.mark.asyncio
async def test_generate_content_asset_without_profile():
    client = ScriptedClient("Title: Sleep Basics\n\nKeep a regular bedtime.")
    record = await generate_content_asset(client, topic="sleep", asset_type="article")
    assert record.title == "Sleep Basics"
    assert "CLIENT CONTEXT:" not in client.prompts[0]


def test_parse_kind_accepts_camel_and_snake_case():
    assert parse_kind({"kind": "homework", "durationDays": 3}).duration_days == 3
    assert parse_kind({"kind": "homework", "duration_days": 4}).duration_days == 4
    assert parse_kind({"kind": "role_play", "scenarioType": "feedback"}).scenario_type == "feedback"
