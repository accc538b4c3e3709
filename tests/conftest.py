"""
conftest.py -- Shared fixtures for the synthesis test suite.

No test touches the network: provider calls go through fake clients.
"""

import pytest

from synthesis.models import HistoryEntry, ProfileContext, SessionNote


@pytest.fixture
def profile() -> ProfileContext:
    return ProfileContext(
        id="client-042",
        challenges=["social anxiety", "poor sleep"],
        mood=2,
        goals=["speak up in meetings"],
        preferences=["short exercises", "nature imagery"],
        history=[
            HistoryEntry(date="2026-09-01", content="Skipped the team lunch again.", mood=2),
            HistoryEntry(date="2026-09-08", content="Managed one question in standup.", mood=3),
        ],
        coping_strategies=["box breathing"],
        triggers=["crowded rooms"],
        progress_areas=["asking for help"],
    )


@pytest.fixture
def session_notes() -> list[SessionNote]:
    return [
        SessionNote(
            id="s1",
            date="2026-09-02",
            content="Client described racing thoughts before bed.",
            interventions=["sleep hygiene"],
            mood=2,
        ),
        SessionNote(
            id="s2",
            date="2026-09-09",
            content="Client tried the wind-down routine four nights out of seven.",
            interventions=["cognitive restructuring"],
            mood=3,
        ),
    ]
