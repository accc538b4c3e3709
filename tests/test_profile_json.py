"""
test_profile_json.py -- Loading profiles and session notes from JSON files.
"""

import json

import pytest
from pydantic import ValidationError

from synthesis.adapters.profile_json import load_profile, load_session_notes


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_camel_case_export(tmp_path):
    path = write_json(
        tmp_path / "profile.json",
        {
            "id": "c-7",
            "challenges": ["panic attacks"],
            "mood": 2,
            "therapyGoals": ["ride the metro"],
            "journalEntries": [{"date": "2026-09-01", "content": "Short ride went fine.", "mood": 3}],
            "copingStrategies": ["paced breathing"],
            "progressAreas": ["exposure"],
        },
    )
    profile = load_profile(path)
    assert profile.id == "c-7"
    assert profile.goals == ["ride the metro"]
    assert profile.history[0].content == "Short ride went fine."
    assert profile.coping_strategies == ["paced breathing"]
    assert profile.progress_areas == ["exposure"]


def test_snake_case_fields(tmp_path):
    path = write_json(
        tmp_path / "profile.json",
        {"goals": ["sleep by eleven"], "history": [{"date": "2026-09-02"}], "coping_strategies": ["reading"]},
    )
    profile = load_profile(str(path))
    assert profile.goals == ["sleep by eleven"]
    assert profile.history[0].mood == 3
    assert profile.coping_strategies == ["reading"]
    assert profile.mood == 3


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_profile(tmp_path / "absent.json")


def test_non_object_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        load_profile(write_json(tmp_path / "profile.json", ["not", "a", "profile"]))


def test_mood_out_of_range_is_rejected(tmp_path):
    with pytest.raises(ValidationError):
        load_profile(write_json(tmp_path / "profile.json", {"mood": 9}))


def test_session_notes_array_or_wrapped(tmp_path):
    notes = [{"id": "s1", "date": "2026-09-01", "content": "First session."}]
    assert load_session_notes(write_json(tmp_path / "a.json", notes))[0].id == "s1"
    wrapped = load_session_notes(write_json(tmp_path / "b.json", {"sessionNotes": notes}))
    assert wrapped[0].content == "First session."
