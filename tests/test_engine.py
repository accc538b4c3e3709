"""
test_engine.py -- HTTP endpoints of the synthesis engine.

The provider dependency is overridden with fake clients, so these tests run
without ANTHROPIC_API_KEY and without network access.
"""

import pytest
from fastapi.testclient import TestClient

from engine.synthesis_engine import app, get_client
from synthesis.client import FunctionClient
from synthesis.errors import ProviderError

PROFILE = {"id": "client-9", "challenges": ["social anxiety"], "mood": 3}


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_provider(fn):
    app.dependency_overrides[get_client] = lambda: FunctionClient(fn)


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["success"] is True


def test_kinds_catalogue(client):
    body = client.get("/kinds").json()
    assert body["success"] is True
    assert body["data"]["total"] == 5
    ids = {kind["id"] for kind in body["data"]["kinds"]}
    assert ids == {"narrative", "role_play", "clinical_synthesis", "homework", "content_asset"}


def test_generate_narrative(client):
    use_provider(lambda prompt: "Title: Calm Harbor\nDescription: A grounding story.\n")
    res = client.post(
        "/generate",
        json={"profile": PROFILE, "request": {"kind": "narrative", "subtype": "story"}},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["kind"] == "narrative"
    assert body["data"]["title"] == "Calm Harbor"
    assert body["data"]["type"] == "story"
    assert body["data"]["duration"] == 1
    assert body["data"]["id"]
    assert body["data"]["created"]


def test_generate_homework_camel_case_request(client):
    use_provider(lambda prompt: "")
    res = client.post(
        "/generate",
        json={"profile": PROFILE, "request": {"kind": "homework", "durationDays": 3}},
    )
    assert res.status_code == 200
    tasks = res.json()["data"]["dailyTasks"]
    assert [task["day"] for task in tasks] == [1, 2, 3]


def test_provider_failure_names_the_kind(client):
    def failing(prompt):
        raise ProviderError("upstream rejected the request")

    use_provider(failing)
    res = client.post(
        "/generate",
        json={"profile": PROFILE, "request": {"kind": "role_play", "scenarioType": "asking for a raise"}},
    )
    assert res.status_code == 502
    body = res.json()
    assert body["success"] is False
    assert body["kind"] == "role_play"
    assert body["data"] is None
    assert "upstream rejected" in body["error"]


def test_missing_provider_configuration(client):
    res = client.post("/generate", json={"profile": PROFILE, "request": {"kind": "narrative"}})
    assert res.status_code == 503


def test_invalid_request_is_rejected(client):
    use_provider(lambda prompt: "")
    res = client.post(
        "/generate",
        json={"profile": PROFILE, "request": {"kind": "homework", "durationDays": 0}},
    )
    assert res.status_code == 422
    res = client.post("/generate", json={"profile": PROFILE, "request": {"kind": "poem"}})
    assert res.status_code == 422
