"""
FastAPI contract tests for the focus API.

A FakeOracleClient is injected through a workspace factory override, so these
tests never reach a real provider. They cover authentication, the session
command flow, gated search, history and the HTTP mapping of core faults.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from conftest import FakeOracleClient, oracle_reply
from config.config import Config
from context.focus_session import FocusSession
from context.history_ledger import HistoryLedger
from context.profile_directory import ProfileDirectory
from context.session_clock import SessionClock
from context.workspace import FocusWorkspace, WorkspaceRegistry
from models.errors import OracleUnavailable
from models.focus_types import UserRole
from orchestrator.search_orchestrator import SearchOrchestrator
from server import dependencies as deps
from server.app import create_app

pytestmark = pytest.mark.integration

API_KEY = "dev-key-1"


# -------------------------------------------------------------------
# Fixtures
# -------------------------------------------------------------------


@pytest.fixture()
def oracle():
    return FakeOracleClient(
        replies={
            "celebrity gossip": oracle_reply(is_valid=False, reason="Not related to study.", links=[]),
            "provider down": OracleUnavailable(),
            "garbled": "this is not json",
        }
    )


@pytest.fixture()
def directory():
    return ProfileDirectory()


@pytest.fixture()
def registry(oracle, directory):
    def build(user):
        session = FocusSession(user.identity, verifier=directory)
        return FocusWorkspace(
            user=user,
            session=session,
            orchestrator=SearchOrchestrator(oracle, HistoryLedger()),
            clock=SessionClock(session, interval_s=3600),
        )

    return WorkspaceRegistry(factory=build)


@pytest.fixture()
def client(monkeypatch, directory, registry):
    monkeypatch.setenv("API_KEYS", f"{API_KEY},other-key")

    app = create_app()
    app.dependency_overrides[deps.get_profile_directory] = lambda: directory
    app.dependency_overrides[deps.get_workspace_registry] = lambda: registry

    with TestClient(app) as test_client:
        yield test_client
        registry.clear_all()


def _headers(identity=None):
    headers = {"X-API-Key": API_KEY}
    if identity:
        headers["X-User-Id"] = identity
    return headers


@pytest.fixture()
def guest_id(client):
    r = client.post(
        "/v1/profiles/guest", json={"role": "student", "passcode": "1234"}, headers=_headers()
    )
    assert r.status_code == 201
    return r.json()["identity"]


@pytest.fixture()
def locked_guest(client, guest_id):
    r = client.post("/v1/session/start", json={"minutes": 25}, headers=_headers(guest_id))
    assert r.status_code == 200
    return guest_id


# -------------------------------------------------------------------
# Health & auth
# -------------------------------------------------------------------


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert "X-Request-ID" in r.headers


def test_endpoints_require_api_key(client):
    assert client.post("/v1/profiles/guest", json={"role": "student"}).status_code == 401
    r = client.get("/v1/session", headers={"X-API-Key": "wrong"})
    assert r.status_code == 401


def test_missing_api_key_configuration_is_server_error(client, monkeypatch):
    monkeypatch.delenv("API_KEYS")
    r = client.post("/v1/profiles/guest", json={"role": "student"}, headers=_headers())
    assert r.status_code == 500


def test_session_requires_known_user(client):
    assert client.get("/v1/session", headers=_headers()).status_code == 401
    assert client.get("/v1/session", headers=_headers("ghost@example.edu")).status_code == 404


# -------------------------------------------------------------------
# Profiles
# -------------------------------------------------------------------


def test_sign_up_sign_in_and_lookup(client):
    payload = {
        "email": "Ada@Example.edu",
        "name": "Ada",
        "role": "RESEARCHER",
        "password": "hunter22",
        "confirm_password": "hunter22",
    }
    r = client.post("/v1/profiles", json=payload, headers=_headers())
    assert r.status_code == 201
    assert r.json() == {
        "identity": "ada@example.edu",
        "name": "Ada",
        "role": "RESEARCHER",
        "is_guest": False,
    }

    r = client.get("/v1/profiles/lookup", params={"email": "ada@example.edu"}, headers=_headers())
    assert r.json() == {"known": True, "role": "RESEARCHER"}
    r = client.get("/v1/profiles/lookup", params={"email": "new@example.edu"}, headers=_headers())
    assert r.json()["known"] is False

    r = client.post(
        "/v1/profiles/sign-in",
        json={"email": "ada@example.edu", "password": "nope"},
        headers=_headers(),
    )
    assert r.status_code == 403
    assert r.json()["detail"]["message"] == "Incorrect password for this email."

    r = client.post(
        "/v1/profiles/sign-in",
        json={"email": "ada@example.edu", "password": "hunter22"},
        headers=_headers(),
    )
    assert r.status_code == 200
    assert r.json()["role"] == "RESEARCHER"


def test_sign_up_without_role_is_rejected(client):
    payload = {"email": "ada@example.edu", "name": "Ada", "password": "x", "confirm_password": "x"}
    r = client.post("/v1/profiles", json=payload, headers=_headers())
    assert r.status_code == 422
    assert r.json()["detail"] == {
        "code": "invalid_input",
        "message": "A field must be chosen: Please select a role.",
    }


def test_guest_without_role_is_rejected(client):
    r = client.post("/v1/profiles/guest", json={}, headers=_headers())
    assert r.status_code == 422
    assert r.json()["detail"]["message"] == "Please pick a role to continue as guest."


# -------------------------------------------------------------------
# Session commands
# -------------------------------------------------------------------


def test_session_lifecycle(client, guest_id):
    headers = _headers(guest_id)

    r = client.get("/v1/session", headers=headers)
    assert r.json()["status"] == "IDLE"

    r = client.post("/v1/session/start", json={"hours": 1, "minutes": 30}, headers=headers)
    assert r.status_code == 200
    snapshot = r.json()["snapshot"]
    assert snapshot["status"] == "LOCKED"
    assert snapshot["total_seconds"] == 5400
    assert snapshot["formatted_remaining"] == "01:30:00"

    r = client.post("/v1/session/pause", json={"password": "0000"}, headers=headers)
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "credential_rejected"
    assert client.get("/v1/session", headers=headers).json()["status"] == "LOCKED"

    r = client.post("/v1/session/pause", json={"password": "1234"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["snapshot"]["status"] == "PAUSED"

    r = client.post("/v1/session/resume", headers=headers)
    assert r.json()["snapshot"]["status"] == "LOCKED"

    r = client.post("/v1/session/end", headers=headers)
    assert r.json()["snapshot"]["status"] == "ENDED"

    r = client.post("/v1/session/reset", headers=headers)
    assert r.json()["snapshot"]["status"] == "IDLE"


def test_zero_duration_is_invalid(client, guest_id):
    r = client.post(
        "/v1/session/start", json={"hours": 0, "minutes": 0}, headers=_headers(guest_id)
    )
    assert r.status_code == 422
    r = client.get("/v1/session", headers=_headers(guest_id))
    assert r.json()["status"] == "IDLE"


@pytest.mark.parametrize(
    "payload",
    [{}, {"total_seconds": 60, "minutes": 1}, {"minutes": 75}, {"hours": -1}],
)
def test_start_request_validation(client, guest_id, payload):
    r = client.post("/v1/session/start", json=payload, headers=_headers(guest_id))
    assert r.status_code == 422


def test_commands_that_do_not_apply_are_conflicts(client, guest_id):
    headers = _headers(guest_id)
    assert client.post("/v1/session/resume", headers=headers).status_code == 409
    assert client.post("/v1/session/reset", headers=headers).status_code == 409
    assert client.post("/v1/session/pause", json={"password": "1234"}, headers=headers).status_code == 409


# -------------------------------------------------------------------
# Search & history
# -------------------------------------------------------------------


def test_search_needs_a_locked_session(client, guest_id):
    r = client.post("/v1/search", json={"query": "photosynthesis"}, headers=_headers(guest_id))
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "action_not_permitted"


def test_search_returns_filtered_results(client, locked_guest, oracle):
    r = client.post("/v1/search", json={"query": "photosynthesis"}, headers=_headers(locked_guest))
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "results"
    assert body["total_results"] == 3
    assert body["blocked_count"] == 2
    assert [item["is_blocked"] for item in body["results"]] == [False, True, True]
    assert body["results"][1]["block_reason"] == "Restricted by focus filter."
    assert body["results"][0]["hostname"] == "www.nasa.gov"
    assert oracle.queries == ["photosynthesis"]

    r = client.get("/v1/search/results", params={"offset": 2}, headers=_headers(locked_guest))
    page = r.json()
    assert page["query"] == "photosynthesis"
    assert page["total_results"] == 3
    assert len(page["results"]) == 1
    assert page["has_more"] is False


def test_blank_query_is_rejected_before_the_oracle(client, locked_guest, oracle):
    r = client.post("/v1/search", json={"query": "   "}, headers=_headers(locked_guest))
    assert r.status_code == 422
    assert oracle.queries == []


def test_rejected_query_is_not_an_error(client, locked_guest):
    r = client.post("/v1/search", json={"query": "celebrity gossip"}, headers=_headers(locked_guest))
    assert r.status_code == 200
    assert r.json()["status"] == "rejected"
    assert r.json()["reason"] == "Not related to study."

    history = client.get("/v1/history", headers=_headers(locked_guest)).json()
    assert history["entries"] == []


@pytest.mark.parametrize("query, status_code", [("provider down", 503), ("garbled", 502)])
def test_oracle_faults_map_to_gateway_errors(client, locked_guest, query, status_code):
    r = client.post("/v1/search", json={"query": query}, headers=_headers(locked_guest))
    assert r.status_code == status_code
    assert r.json()["detail"]["message"] == "Search failed. Please try again later."


def test_history_list_filter_and_delete(client, locked_guest):
    headers = _headers(locked_guest)
    for query in ["cell biology", "organic chemistry", "cell division", "cell biology"]:
        assert client.post("/v1/search", json={"query": query}, headers=headers).status_code == 200

    history = client.get("/v1/history", headers=headers).json()
    assert history["entries"] == ["cell biology", "cell division", "organic chemistry"]
    assert history["total"] == 3

    filtered = client.get("/v1/history", params={"filter": "CELL"}, headers=headers).json()
    assert filtered["entries"] == ["cell biology", "cell division"]

    assert client.delete("/v1/history/cell division", headers=headers).status_code == 204
    assert client.delete("/v1/history/cell division", headers=headers).status_code == 404

    for query in ["TCP/IP", "I/O scheduling"]:
        assert client.post("/v1/search", json={"query": query}, headers=headers).status_code == 200
    assert client.delete("/v1/history/TCP%2FIP", headers=headers).status_code == 204
    assert client.delete("/v1/history/I/O scheduling", headers=headers).status_code == 204
    entries = client.get("/v1/history", headers=headers).json()["entries"]
    assert entries == ["cell biology", "organic chemistry"]

    assert client.delete("/v1/history", headers=headers).status_code == 204
    assert client.get("/v1/history", headers=headers).json()["entries"] == []


def test_users_do_not_share_history(client, locked_guest, directory):
    other = directory.guest(UserRole.TEACHER)
    client.post("/v1/search", json={"query": "algebra"}, headers=_headers(locked_guest))

    r = client.get("/v1/history", headers=_headers(other.identity))
    assert r.json()["entries"] == []


def test_health_check_does_not_log_errors(client, caplog):
    with caplog.at_level(logging.ERROR):
        r = client.get("/health")
    assert r.status_code == 200
    assert isinstance(r.json()["oracle_configured"], bool)
    assert [rec for rec in caplog.records if rec.levelno >= logging.ERROR] == []


# -------------------------------------------------------------------
# Workspace lifetime
# -------------------------------------------------------------------


def test_idle_guest_workspaces_are_evicted(client, directory, registry, monkeypatch):
    config = Config()
    monkeypatch.setattr(config, "WORKSPACE_IDLE_TTL_S", 0.0)
    client.app.dependency_overrides[deps.get_config] = lambda: config

    idle_guest = directory.guest(UserRole.STUDENT).identity
    busy_guest = directory.guest(UserRole.STUDENT, passcode="1234").identity
    assert client.get("/v1/session", headers=_headers(idle_guest)).status_code == 200
    r = client.post("/v1/session/start", json={"minutes": 25}, headers=_headers(busy_guest))
    assert r.status_code == 200

    caller = directory.guest(UserRole.TEACHER).identity
    assert client.get("/v1/session", headers=_headers(caller)).status_code == 200

    assert registry.get(idle_guest) is None
    assert client.get("/v1/session", headers=_headers(idle_guest)).status_code == 404
    assert registry.get(busy_guest) is not None
    r = client.get("/v1/session", headers=_headers(busy_guest))
    assert r.json()["status"] == "LOCKED"


# -------------------------------------------------------------------
# Running without a relevance oracle
# -------------------------------------------------------------------


@pytest.fixture()
def unconfigured_client(monkeypatch, tmp_path):
    for key in ("ORACLE_PROVIDER", "GOOGLE_GEMINI_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("API_KEYS", API_KEY)
    monkeypatch.setenv("HISTORY_DB_PATH", str(tmp_path / "history.db"))

    singletons = (deps.get_config, deps.get_profile_directory, deps.get_workspace_registry)
    for fn in singletons:
        if hasattr(fn, "_instance"):
            monkeypatch.delattr(fn, "_instance")

    with TestClient(create_app()) as test_client:
        yield test_client

    for fn in singletons:
        if hasattr(fn, "_instance"):
            del fn._instance


def test_session_commands_work_without_oracle_key(unconfigured_client):
    client = unconfigured_client
    r = client.post(
        "/v1/profiles/guest", json={"role": "student", "passcode": "1234"}, headers=_headers()
    )
    headers = _headers(r.json()["identity"])

    r = client.post("/v1/session/start", json={"minutes": 25}, headers=headers)
    assert r.status_code == 200
    assert r.json()["snapshot"]["status"] == "LOCKED"

    r = client.post("/v1/search", json={"query": "photosynthesis"}, headers=headers)
    assert r.status_code == 503
    assert r.json()["detail"]["message"] == "Search failed. Please try again later."

    assert client.post("/v1/session/pause", json={"password": "1234"}, headers=headers).status_code == 200
    assert client.post("/v1/session/resume", headers=headers).status_code == 200
    assert client.post("/v1/session/end", headers=headers).status_code == 200
    r = client.post("/v1/session/reset", headers=headers)
    assert r.status_code == 200
    assert r.json()["snapshot"]["status"] == "IDLE"

    r = client.get("/v1/history", headers=headers)
    assert r.status_code == 200
    assert r.json()["entries"] == []

    assert client.get("/health").json()["oracle_configured"] is False
