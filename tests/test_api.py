"""
Tests for the HTTP session API.
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from calc_studio.api import app
from calc_studio.config import settings
from calc_studio.models import EngineConfig
from calc_studio.sessions import SessionNotFoundError, SessionStore, get_session_store


class TestSessionsAPI:
    """Test session lifecycle and key input."""

    def setup_method(self):
        self.store = SessionStore(max_sessions=10, config=EngineConfig())
        app.dependency_overrides[get_session_store] = lambda: self.store
        self.client = TestClient(app)

    def teardown_method(self):
        app.dependency_overrides.clear()

    def _create(self) -> str:
        response = self.client.post("/api/v1/sessions")
        assert response.status_code == 201
        return response.json()["session_id"]

    def _press(self, session_id: str, *tokens: str):
        return self.client.post(f"/api/v1/sessions/{session_id}/input", json={"tokens": list(tokens)})

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_config(self):
        data = self.client.get("/api/v1/config").json()
        assert data["history_capacity"] == 10
        assert data["error_sentinel"] == "Error"
        assert data["max_sessions"] == 10

    def test_debug_follows_settings(self):
        assert app.debug is settings.debug

    def test_create_session(self):
        data = self.client.post("/api/v1/sessions").json()
        assert data["display"] == "0"
        assert data["history"] == []
        assert data["is_error"] is False

    def test_list_sessions(self):
        first = self._create()
        second = self._create()
        assert self.client.get("/api/v1/sessions").json() == [first, second]

    def test_chain(self):
        session_id = self._create()
        response = self._press(session_id, "3", "+", "4", "*", "2", "=")
        assert response.status_code == 200
        data = response.json()
        assert data["display"] == "14"
        assert data["history"][0] == {"expression": "7 * 2", "result": "14"}

    def test_pending_context(self):
        session_id = self._create()
        data = self._press(session_id, "3", "+").json()
        assert data["has_pending"] is True
        assert data["pending_operator"] == "+"
        assert data["pending_expression"] == "3 +"

    def test_error_mode(self):
        session_id = self._create()
        data = self._press(session_id, "5", "/", "0", "=").json()
        assert data["is_error"] is True
        assert data["display"] == "Error"
        assert data["pending_operand"] is None

    def test_unknown_key_applies_nothing(self):
        session_id = self._create()
        self._press(session_id, "1", "2")
        response = self._press(session_id, "+", "nope")
        assert response.status_code == 400
        data = self.client.get(f"/api/v1/sessions/{session_id}").json()
        assert data["display"] == "12"
        assert data["has_pending"] is False

    def test_empty_input_rejected(self):
        session_id = self._create()
        assert self._press(session_id).status_code == 422

    def test_non_finite_memory(self):
        session_id = self._create()
        data = self._press(session_id, "1", "M-", "MR", "ln", "MS").json()
        assert data["display"] == "NaN"
        assert data["memory"] is None
        assert data["memory_display"] == "NaN"

    def test_unknown_session(self):
        assert self.client.get(f"/api/v1/sessions/{uuid4()}").status_code == 404
        assert self._press(str(uuid4()), "1").status_code == 404

    def test_delete_session(self):
        session_id = self._create()
        assert self.client.delete(f"/api/v1/sessions/{session_id}").status_code == 204
        assert self.client.get(f"/api/v1/sessions/{session_id}").status_code == 404
        assert self.client.delete(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_sessions_are_independent(self):
        first = self._create()
        second = self._create()
        self._press(first, "9")
        assert self.client.get(f"/api/v1/sessions/{second}").json()["display"] == "0"


class TestHistoryAPI:
    """Test history listing, recall and clearing."""

    def setup_method(self):
        self.store = SessionStore(max_sessions=10, config=EngineConfig())
        app.dependency_overrides[get_session_store] = lambda: self.store
        self.client = TestClient(app)
        self.session_id = self.client.post("/api/v1/sessions").json()["session_id"]
        self.client.post(
            f"/api/v1/sessions/{self.session_id}/input",
            json={"tokens": ["2", "x²", "3", "x²"]},
        )

    def teardown_method(self):
        app.dependency_overrides.clear()

    def test_get_history(self):
        history = self.client.get(f"/api/v1/sessions/{self.session_id}/history").json()
        assert history == [
            {"expression": "x²(3)", "result": "9"},
            {"expression": "x²(2)", "result": "4"},
        ]

    def test_recall(self):
        response = self.client.post(f"/api/v1/sessions/{self.session_id}/history/1/recall")
        assert response.status_code == 200
        data = response.json()
        assert data["display"] == "4"
        assert len(data["history"]) == 2

    def test_recall_out_of_range(self):
        response = self.client.post(f"/api/v1/sessions/{self.session_id}/history/5/recall")
        assert response.status_code == 404

    def test_recall_negative_index(self):
        response = self.client.post(f"/api/v1/sessions/{self.session_id}/history/-1/recall")
        assert response.status_code == 422

    def test_clear_history(self):
        data = self.client.delete(f"/api/v1/sessions/{self.session_id}/history").json()
        assert data["history"] == []
        assert data["display"] == "9"


class TestSessionStore:
    """Test the in-memory store directly."""

    def test_eviction(self):
        store = SessionStore(max_sessions=2, config=EngineConfig())
        first = store.create()
        store.create()
        store.create()
        assert len(store) == 2
        assert first.session_id not in store

    def test_missing_session(self):
        store = SessionStore(max_sessions=2, config=EngineConfig())
        with pytest.raises(SessionNotFoundError):
            store.get(uuid4())
        with pytest.raises(SessionNotFoundError):
            store.delete(uuid4())

    def test_snapshot_carries_session_id(self):
        store = SessionStore(max_sessions=2, config=EngineConfig())
        session = store.create()
        session.calculator.press_many(["4", "MS"])
        snapshot = session.snapshot()
        assert snapshot.session_id == session.session_id
        assert snapshot.memory == 4
