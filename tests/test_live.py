"""Live tenant snapshots over the websocket."""

import asyncio

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

import classtest.main as main_module
from classtest.core.tenant_service import approve_teacher
from classtest.db.session import get_store
from classtest.main import app
from classtest.store.memory import InMemoryDocumentStore

KEY = ["1", "2", "3", "4", "5"]


async def _no_db() -> None:
    return None


@pytest.fixture()
def live_client(store: InMemoryDocumentStore, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(main_module, "init_db", _no_db)
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _approved_teacher(client: TestClient, store: InMemoryDocumentStore) -> dict:
    credentials = {"email": "live@example.com", "password": "secret123"}
    response = client.post("/api/v1/auth/teacher/signup", json=credentials)
    # No live subscribers exist yet; the approval runs on its own loop
    asyncio.run(approve_teacher(store, response.json()["uid"]))
    return client.post("/api/v1/auth/teacher/login", json=credentials).json()


def test_teacher_receives_snapshots(live_client: TestClient, store: InMemoryDocumentStore) -> None:
    teacher = _approved_teacher(live_client, store)
    headers = {"Authorization": f"Bearer {teacher['access_token']}"}

    with live_client.websocket_connect(f"/api/v1/live?token={teacher['access_token']}") as ws:
        first = ws.receive_json()
        assert first["students"] == []
        assert first["sessions"] == []
        assert first["classSettings"]["version"] == 2

        live_client.post("/api/v1/students/bulk", json={"text": "경제A 10101 김민수 K7Q2"}, headers=headers)
        update = ws.receive_json()
        assert [s["hakbun"] for s in update["students"]] == ["10101"]


def test_student_sees_only_own_record_without_answers(
    live_client: TestClient, store: InMemoryDocumentStore
) -> None:
    teacher = _approved_teacher(live_client, store)
    headers = {"Authorization": f"Bearer {teacher['access_token']}"}
    live_client.post(
        "/api/v1/students/bulk",
        json={"text": "경제A 10101 김민수 K7Q2\n경제A 10102 이영희 AB12"},
        headers=headers,
    )
    live_client.post("/api/v1/sessions", data={"title": "1차", "answers": KEY}, headers=headers)
    student = live_client.post(
        "/api/v1/auth/student/login",
        json={"teacher_code": teacher["teacher_code"], "student_code": "K7Q2"},
    ).json()

    with live_client.websocket_connect(f"/api/v1/live?token={student['access_token']}") as ws:
        state = ws.receive_json()
        assert [s["code"] for s in state["students"]] == ["K7Q2"]
        assert state["sessions"][0]["title"] == "1차"
        assert state["sessions"][0]["answers"] is None


def test_rejects_bad_token(live_client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect):
        with live_client.websocket_connect("/api/v1/live?token=garbage") as ws:
            ws.receive_json()
