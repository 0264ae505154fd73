"""Shared request helpers for the API tests."""

from typing import Dict, List

from httpx import AsyncClient

from classtest.core.tenant_service import approve_teacher
from classtest.store.memory import InMemoryDocumentStore


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def signup_approved_teacher(
    client: AsyncClient,
    store: InMemoryDocumentStore,
    email: str = "teacher@example.com",
    password: str = "secret123",
) -> dict:
    """Sign up, approve out of band, log in again. Returns the login response body."""
    response = await client.post("/api/v1/auth/teacher/signup", json={"email": email, "password": password})
    assert response.status_code == 201
    await approve_teacher(store, response.json()["uid"])
    response = await client.post("/api/v1/auth/teacher/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


async def import_roster(client: AsyncClient, token: str, lines: List[str]) -> dict:
    response = await client.post(
        "/api/v1/students/bulk",
        json={"text": "\n".join(lines)},
        headers=auth_header(token),
    )
    assert response.status_code == 201
    return response.json()


async def create_session(client: AsyncClient, token: str, title: str, answers: List[str]) -> dict:
    response = await client.post(
        "/api/v1/sessions",
        data={"title": title, "answers": answers},
        headers=auth_header(token),
    )
    assert response.status_code == 201
    return response.json()


async def student_token(client: AsyncClient, teacher_code: str, student_code: str) -> str:
    response = await client.post(
        "/api/v1/auth/student/login",
        json={"teacher_code": teacher_code, "student_code": student_code},
    )
    assert response.status_code == 200
    return response.json()["access_token"]
