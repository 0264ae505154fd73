import pytest
from httpx import AsyncClient

from classtest.store.memory import InMemoryDocumentStore

from helpers import auth_header, signup_approved_teacher

KEY = ["1", "2", "3", "4", "5"]
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


@pytest.mark.asyncio
async def test_create_with_pdf_and_download(client: AsyncClient, store: InMemoryDocumentStore) -> None:
    teacher = await signup_approved_teacher(client, store)
    admin = auth_header(teacher["access_token"])

    response = await client.post(
        "/api/v1/sessions",
        data={"title": "학습지 1", "answers": KEY},
        files={"document": ("sheet.pdf", PDF_BYTES, "application/pdf")},
        headers=admin,
    )
    assert response.status_code == 201
    session = response.json()
    assert session["has_document"] is True

    response = await client.get(f"/api/v1/sessions/{session['id']}/document", headers=admin)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content == PDF_BYTES


@pytest.mark.asyncio
async def test_rejected_uploads_write_nothing(client: AsyncClient, store: InMemoryDocumentStore) -> None:
    teacher = await signup_approved_teacher(client, store)
    admin = auth_header(teacher["access_token"])

    response = await client.post(
        "/api/v1/sessions",
        data={"title": "notes", "answers": KEY},
        files={"document": ("notes.txt", b"hello", "text/plain")},
        headers=admin,
    )
    assert response.status_code == 400

    too_big = b"%PDF" + b"0" * (800 * 1024)
    response = await client.post(
        "/api/v1/sessions",
        data={"title": "big", "answers": KEY},
        files={"document": ("big.pdf", too_big, "application/pdf")},
        headers=admin,
    )
    assert response.status_code == 413

    assert (await client.get("/api/v1/sessions", headers=admin)).json() == []


@pytest.mark.asyncio
async def test_session_validation(client: AsyncClient, store: InMemoryDocumentStore) -> None:
    teacher = await signup_approved_teacher(client, store)
    admin = auth_header(teacher["access_token"])

    response = await client.post("/api/v1/sessions", data={"title": "  ", "answers": KEY}, headers=admin)
    assert response.status_code == 422
    response = await client.post("/api/v1/sessions", data={"title": "six", "answers": KEY + ["6"]}, headers=admin)
    assert response.status_code == 422

    response = await client.post("/api/v1/sessions", data={"title": "short", "answers": ["1", "2"]}, headers=admin)
    assert response.status_code == 201
    assert response.json()["answers"] == ["1", "2", "", "", ""]
    assert response.json()["has_document"] is False

    response = await client.get(f"/api/v1/sessions/{response.json()['id']}/document", headers=admin)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_sessions_listed_in_creation_order_and_deleted(
    client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    teacher = await signup_approved_teacher(client, store)
    admin = auth_header(teacher["access_token"])
    ids = []
    for title in ("c", "a", "b"):
        response = await client.post("/api/v1/sessions", data={"title": title, "answers": KEY}, headers=admin)
        ids.append(response.json()["id"])

    listed = (await client.get("/api/v1/sessions", headers=admin)).json()
    assert [s["title"] for s in listed] == ["c", "a", "b"]

    assert (await client.delete(f"/api/v1/sessions/{ids[0]}", headers=admin)).status_code == 204
    listed = (await client.get("/api/v1/sessions", headers=admin)).json()
    assert [s["id"] for s in listed] == ids[1:]
