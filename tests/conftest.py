import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from classtest.db.session import get_store  # noqa: E402
from classtest.main import app  # noqa: E402
from classtest.store.memory import InMemoryDocumentStore  # noqa: E402


@pytest.fixture()
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
async def client(store: InMemoryDocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, backed by the in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
