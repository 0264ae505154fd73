import asyncio
import logging

import pytest

from classtest.core.class_settings import can_submit
from classtest.core.paths import paths
from classtest.core.tenant_context import TenantContext
from classtest.store.memory import InMemoryDocumentStore

TENANT_ID = "tenant-1"


async def _next(changes):
    return await asyncio.wait_for(changes.__anext__(), timeout=1)


@pytest.mark.asyncio
async def test_snapshots_replace_state() -> None:
    store = InMemoryDocumentStore()
    await store.set(
        paths.student(TENANT_ID, "a"),
        {"id": "a", "classGroup": "B", "hakbun": "2", "name": "Kim", "code": "K1", "scores": {}},
    )
    context = TenantContext(store)
    await context.open(TENANT_ID)
    changes = context.changes()

    await asyncio.wait_for(context.ready.wait(), timeout=1)
    first = await _next(changes)
    assert [s.id for s in first.students] == ["a"]
    assert first.sessions == []
    assert can_submit(first.settings, "B", None) is True

    await store.set(paths.session(TENANT_ID, "s1"), {"id": "s1", "title": "1차", "answers": ["1"] * 5, "createdAt": 1})
    second = await _next(changes)
    assert second.changed == ("sessions",)
    assert [s.title for s in second.sessions] == ["1차"]

    await store.set(paths.class_settings(TENANT_ID), {"B": False})
    third = await _next(changes)
    assert can_submit(third.settings, "B", "s1") is False

    await context.close()
    with pytest.raises(StopAsyncIteration):
        await _next(changes)


@pytest.mark.asyncio
async def test_malformed_document_does_not_stop_updates(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryDocumentStore()
    context = TenantContext(store)
    await context.open(TENANT_ID)
    changes = context.changes()
    await asyncio.wait_for(context.ready.wait(), timeout=1)
    await _next(changes)

    with caplog.at_level(logging.WARNING, logger="classtest.core.tenant_context"):
        await store.set(paths.student(TENANT_ID, "broken"), {"classGroup": "A", "name": "x"})
        broken = await _next(changes)
    assert broken.students == []
    assert "Skipping malformed students document broken" in caplog.text

    await store.set(
        paths.student(TENANT_ID, "ok"),
        {"id": "ok", "classGroup": "A", "hakbun": "1", "name": "Lee", "code": "K2", "scores": {}},
    )
    valid = await _next(changes)
    assert [s.id for s in valid.students] == ["ok"]

    await context.close()
    with pytest.raises(StopAsyncIteration):
        await _next(changes)


@pytest.mark.asyncio
async def test_reopen_tears_down_previous_subscriptions() -> None:
    store = InMemoryDocumentStore()
    context = TenantContext(store)
    await context.open(TENANT_ID)
    await asyncio.wait_for(context.ready.wait(), timeout=1)
    assert store.hub.has_subscribers(paths.students(TENANT_ID))

    await context.open("tenant-2")
    assert not store.hub.has_subscribers(paths.students(TENANT_ID))
    assert store.hub.has_subscribers(paths.students("tenant-2"))
    assert context.tenant_id == "tenant-2"

    await context.close()
    assert not store.hub.has_subscribers(paths.settings("tenant-2"))
