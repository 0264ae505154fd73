"""Roster text parsing and bulk import."""

import pytest

from classtest.api.v1.students.service import import_students, parse_roster
from classtest.core.paths import paths
from classtest.core.services import load_students
from classtest.store.memory import InMemoryDocumentStore

TENANT_ID = "tenant-1"


def test_parse_roster_skips_short_lines_and_uppercases_codes() -> None:
    text = "경제A 10101 김민수 k7q2\n\n  경제A   10102  이영희  ab12  extra\n경제B 20101 박철수\n"
    rows, skipped = parse_roster(text)
    assert [(r.class_group, r.hakbun, r.name, r.code) for r in rows] == [
        ("경제A", "10101", "김민수", "K7Q2"),
        ("경제A", "10102", "이영희", "AB12"),
    ]
    assert skipped == 1


@pytest.mark.asyncio
async def test_import_skips_existing_and_repeated_hakbun() -> None:
    store = InMemoryDocumentStore()
    await import_students(store, TENANT_ID, "A 1 Kim K1")

    result = await import_students(store, TENANT_ID, "A 1 Kim2 K9\nB 2 Lee L2\nB 2 Lee2 L3")
    assert [s.hakbun for s in result.added] == ["2"]
    assert result.skipped_duplicates == ["1", "2"]

    students = await load_students(store, TENANT_ID)
    assert [(s.hakbun, s.name) for s in students] == [("1", "Kim"), ("2", "Lee")]


@pytest.mark.asyncio
async def test_import_opens_new_classes_without_touching_existing() -> None:
    store = InMemoryDocumentStore()
    await store.set(paths.class_settings(TENANT_ID), {"A": False})

    result = await import_students(store, TENANT_ID, "A 1 Kim K1\nB 2 Lee L2")
    assert result.new_classes == ["B"]

    stored = await store.get(paths.class_settings(TENANT_ID))
    assert stored["version"] == 2
    assert stored["defaultByClass"] == {"A": False, "B": True}


@pytest.mark.asyncio
async def test_import_without_new_classes_does_not_write_settings() -> None:
    store = InMemoryDocumentStore()
    await store.set(paths.class_settings(TENANT_ID), {"version": 2, "defaultByClass": {"A": True}, "bySession": {}, "updatedAt": 1})
    await import_students(store, TENANT_ID, "A 1 Kim K1")
    assert (await store.get(paths.class_settings(TENANT_ID)))["updatedAt"] == 1
