"""
Document store contract shared by the in-memory and SQL implementations.

Documents live at slash-separated paths with an even number of segments
(collection/doc/collection/doc). Collection paths have an odd number.
Every write publishes a fresh snapshot of the written collection to live
subscribers; there is no locking and concurrent writers are last-write-wins.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fastapi import status

from classtest.core.exceptions import ServiceError
from classtest.store.hub import Subscription, SubscriptionHub


class _DeleteField:
    """Sentinel: remove the field instead of writing a value."""

    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD = _DeleteField()


class DocumentNotFound(ServiceError):
    code = "DOCUMENT_NOT_FOUND"

    def __init__(self, path: str) -> None:
        super().__init__(f"Document not found: {path}", status.HTTP_404_NOT_FOUND)
        self.path = path


class StoreUnavailable(ServiceError):
    """The backing store could not be reached or rejected the operation."""

    code = "STORE_UNAVAILABLE"

    def __init__(self, detail: str) -> None:
        super().__init__("The data store is unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)
        self.detail = detail


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    path: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class CollectionSnapshot:
    path: str
    docs: List[DocumentSnapshot] = field(default_factory=list)

    def get(self, doc_id: str) -> Optional[DocumentSnapshot]:
        for doc in self.docs:
            if doc.id == doc_id:
                return doc
        return None

    def data(self) -> List[Dict[str, Any]]:
        return [doc.data for doc in self.docs]


def _segments(path: str) -> List[str]:
    parts = path.strip("/").split("/")
    if not path or any(not p for p in parts):
        raise ValueError(f"Invalid store path: {path!r}")
    return parts


def split_path(path: str) -> Tuple[str, str]:
    """Split a document path into (collection path, document id)."""
    parts = _segments(path)
    if len(parts) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def check_collection_path(path: str) -> str:
    parts = _segments(path)
    if len(parts) % 2 != 1:
        raise ValueError(f"Not a collection path: {path!r}")
    return "/".join(parts)


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of target with source merged in; nested maps merge, DELETE_FIELD removes."""
    merged = copy.deepcopy(dict(target))
    for key, value in source.items():
        if value is DELETE_FIELD:
            merged.pop(key, None)
        elif isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge({}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_update(data: Mapping[str, Any], fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply dotted field-path updates ("scores.s1") to a copy of data."""
    updated = copy.deepcopy(dict(data))
    for field_path, value in fields.items():
        keys = field_path.split(".")
        node = updated
        for key in keys[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                if value is DELETE_FIELD:
                    node = None
                    break
                child = {}
                node[key] = child
            node = child
        if node is None:
            continue
        if value is DELETE_FIELD:
            node.pop(keys[-1], None)
        else:
            node[keys[-1]] = copy.deepcopy(value)
    return updated


class DocumentStore(ABC):
    """Async document store: point reads/writes plus live collection subscriptions."""

    def __init__(self) -> None:
        self.hub = SubscriptionHub()

    @abstractmethod
    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def set(self, path: str, data: Mapping[str, Any], merge: bool = False) -> None:
        ...

    @abstractmethod
    async def update(self, path: str, fields: Mapping[str, Any]) -> None:
        """Partial update by dotted field path. Raises DocumentNotFound if absent."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        ...

    @abstractmethod
    async def list(self, collection: str) -> List[DocumentSnapshot]:
        """All documents directly in a collection, ordered by document id."""

    async def find(self, collection: str, field_name: str, value: Any) -> List[DocumentSnapshot]:
        return [doc for doc in await self.list(collection) if doc.data.get(field_name) == value]

    async def snapshot(self, collection: str) -> CollectionSnapshot:
        collection = check_collection_path(collection)
        return CollectionSnapshot(path=collection, docs=await self.list(collection))

    async def subscribe(self, collection: str) -> Subscription:
        """Open a live subscription; the initial snapshot is queued immediately."""
        initial = await self.snapshot(collection)
        return self.hub.attach(initial.path, initial)

    async def _notify(self, collection: str) -> None:
        if self.hub.has_subscribers(collection):
            self.hub.publish(collection, await self.snapshot(collection))
