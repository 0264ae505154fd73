import copy
from typing import Any, Dict, List, Mapping, Optional

from classtest.store.base import (
    DocumentNotFound,
    DocumentSnapshot,
    DocumentStore,
    apply_update,
    check_collection_path,
    deep_merge,
    split_path,
)


class InMemoryDocumentStore(DocumentStore):
    """Process-local store. Used by tests and for local runs without a database."""

    def __init__(self) -> None:
        super().__init__()
        self._docs: Dict[str, Dict[str, Any]] = {}

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        collection, doc_id = split_path(path)
        data = self._docs.get(f"{collection}/{doc_id}")
        return copy.deepcopy(data) if data is not None else None

    async def set(self, path: str, data: Mapping[str, Any], merge: bool = False) -> None:
        collection, doc_id = split_path(path)
        key = f"{collection}/{doc_id}"
        current = self._docs.get(key)
        if merge and current is not None:
            self._docs[key] = deep_merge(current, data)
        else:
            self._docs[key] = deep_merge({}, data)
        await self._notify(collection)

    async def update(self, path: str, fields: Mapping[str, Any]) -> None:
        collection, doc_id = split_path(path)
        key = f"{collection}/{doc_id}"
        current = self._docs.get(key)
        if current is None:
            raise DocumentNotFound(key)
        self._docs[key] = apply_update(current, fields)
        await self._notify(collection)

    async def delete(self, path: str) -> None:
        collection, doc_id = split_path(path)
        if self._docs.pop(f"{collection}/{doc_id}", None) is not None:
            await self._notify(collection)

    async def list(self, collection: str) -> List[DocumentSnapshot]:
        collection = check_collection_path(collection)
        prefix = collection + "/"
        docs = []
        for key in sorted(self._docs):
            if not key.startswith(prefix):
                continue
            doc_id = key[len(prefix):]
            if "/" in doc_id:
                continue
            docs.append(DocumentSnapshot(id=doc_id, path=key, data=copy.deepcopy(self._docs[key])))
        return docs
