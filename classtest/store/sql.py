"""Document store persisted through SQLAlchemy: one JSON row per document."""

import copy
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from classtest.core.models import Document
from classtest.store.base import (
    DocumentNotFound,
    DocumentSnapshot,
    DocumentStore,
    StoreUnavailable,
    apply_update,
    check_collection_path,
    deep_merge,
    split_path,
)

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    def __init__(self, session_factory: async_sessionmaker) -> None:
        super().__init__()
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as db:
                yield db
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error("Document store connection failed: %s", e)
            raise StoreUnavailable(str(e)) from e
        except DBAPIError as e:
            logger.exception("Document store operation failed")
            raise StoreUnavailable(str(e)) from e

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        collection, doc_id = split_path(path)
        async with self._session() as db:
            row = await db.get(Document, f"{collection}/{doc_id}")
            return copy.deepcopy(row.data) if row is not None else None

    async def set(self, path: str, data: Mapping[str, Any], merge: bool = False) -> None:
        collection, doc_id = split_path(path)
        key = f"{collection}/{doc_id}"
        async with self._session() as db:
            row = await db.get(Document, key)
            if row is None:
                db.add(Document(path=key, collection=collection, doc_id=doc_id, data=deep_merge({}, data)))
            elif merge:
                row.data = deep_merge(row.data or {}, data)
            else:
                row.data = deep_merge({}, data)
            await db.commit()
        await self._notify(collection)

    async def update(self, path: str, fields: Mapping[str, Any]) -> None:
        collection, doc_id = split_path(path)
        key = f"{collection}/{doc_id}"
        async with self._session() as db:
            row = await db.get(Document, key)
            if row is None:
                raise DocumentNotFound(key)
            row.data = apply_update(row.data or {}, fields)
            await db.commit()
        await self._notify(collection)

    async def delete(self, path: str) -> None:
        collection, doc_id = split_path(path)
        async with self._session() as db:
            row = await db.get(Document, f"{collection}/{doc_id}")
            if row is None:
                return
            await db.delete(row)
            await db.commit()
        await self._notify(collection)

    async def list(self, collection: str) -> List[DocumentSnapshot]:
        collection = check_collection_path(collection)
        async with self._session() as db:
            result = await db.execute(
                select(Document).where(Document.collection == collection).order_by(Document.doc_id)
            )
            return [
                DocumentSnapshot(id=row.doc_id, path=row.path, data=copy.deepcopy(row.data or {}))
                for row in result.scalars().all()
            ]
