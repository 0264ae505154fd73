"""
Live view of one tenant's students, sessions and class settings.

``open`` subscribes to the three collections; every snapshot replaces the
corresponding state wholesale. Re-opening for another tenant (or the same one)
closes the previous subscriptions first.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple, TypeVar

from pydantic import ValidationError

from classtest.core.class_settings import ClassActiveSettings, LegacySettings, parse_settings
from classtest.core.documents import SessionDocument, StudentDocument
from classtest.core.paths import CLASS_SETTINGS_DOC, paths
from classtest.core.services import session_from_snapshot, sort_roster, sort_sessions, student_from_snapshot
from classtest.store.base import CollectionSnapshot, DocumentSnapshot, DocumentStore
from classtest.store.hub import Subscription

logger = logging.getLogger(__name__)

STUDENTS = "students"
SESSIONS = "sessions"
SETTINGS = "settings"

T = TypeVar("T")


@dataclass(frozen=True)
class TenantState:
    tenant_id: str
    students: List[StudentDocument] = field(default_factory=list)
    sessions: List[SessionDocument] = field(default_factory=list)
    settings: ClassActiveSettings = field(default_factory=LegacySettings)
    # Collections whose snapshots produced this state
    changed: Tuple[str, ...] = ()


class TenantContext:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.tenant_id: Optional[str] = None
        self.students: List[StudentDocument] = []
        self.sessions: List[SessionDocument] = []
        self.settings: ClassActiveSettings = LegacySettings()
        self.ready = asyncio.Event()
        self._subscriptions: Dict[str, Subscription] = {}
        self._tasks: List[asyncio.Task] = []
        self._changes: "asyncio.Queue[Optional[str]]" = asyncio.Queue()

    async def open(self, tenant_id: str) -> None:
        await self.close()
        self.tenant_id = tenant_id
        self.students, self.sessions, self.settings = [], [], LegacySettings()
        self.ready = asyncio.Event()
        self._changes = asyncio.Queue()

        collections = {
            STUDENTS: paths.students(tenant_id),
            SESSIONS: paths.sessions(tenant_id),
            SETTINGS: paths.settings(tenant_id),
        }
        for kind, collection in collections.items():
            sub = await self.store.subscribe(collection)
            self._subscriptions[kind] = sub
            self._tasks.append(asyncio.create_task(self._pump(kind, sub)))
        logger.debug("Opened live context for tenant %s", tenant_id)

    async def _pump(self, kind: str, sub: Subscription) -> None:
        async for snapshot in sub:
            self._apply(kind, snapshot)
            self._changes.put_nowait(kind)

    def _parse(self, kind: str, snapshot: CollectionSnapshot, parse: Callable[[DocumentSnapshot], T]) -> List[T]:
        parsed: List[T] = []
        for doc in snapshot.docs:
            try:
                parsed.append(parse(doc))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed %s document %s in tenant %s: %s",
                    kind,
                    doc.id,
                    self.tenant_id,
                    e.errors(include_url=False),
                )
        return parsed

    def _apply(self, kind: str, snapshot: CollectionSnapshot) -> None:
        if kind == STUDENTS:
            self.students = sort_roster(self._parse(kind, snapshot, student_from_snapshot))
        elif kind == SESSIONS:
            self.sessions = sort_sessions(self._parse(kind, snapshot, session_from_snapshot))
        else:
            doc = snapshot.get(CLASS_SETTINGS_DOC)
            self.settings = parse_settings(doc.data if doc is not None else None)
            self.ready.set()

    def state(self, changed: Tuple[str, ...] = ()) -> TenantState:
        return TenantState(
            tenant_id=self.tenant_id or "",
            students=list(self.students),
            sessions=list(self.sessions),
            settings=self.settings,
            changed=changed,
        )

    async def changes(self) -> AsyncIterator[TenantState]:
        """Yield the combined state after every snapshot until the context closes."""
        queue = self._changes
        while True:
            kinds = [await queue.get()]
            # Snapshots that arrived meanwhile are folded into one state
            while not queue.empty():
                kinds.append(queue.get_nowait())
            if None in kinds:
                return
            yield self.state(tuple(sorted(set(kinds))))

    async def close(self) -> None:
        if not self._subscriptions:
            return
        for sub in self._subscriptions.values():
            sub.close()
        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error("Live subscription for tenant %s failed: %r", self.tenant_id, result)
        self._changes.put_nowait(None)
        logger.debug("Closed live context for tenant %s", self.tenant_id)
        self._subscriptions = {}
        self._tasks = []
