"""In-process fan-out of collection snapshots to live subscribers."""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Set

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """
    Live sequence of full collection snapshots.

    The first item is the snapshot taken at subscribe time. Every item fully
    replaces the previous one; consumers never diff.
    """

    def __init__(self, hub: "SubscriptionHub", collection: str) -> None:
        self.collection = collection
        self.closed = False
        self._hub = hub
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue()

    def push(self, snapshot: Any) -> None:
        if not self.closed:
            self._queue.put_nowait(snapshot)

    async def next(self) -> Any:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._hub.detach(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        return await self.next()

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class SubscriptionHub:
    def __init__(self) -> None:
        self._subscriptions: Dict[str, Set[Subscription]] = defaultdict(set)

    def attach(self, collection: str, initial: Any) -> Subscription:
        sub = Subscription(self, collection)
        sub.push(initial)
        self._subscriptions[collection].add(sub)
        logger.debug("Subscribed to %s (%d listeners)", collection, len(self._subscriptions[collection]))
        return sub

    def detach(self, sub: Subscription) -> None:
        listeners = self._subscriptions.get(sub.collection)
        if listeners is None:
            return
        listeners.discard(sub)
        if not listeners:
            del self._subscriptions[sub.collection]

    def has_subscribers(self, collection: str) -> bool:
        return bool(self._subscriptions.get(collection))

    def publish(self, collection: str, snapshot: Any) -> None:
        for sub in list(self._subscriptions.get(collection, ())):
            sub.push(snapshot)
