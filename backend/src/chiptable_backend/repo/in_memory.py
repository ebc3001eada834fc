from __future__ import annotations

import asyncio
import copy
import logging
from collections import defaultdict
from typing import Any

from chiptable_backend.repo.base import TableStore, VersionConflict
from chiptable_backend.utils.paths import apply_updates


logger = logging.getLogger(__name__)


class InMemoryTableStore(TableStore):
    def __init__(self, queue_size: int = 16) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._subscriptions: dict[str, set[asyncio.Queue[dict[str, Any]]]] = defaultdict(set)
        self._queue_size = queue_size
        self._lock = asyncio.Lock()

    async def create(self, table_id: str, document: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            if table_id in self._documents:
                raise ValueError(f"table {table_id} already exists")
            stored = copy.deepcopy(document)
            stored.setdefault("version", 0)
            self._documents[table_id] = stored
            self._notify(table_id, stored)
            return copy.deepcopy(stored)

    async def get(self, table_id: str) -> dict[str, Any]:
        async with self._lock:
            if table_id not in self._documents:
                raise KeyError(f"table {table_id} not found")
            return copy.deepcopy(self._documents[table_id])

    async def update(
        self,
        table_id: str,
        updates: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        async with self._lock:
            if table_id not in self._documents:
                raise KeyError(f"table {table_id} not found")
            current = self._documents[table_id]
            version = current.get("version", 0)
            if expected_version is not None and expected_version != version:
                raise VersionConflict(table_id, expected_version, version)

            candidate = copy.deepcopy(current)
            apply_updates(candidate, updates)
            candidate["version"] = version + 1
            self._documents[table_id] = candidate
            self._notify(table_id, candidate)
            return copy.deepcopy(candidate)

    async def subscribe(self, table_id: str) -> asyncio.Queue[dict[str, Any]]:
        async with self._lock:
            if table_id not in self._documents:
                raise KeyError(f"table {table_id} not found")
            queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self._queue_size)
            self._subscriptions[table_id].add(queue)
            return queue

    async def unsubscribe(self, table_id: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        async with self._lock:
            self._subscriptions[table_id].discard(queue)

    def _notify(self, table_id: str, document: dict[str, Any]) -> None:
        for queue in list(self._subscriptions.get(table_id, set())):
            if queue.full():
                # readers only need the latest snapshot; drop the oldest one
                queue.get_nowait()
                logger.debug("subscriber queue full for %s, dropped oldest snapshot", table_id)
            queue.put_nowait(copy.deepcopy(document))
