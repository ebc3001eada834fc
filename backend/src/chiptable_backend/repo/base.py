from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any


class VersionConflict(Exception):
    def __init__(self, table_id: str, expected: int, actual: int) -> None:
        super().__init__(f"table {table_id} is at version {actual}, expected {expected}")
        self.table_id = table_id
        self.expected = expected
        self.actual = actual


class TableStore(ABC):
    """Document store holding one JSON document per table.

    ``update`` applies every path in one atomic step and bumps the document's
    ``version``; subscribers get the full document after each commit.
    """

    @abstractmethod
    async def create(self, table_id: str, document: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def get(self, table_id: str) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        table_id: str,
        updates: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def subscribe(self, table_id: str) -> asyncio.Queue[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    async def unsubscribe(self, table_id: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        raise NotImplementedError
