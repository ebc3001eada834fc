from __future__ import annotations

import pytest

from chiptable_backend.config import Settings
from chiptable_backend.engine.service import TableService
from chiptable_backend.repo.in_memory import InMemoryTableStore


@pytest.fixture
def store() -> InMemoryTableStore:
    return InMemoryTableStore()


@pytest.fixture
def service(store: InMemoryTableStore) -> TableService:
    return TableService(store, Settings())
