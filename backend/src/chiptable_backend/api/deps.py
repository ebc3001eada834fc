from __future__ import annotations

from chiptable_backend.config import settings
from chiptable_backend.engine.service import TableService
from chiptable_backend.repo.in_memory import InMemoryTableStore


store = InMemoryTableStore(queue_size=settings.subscriber_queue_size)
table_service = TableService(store, settings)
