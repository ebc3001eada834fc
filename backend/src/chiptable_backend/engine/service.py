from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar
from uuid import uuid4

from chiptable_backend.config import Settings
from chiptable_backend.engine import betting, lifecycle
from chiptable_backend.engine.errors import PreconditionError
from chiptable_backend.engine.internal import ActionOutcome, JoinOutcome
from chiptable_backend.engine.models import (
    CreateTableResponse,
    JoinTableResponse,
    MinRaiseResponse,
    PlayerAction,
    PlayerActionResponse,
    Table,
)
from chiptable_backend.repo.base import TableStore, VersionConflict
from chiptable_backend.utils.paths import diff_documents


logger = logging.getLogger(__name__)

T = TypeVar("T")


class TableService:
    """Runs table transitions against the store.

    Every operation reads the latest snapshot, computes the next table with a
    pure transition, and writes the changed paths conditional on the snapshot
    version. A concurrent commit makes the write fail; the operation is then
    recomputed from the fresh snapshot.
    """

    def __init__(self, store: TableStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or Settings()

    async def create_table(
        self,
        name: str,
        small_blind: int,
        big_blind: int,
        buy_in: int,
    ) -> CreateTableResponse:
        table_id = f"tbl_{uuid4().hex[:12]}"
        player_id = _new_player_id()
        table = lifecycle.create_table(table_id, player_id, name, small_blind, big_blind, buy_in)
        document = await self._store.create(table_id, table.to_document())
        logger.info("table %s created by %s (blinds %d/%d)", table_id, name, small_blind, big_blind)
        return CreateTableResponse(
            table_id=table_id,
            player_id=player_id,
            table=Table.from_document(document),
        )

    async def get_table(self, table_id: str) -> Table:
        try:
            document = await self._store.get(table_id)
        except KeyError as exc:
            raise PreconditionError("TABLE_NOT_FOUND", f"Table {table_id} does not exist.") from exc
        return Table.from_document(document)

    async def get_min_raise(self, table_id: str) -> MinRaiseResponse:
        table = await self.get_table(table_id)
        return MinRaiseResponse(min_raise=betting.min_raise(table), current_bet=table.current_bet)

    async def join_table(self, table_id: str, name: str, buy_in: int) -> JoinTableResponse:
        player_id = _new_player_id()

        def step(table: Table) -> tuple[Table, JoinOutcome]:
            outcome = lifecycle.join_table(
                table,
                player_id,
                name,
                buy_in,
                max_seats=self._settings.max_seats,
            )
            return outcome.table, outcome

        table, outcome = await self._commit(table_id, step)
        if outcome.rejoined:
            logger.info("player %s rejoined table %s", outcome.player_id, table_id)
        elif outcome.player_id == player_id:
            logger.info("player %s (%s) joined table %s", player_id, name, table_id)
        return JoinTableResponse(player_id=outcome.player_id, table=table)

    async def leave_table(self, table_id: str, player_id: str) -> Table:
        table = await self._commit_table(table_id, lambda current: lifecycle.leave_table(current, player_id))
        logger.info("player %s left table %s", player_id, table_id)
        return table

    async def start_round(self, table_id: str) -> Table:
        table = await self._commit_table(table_id, lifecycle.start_round)
        logger.info(
            "round started on %s: dealer=%d turn=%d pot=%d",
            table_id,
            table.dealer_position,
            table.current_turn,
            table.pot,
        )
        return table

    async def move_dealer(self, table_id: str) -> Table:
        return await self._commit_table(table_id, lifecycle.move_dealer)

    async def player_action(
        self,
        table_id: str,
        player_id: str,
        action: PlayerAction | str,
        raise_amount: int | None = None,
    ) -> PlayerActionResponse:
        def step(table: Table) -> tuple[Table, ActionOutcome]:
            outcome = betting.apply_action(table, player_id, action, raise_amount)
            return outcome.table, outcome

        table, outcome = await self._commit(table_id, step)
        if not outcome.applied:
            logger.debug("ignored %s from %s on %s: not their turn", action, player_id, table_id)
        elif outcome.stage_advanced:
            logger.info("table %s advanced to %s", table_id, table.round_stage.value)
        return PlayerActionResponse(
            applied=outcome.applied,
            round_complete=outcome.round_complete,
            stage_advanced=outcome.stage_advanced,
            table=table,
        )

    async def end_round(self, table_id: str, winner_id: str) -> Table:
        def step(table: Table) -> tuple[Table, int]:
            return lifecycle.end_round(table, winner_id), table.pot

        table, awarded = await self._commit(table_id, step)
        logger.info("round ended on %s: %s awarded %d", table_id, winner_id, awarded)
        return table

    async def update_player_chips(self, table_id: str, player_id: str, chips: int) -> Table:
        return await self._commit_table(
            table_id,
            lambda current: lifecycle.update_player_chips(current, player_id, chips),
        )

    async def update_blinds(self, table_id: str, small_blind: int, big_blind: int) -> Table:
        return await self._commit_table(
            table_id,
            lambda current: lifecycle.update_blinds(current, small_blind, big_blind),
        )

    async def update_player_positions(self, table_id: str, ordered_ids: list[str]) -> Table:
        return await self._commit_table(
            table_id,
            lambda current: lifecycle.update_player_positions(current, ordered_ids),
        )

    async def set_player_active(self, table_id: str, player_id: str, active: bool) -> Table:
        return await self._commit_table(
            table_id,
            lambda current: lifecycle.set_player_active(current, player_id, active),
        )

    async def subscribe(self, table_id: str) -> asyncio.Queue[dict[str, Any]]:
        try:
            return await self._store.subscribe(table_id)
        except KeyError as exc:
            raise PreconditionError("TABLE_NOT_FOUND", f"Table {table_id} does not exist.") from exc

    async def unsubscribe(self, table_id: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        await self._store.unsubscribe(table_id, queue)

    async def _commit_table(self, table_id: str, transition: Callable[[Table], Table]) -> Table:
        table, _ = await self._commit(table_id, lambda current: (transition(current), None))
        return table

    async def _commit(
        self,
        table_id: str,
        step: Callable[[Table], tuple[Table, T]],
    ) -> tuple[Table, T]:
        attempts = max(1, self._settings.write_retries)
        for attempt in range(1, attempts + 1):
            current = await self.get_table(table_id)
            updated, result = step(current)
            updates = diff_documents(current.to_document(), updated.to_document())
            updates.pop("version", None)
            if not updates:
                return current, result
            try:
                document = await self._store.update(table_id, updates, expected_version=current.version)
            except VersionConflict as exc:
                logger.debug("write conflict on %s (attempt %d/%d): %s", table_id, attempt, attempts, exc)
                continue
            except KeyError as exc:
                raise PreconditionError("TABLE_NOT_FOUND", f"Table {table_id} does not exist.") from exc
            return Table.from_document(document), result

        logger.warning("giving up on %s after %d conflicting writes", table_id, attempts)
        raise PreconditionError("WRITE_CONFLICT", f"Table {table_id} kept changing; try again.")


def _new_player_id() -> str:
    return f"plr_{uuid4().hex[:12]}"
