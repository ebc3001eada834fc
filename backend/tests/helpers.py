from __future__ import annotations

from chiptable_backend.engine.models import Player, Table
from chiptable_backend.engine.service import TableService


def make_table(
    chips: tuple[int, ...] = (100, 100, 100),
    *,
    small_blind: int = 1,
    big_blind: int = 2,
    dealer: int = 0,
) -> Table:
    return Table(
        table_id="tbl_test",
        small_blind=small_blind,
        big_blind=big_blind,
        players=[
            Player(player_id=f"p{index}", name=f"Player {index}", chips=stack)
            for index, stack in enumerate(chips)
        ],
        dealer_position=dealer,
    )


def seat(table: Table, player_id: str) -> Player:
    player = table.player(player_id)
    if player is None:
        raise AssertionError(f"{player_id} is not seated")
    return player


async def create_table_with_players(
    service: TableService,
    names: tuple[str, ...] = ("Alice", "Bob", "Carol"),
    *,
    small_blind: int = 1,
    big_blind: int = 2,
    buy_in: int = 100,
) -> tuple[str, list[str]]:
    created = await service.create_table(names[0], small_blind, big_blind, buy_in)
    player_ids = [created.player_id]
    for name in names[1:]:
        joined = await service.join_table(created.table_id, name, buy_in)
        player_ids.append(joined.player_id)
    return created.table_id, player_ids
