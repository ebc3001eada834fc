"""Seat lookup and dealer/blind rotation.

All rotation math runs in active-seat order (the seats with ``active`` set, in
seating order) and converts back to absolute seat indices for storage.
"""

from __future__ import annotations

from chiptable_backend.engine.errors import PreconditionError
from chiptable_backend.engine.internal import BlindPositions
from chiptable_backend.engine.models import Player, Table


def active_players(table: Table) -> list[tuple[Player, int]]:
    return [(player, index) for index, player in enumerate(table.players) if player.active]


def active_indices(table: Table) -> list[int]:
    return [index for index, player in enumerate(table.players) if player.active]


def live_indices(table: Table) -> list[int]:
    return [
        index
        for index, player in enumerate(table.players)
        if player.active and not player.folded
    ]


def next_active_player(table: Table, from_index: int) -> int:
    """Return the first unfolded active seat after ``from_index``, wrapping.

    Scanning starts from the first active seat when ``from_index`` is not an
    active seat. When every active seat has folded the seat right after
    ``from_index`` is returned. -1 means nobody is seated.
    """
    active = active_indices(table)
    if not active:
        return -1

    count = len(active)
    start = active.index(from_index) if from_index in active else -1
    for step in range(1, count + 1):
        candidate = active[(start + step) % count]
        if not table.players[candidate].folded:
            return candidate
    return active[(start + 1) % count]


def dealer_order_position(table: Table) -> int:
    active = active_indices(table)
    if table.dealer_position in active:
        return active.index(table.dealer_position)
    return 0


def blind_positions(table: Table) -> BlindPositions:
    active = active_indices(table)
    if not active:
        raise PreconditionError("NOT_ENOUGH_PLAYERS", "No active players at the table.")

    count = len(active)
    position = dealer_order_position(table)
    return BlindPositions(
        dealer=active[position],
        small_blind=active[(position + 1) % count],
        big_blind=active[(position + 2) % count],
    )


def next_dealer(table: Table) -> int:
    active = active_indices(table)
    if not active:
        return -1
    return active[(dealer_order_position(table) + 1) % len(active)]


def reorder_seats(table: Table, order: list[int]) -> Table:
    """Rebuild the seat list in ``order`` (old indices) and remap the pointers."""
    remap = {old: new for new, old in enumerate(order)}
    updated = table.model_copy(deep=True)
    updated.players = [table.players[old].model_copy(deep=True) for old in order]
    updated.dealer_position = remap.get(table.dealer_position, table.dealer_position)
    updated.current_turn = remap.get(table.current_turn, -1)
    updated.last_to_act = remap.get(table.last_to_act, -1)
    return updated


def reseat_active_first(table: Table) -> Table:
    active = active_indices(table)
    inactive = [index for index, player in enumerate(table.players) if not player.active]
    updated = reorder_seats(table, active + inactive)

    # turn and closing marker may only point at seats still in play
    if updated.current_turn >= 0 and not updated.players[updated.current_turn].active:
        updated.current_turn = -1
    if updated.last_to_act >= 0 and not updated.players[updated.last_to_act].active:
        updated.last_to_act = -1
    return updated
