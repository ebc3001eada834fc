from __future__ import annotations

from typing import Any

from chiptable_backend.engine.errors import PreconditionError, ValidationError
from chiptable_backend.engine.internal import JoinOutcome
from chiptable_backend.engine.models import MAX_SEATS, Player, RoundStage, Table
from chiptable_backend.engine.seating import (
    active_indices,
    blind_positions,
    next_active_player,
    next_dealer,
    reorder_seats,
    reseat_active_first,
)


def create_table(
    table_id: str,
    player_id: str,
    name: str,
    small_blind: int,
    big_blind: int,
    buy_in: int,
) -> Table:
    _require_name(name)
    _require_blinds(small_blind, big_blind)
    _require_chips(buy_in, "INVALID_BUY_IN", "buy_in")
    return Table(
        table_id=table_id,
        small_blind=small_blind,
        big_blind=big_blind,
        players=[Player(player_id=player_id, name=name, chips=buy_in)],
    )


def join_table(
    table: Table,
    player_id: str,
    name: str,
    buy_in: int,
    max_seats: int = MAX_SEATS,
) -> JoinOutcome:
    """Seat ``name`` at the table.

    Identity is the display name: a matching seat is reused (and reactivated
    if it had left) instead of a new one being added. Anyone seated while a
    round is running sits that round out as folded.
    """
    _require_name(name)
    _require_chips(buy_in, "INVALID_BUY_IN", "buy_in")

    existing = next((player for player in table.players if player.name == name), None)
    if existing is not None:
        if existing.active:
            return JoinOutcome(table=table, player_id=existing.player_id)
        updated = table.model_copy(deep=True)
        seat = updated.players[table.seat_index(existing.player_id)]
        seat.active = True
        seat.folded = updated.round_active
        seat.current_bet = 0
        return JoinOutcome(
            table=reseat_active_first(updated),
            player_id=existing.player_id,
            rejoined=True,
        )

    if len(table.players) >= max_seats:
        raise PreconditionError("TABLE_FULL", f"Table already has {max_seats} seats.")

    updated = table.model_copy(deep=True)
    updated.players.append(
        Player(player_id=player_id, name=name, chips=buy_in, folded=updated.round_active),
    )
    return JoinOutcome(table=reseat_active_first(updated), player_id=player_id)


def leave_table(table: Table, player_id: str) -> Table:
    index = _require_seat(table, player_id)
    return _sit_out(table, index)


def start_round(table: Table) -> Table:
    if len(active_indices(table)) < 2:
        raise PreconditionError("NOT_ENOUGH_PLAYERS", "At least two active players are needed.")
    if table.round_active:
        raise PreconditionError("ROUND_ALREADY_ACTIVE", "A round is already in progress.")

    positions = blind_positions(table)
    updated = table.model_copy(deep=True)
    for player in updated.players:
        player.current_bet = 0
        if player.active:
            player.folded = False

    _post_blind(updated.players[positions.small_blind], updated.small_blind)
    _post_blind(updated.players[positions.big_blind], updated.big_blind)

    updated.pot = updated.small_blind + updated.big_blind
    updated.current_bet = updated.big_blind
    updated.round_active = True
    updated.round_stage = RoundStage.PRE_FLOP
    updated.dealer_position = positions.dealer
    updated.current_turn = next_active_player(updated, positions.big_blind)
    updated.last_to_act = positions.big_blind
    return updated


def move_dealer(table: Table) -> Table:
    if not active_indices(table):
        raise PreconditionError("NOT_ENOUGH_PLAYERS", "No active players to hand the button to.")
    updated = table.model_copy(deep=True)
    updated.dealer_position = next_dealer(table)
    return updated


def end_round(table: Table, winner_id: str) -> Table:
    index = table.seat_index(winner_id)
    if index < 0:
        raise PreconditionError("WINNER_NOT_SEATED", f"Player {winner_id} is not seated at this table.")
    if not table.round_active:
        raise PreconditionError("NO_ACTIVE_ROUND", "No round is in progress.")

    updated = table.model_copy(deep=True)
    updated.players[index].chips += updated.pot
    updated.pot = 0
    updated.current_bet = 0
    updated.round_active = False
    updated.round_stage = RoundStage.NONE
    updated.current_turn = -1
    updated.last_to_act = -1
    for player in updated.players:
        player.current_bet = 0
        player.folded = False

    if active_indices(updated):
        updated.dealer_position = next_dealer(updated)
    return updated


def update_player_chips(table: Table, player_id: str, chips: int) -> Table:
    _require_chips(chips, "NEGATIVE_CHIPS", "chips")
    index = _require_seat(table, player_id)
    updated = table.model_copy(deep=True)
    updated.players[index].chips = chips
    return updated


def update_blinds(table: Table, small_blind: int, big_blind: int) -> Table:
    _require_blinds(small_blind, big_blind)
    updated = table.model_copy(deep=True)
    updated.small_blind = small_blind
    updated.big_blind = big_blind
    return updated


def update_player_positions(table: Table, ordered_ids: list[str]) -> Table:
    """Reorder seats to follow ``ordered_ids``.

    Ids that are not seated are ignored. Seats missing from ``ordered_ids`` keep
    their relative order after the listed ones.
    """
    index_by_id = {player.player_id: index for index, player in enumerate(table.players)}
    order: list[int] = []
    for player_id in ordered_ids:
        index = index_by_id.get(player_id)
        if index is not None and index not in order:
            order.append(index)
    order.extend(index for index in range(len(table.players)) if index not in order)
    return reorder_seats(table, order)


def set_player_active(table: Table, player_id: str, active: bool) -> Table:
    """Deactivating a seat is the same as leaving; reactivating one mid-round sits out the hand."""
    index = _require_seat(table, player_id)
    if not active:
        return _sit_out(table, index)

    updated = table.model_copy(deep=True)
    seat = updated.players[index]
    if not seat.active:
        seat.active = True
        seat.folded = updated.round_active
        seat.current_bet = 0
    return reseat_active_first(updated)


def _sit_out(table: Table, index: int) -> Table:
    updated = table.model_copy(deep=True)
    seat = updated.players[index]

    if updated.round_active and seat.active and not seat.folded:
        seat.folded = True
        if updated.current_turn == index:
            updated.current_turn = next_active_player(updated, index)

    seat.active = False
    return reseat_active_first(updated)


def _post_blind(player: Player, amount: int) -> None:
    if player.chips < amount:
        raise PreconditionError(
            "INSUFFICIENT_CHIPS",
            f"{player.name} cannot cover the {amount} blind with {player.chips} chips.",
        )
    player.chips -= amount
    player.current_bet = amount


def _require_seat(table: Table, player_id: str) -> int:
    if not isinstance(player_id, str) or not player_id:
        raise ValidationError("INVALID_PLAYER_ID", "player_id must be a non-empty string.")
    index = table.seat_index(player_id)
    if index < 0:
        raise PreconditionError("PLAYER_NOT_SEATED", f"Player {player_id} is not seated at this table.")
    return index


def _require_name(name: Any) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("INVALID_NAME", "Player name must be a non-empty string.")


def _require_chips(value: Any, code: str, field: str) -> None:
    if not _is_int(value) or value < 0:
        raise ValidationError(code, f"{field} must be a non-negative integer, got {value!r}.")


def _require_blinds(small_blind: Any, big_blind: Any) -> None:
    if not _is_int(small_blind) or not _is_int(big_blind) or small_blind <= 0 or big_blind <= 0:
        raise ValidationError(
            "INVALID_BLINDS",
            f"Blinds must be positive integers, got {small_blind!r}/{big_blind!r}.",
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
