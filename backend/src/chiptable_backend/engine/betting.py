from __future__ import annotations

from chiptable_backend.engine.errors import ValidationError
from chiptable_backend.engine.internal import ActionOutcome
from chiptable_backend.engine.models import Player, PlayerAction, RoundStage, Table
from chiptable_backend.engine.seating import (
    active_indices,
    active_players,
    dealer_order_position,
    live_indices,
    next_active_player,
)


NEXT_STAGE = {
    RoundStage.PRE_FLOP: RoundStage.FLOP,
    RoundStage.FLOP: RoundStage.TURN,
    RoundStage.TURN: RoundStage.RIVER,
}


def min_raise(table: Table) -> int:
    """Smallest legal raise increment: the last raise size, floored at one big blind."""
    if table.current_bet == 0:
        return table.big_blind

    bets = sorted(
        (player.current_bet for player, _ in active_players(table) if player.current_bet > 0),
        reverse=True,
    )
    if len(bets) < 2:
        return table.big_blind
    return max(table.big_blind, bets[0] - bets[1])


def is_round_complete(table: Table) -> bool:
    live = live_indices(table)
    if len(live) <= 1:
        return True

    if any(table.players[index].current_bet != table.current_bet for index in live):
        return False

    if table.last_to_act not in live:
        return True

    return table.current_turn == next_active_player(table, table.last_to_act)


def advance_stage(table: Table) -> Table:
    """Move to the next street. A folded dealer passes the closing marker to the nearest live seat before it."""
    active = active_indices(table)
    if not active or table.round_stage not in NEXT_STAGE:
        return table

    updated = table.model_copy(deep=True)
    updated.round_stage = NEXT_STAGE[table.round_stage]
    updated.current_bet = 0
    for player in updated.players:
        if player.active:
            player.current_bet = 0

    dealer = active[dealer_order_position(updated)]
    updated.last_to_act = _closing_seat(updated, dealer)
    updated.current_turn = next_active_player(updated, dealer)
    return updated


def apply_action(
    table: Table,
    player_id: str,
    action: PlayerAction | str,
    raise_amount: int | None = None,
) -> ActionOutcome:
    """Apply one betting action and evaluate round completion in the same step.

    An action from a seat that is unknown, inactive, or not on turn leaves the
    table untouched and reports ``applied=False``.
    """
    seat_index = table.seat_index(player_id)
    if seat_index < 0 or not table.round_active:
        return ActionOutcome(table=table, applied=False)
    if not table.players[seat_index].active or seat_index != table.current_turn:
        return ActionOutcome(table=table, applied=False)

    try:
        action = PlayerAction(action)
    except ValueError as exc:
        raise ValidationError("UNKNOWN_ACTION", f"Unsupported action {action!r}.") from exc

    updated = table.model_copy(deep=True)
    actor = updated.players[seat_index]

    if action is PlayerAction.FOLD:
        actor.folded = True
    elif action is PlayerAction.CALL:
        call_amount = updated.current_bet - actor.current_bet
        _commit_chips(updated, actor, call_amount)
        actor.current_bet = updated.current_bet
    elif action is PlayerAction.RAISE:
        if raise_amount is None or not isinstance(raise_amount, int) or raise_amount <= 0:
            raise ValidationError("INVALID_AMOUNT", "raise requires a positive raise_amount.")
        minimum = min_raise(table)
        if raise_amount < minimum:
            raise ValidationError(
                "RAISE_TOO_SMALL",
                f"Raise of {raise_amount} is below the minimum of {minimum}.",
            )
        total_bet = updated.current_bet + raise_amount
        _commit_chips(updated, actor, total_bet - actor.current_bet)
        actor.current_bet = total_bet
        updated.current_bet = total_bet
        updated.last_to_act = seat_index

    updated.current_turn = next_active_player(updated, seat_index)

    complete = is_round_complete(updated)
    advanced = False
    if complete and len(live_indices(updated)) > 1 and updated.round_stage is not RoundStage.RIVER:
        updated = advance_stage(updated)
        advanced = True
    return ActionOutcome(table=updated, applied=True, round_complete=complete, stage_advanced=advanced)


def _commit_chips(table: Table, player: Player, amount: int) -> None:
    if amount > player.chips:
        raise ValidationError(
            "INSUFFICIENT_CHIPS",
            f"{player.name} needs {amount} chips but has {player.chips}.",
        )
    player.chips -= amount
    table.pot += amount


def _closing_seat(table: Table, dealer: int) -> int:
    # the dealer closes each street; if folded, the nearest live seat before it
    active = active_indices(table)
    position = active.index(dealer)
    for step in range(len(active)):
        candidate = active[(position - step) % len(active)]
        if not table.players[candidate].folded:
            return candidate
    return dealer
