from __future__ import annotations

from chiptable_backend.engine.seating import (
    active_players,
    blind_positions,
    next_active_player,
    next_dealer,
    reseat_active_first,
)

from .helpers import make_table


def test_active_players_keeps_seating_order() -> None:
    table = make_table((100, 100, 100, 100))
    table.players[1].active = False

    assert [(player.player_id, index) for player, index in active_players(table)] == [
        ("p0", 0),
        ("p2", 2),
        ("p3", 3),
    ]


def test_next_active_player_skips_folded_and_wraps() -> None:
    table = make_table((100, 100, 100, 100))
    table.players[1].folded = True

    assert next_active_player(table, 0) == 2
    assert next_active_player(table, 3) == 0


def test_next_active_player_restarts_from_first_active_seat() -> None:
    table = make_table((100, 100, 100, 100))
    table.players[2].active = False

    assert next_active_player(table, 2) == 0
    assert next_active_player(table, -1) == 0


def test_next_active_player_with_everyone_folded_returns_following_seat() -> None:
    table = make_table((100, 100, 100))
    for player in table.players:
        player.folded = True

    assert next_active_player(table, 0) == 1


def test_next_active_player_without_active_seats() -> None:
    table = make_table((100, 100))
    for player in table.players:
        player.active = False

    assert next_active_player(table, 0) == -1
    assert next_dealer(table) == -1


def test_blind_positions_multiway() -> None:
    table = make_table((100, 100, 100), dealer=2)

    positions = blind_positions(table)

    assert (positions.dealer, positions.small_blind, positions.big_blind) == (2, 0, 1)


def test_blind_positions_heads_up() -> None:
    table = make_table((100, 100), dealer=0)

    positions = blind_positions(table)

    assert (positions.dealer, positions.small_blind, positions.big_blind) == (0, 1, 0)


def test_blind_positions_fall_back_when_dealer_left() -> None:
    table = make_table((100, 100, 100, 100), dealer=1)
    table.players[1].active = False

    positions = blind_positions(table)

    assert (positions.dealer, positions.small_blind, positions.big_blind) == (0, 2, 3)


def test_next_dealer_skips_inactive_seats() -> None:
    table = make_table((100, 100, 100), dealer=0)
    table.players[1].active = False

    assert next_dealer(table) == 2


def test_reseat_moves_inactive_seats_last_and_remaps_pointers() -> None:
    table = make_table((100, 100, 100, 100), dealer=2)
    table.players[1].active = False
    table.current_turn = 3
    table.last_to_act = 1

    reseated = reseat_active_first(table)

    assert reseated.player_ids == ["p0", "p2", "p3", "p1"]
    assert reseated.dealer_position == 1
    assert reseated.current_turn == 2
    assert reseated.last_to_act == -1
    assert len(reseated.players) == len(reseated.player_ids)
    # the input snapshot is left alone
    assert table.player_ids == ["p0", "p1", "p2", "p3"]
