from __future__ import annotations

import pytest

from chiptable_backend.engine.lifecycle import start_round
from chiptable_backend.utils.paths import apply_updates, diff_documents, split_path

from .helpers import make_table


def test_split_path_turns_digits_into_indices() -> None:
    assert split_path("players/2/chips") == ["players", 2, "chips"]
    with pytest.raises(ValueError):
        split_path("players//chips")


def test_diff_of_round_start_only_touches_changed_fields() -> None:
    before = make_table().to_document()
    after = start_round(make_table()).to_document()

    updates = diff_documents(before, after)

    assert updates["pot"] == 3
    assert updates["players/1/chips"] == 99
    assert updates["players/2/currentBet"] == 2
    assert updates["roundStage"] == "PRE_FLOP"
    assert "players/0/chips" not in updates
    assert "smallBlind" not in updates


def test_diff_replaces_lists_that_changed_length() -> None:
    before = {"players": [{"name": "a"}]}
    after = {"players": [{"name": "a"}, {"name": "b"}]}

    assert diff_documents(before, after) == {"players": after["players"]}


def test_apply_updates_reproduces_the_target_document() -> None:
    before = make_table().to_document()
    after = start_round(make_table()).to_document()

    apply_updates(before, diff_documents(before, after))

    assert before == after


def test_apply_updates_appends_and_deletes() -> None:
    document = {"players": [{"name": "a"}], "note": "x"}

    apply_updates(document, {"players/1": {"name": "b"}, "note": None})

    assert document == {"players": [{"name": "a"}, {"name": "b"}]}


def test_apply_updates_rejects_missing_parent() -> None:
    with pytest.raises((KeyError, IndexError)):
        apply_updates({"players": []}, {"players/3/chips": 5})
