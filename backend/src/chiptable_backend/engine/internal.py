from __future__ import annotations

from dataclasses import dataclass

from chiptable_backend.engine.models import Table


@dataclass(frozen=True)
class ActionOutcome:
    table: Table
    applied: bool
    round_complete: bool = False
    stage_advanced: bool = False


@dataclass(frozen=True)
class JoinOutcome:
    table: Table
    player_id: str
    rejoined: bool = False


@dataclass(frozen=True)
class BlindPositions:
    dealer: int
    small_blind: int
    big_blind: int
