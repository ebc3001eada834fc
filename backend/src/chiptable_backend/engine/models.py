from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ENGINE_VERSION = "0.1.0"
MAX_SEATS = 10


class RoundStage(str, Enum):
    NONE = ""
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"


class PlayerAction(str, Enum):
    FOLD = "fold"
    CALL = "call"
    RAISE = "raise"


class Player(BaseModel):
    player_id: str
    name: str
    chips: int = Field(ge=0)
    folded: bool = False
    current_bet: int = 0
    active: bool = True

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class Table(BaseModel):
    """Persisted table document.

    Seats are kept as one ordered list of records that carry their own id, so
    the seat number of a player is its index in ``players``. ``player_ids`` is
    the parallel id view derived from that list.
    """

    table_id: str
    small_blind: int
    big_blind: int
    pot: int = 0
    players: list[Player] = Field(default_factory=list)
    dealer_position: int = 0
    current_turn: int = -1
    current_bet: int = 0
    round_active: bool = False
    round_stage: RoundStage = RoundStage.NONE
    last_to_act: int = -1
    version: int = 0

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    @property
    def player_ids(self) -> list[str]:
        return [player.player_id for player in self.players]

    def seat_index(self, player_id: str) -> int:
        for index, player in enumerate(self.players):
            if player.player_id == player_id:
                return index
        return -1

    def player(self, player_id: str) -> Player | None:
        index = self.seat_index(player_id)
        return self.players[index] if index >= 0 else None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Table:
        return cls.model_validate(document)


class EngineError(BaseModel):
    code: str
    message: str

    model_config = ConfigDict(extra="forbid")


class CreateTableRequest(BaseModel):
    name: str
    small_blind: int = 1
    big_blind: int = 2
    buy_in: int = 100

    model_config = ConfigDict(extra="forbid")


class CreateTableResponse(BaseModel):
    table_id: str
    player_id: str
    table: Table

    model_config = ConfigDict(extra="forbid")


class JoinTableRequest(BaseModel):
    name: str
    buy_in: int = 100

    model_config = ConfigDict(extra="forbid")


class JoinTableResponse(BaseModel):
    player_id: str
    table: Table

    model_config = ConfigDict(extra="forbid")


class LeaveTableRequest(BaseModel):
    player_id: str

    model_config = ConfigDict(extra="forbid")


class PlayerActionRequest(BaseModel):
    player_id: str
    action: PlayerAction
    raise_amount: int | None = None

    model_config = ConfigDict(extra="forbid")


class PlayerActionResponse(BaseModel):
    applied: bool
    round_complete: bool
    stage_advanced: bool
    table: Table

    model_config = ConfigDict(extra="forbid")


class EndRoundRequest(BaseModel):
    winner_id: str

    model_config = ConfigDict(extra="forbid")


class UpdateChipsRequest(BaseModel):
    chips: int

    model_config = ConfigDict(extra="forbid")


class UpdateBlindsRequest(BaseModel):
    small_blind: int
    big_blind: int

    model_config = ConfigDict(extra="forbid")


class UpdatePositionsRequest(BaseModel):
    ordered_ids: list[str]

    model_config = ConfigDict(extra="forbid")


class SetActiveRequest(BaseModel):
    active: bool

    model_config = ConfigDict(extra="forbid")


class MinRaiseResponse(BaseModel):
    min_raise: int
    current_bet: int

    model_config = ConfigDict(extra="forbid")
