"""Request and response models exchanged with match service clients."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_serializer

from salvo.engine.match import FireOutcome, FireResult, MatchState


class StartMatchCommand(BaseModel):
    player_id: str = Field(min_length=1)
    vs_computer: bool = False


class JoinMatchCommand(BaseModel):
    player_id: str = Field(min_length=1)


class ShipDeployment(BaseModel):
    """One ship of a fleet: its type name and the labels of the cells it covers."""

    ship_type: str
    coordinates: list[str]


class DeployFleetCommand(BaseModel):
    player_id: str = Field(min_length=1)
    ships: list[ShipDeployment]


class FireCommand(BaseModel):
    player_id: str = Field(min_length=1)
    coordinate: str


class FireResponse(BaseModel):
    """Outcome of a fire action as seen by the shooter.

    ``ship_type_sunk`` is only present for SUNK and ``game_won`` only when true.
    """

    outcome: FireOutcome
    ship_type_sunk: str | None = None
    game_won: bool = False

    @classmethod
    def from_result(cls, result: FireResult) -> "FireResponse":
        if result.outcome is FireOutcome.SUNK:
            return cls(
                outcome=result.outcome,
                ship_type_sunk=result.sunk_ship_type,
                game_won=result.game_won,
            )
        return cls(outcome=result.outcome)

    @model_serializer
    def _serialize(self) -> dict[str, object]:
        data: dict[str, object] = {"outcome": self.outcome.value}
        if self.ship_type_sunk is not None:
            data["ship_type_sunk"] = self.ship_type_sunk
        if self.game_won:
            data["game_won"] = True
        return data


class BoardView(BaseModel):
    """One board as a given viewer may see it (opponent ships stay hidden)."""

    owner: str
    ships: list[str] = Field(default_factory=list)
    hits: list[str] = Field(default_factory=list)
    misses: list[str] = Field(default_factory=list)
    ships_remaining: int = 0


class MatchView(BaseModel):
    match_id: str
    state: MatchState
    player_one_id: str
    player_two_id: str | None = None
    vs_computer: bool = False
    turn_player_id: str | None = None
    winner: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
