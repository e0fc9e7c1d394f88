"""Two-player match aggregate: lifecycle, turn order and fire resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Sequence

from salvo.telemetry import get_meter, get_tracer

from .board import Board
from .coordinates import Coordinate
from .errors import (
    InvalidCoordinate,
    MatchFinished,
    MatchJoinError,
    MatchNotStarted,
    NotPlayersTurn,
    ShipsAlreadyDeployed,
    UnknownPlayer,
)
from .events import FireOccurred, MatchCreated, MatchEvent, MatchFinishedEvent
from .field import FieldService
from .fleet import FleetValidator, ShipPlacement

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.match")
meter = get_meter("salvo.engine.match")

MOVE_COUNTER = meter.create_counter(
    "salvo_engine_moves",
    unit="1",
    description="Number of fire actions resolved by Match",
)

_FIELD_SERVICE = FieldService()
_VALIDATOR = FleetValidator()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchState(Enum):
    """High-level lifecycle of a match, derived from its attributes."""

    CREATED = "created"
    AWAITING_DEPLOYMENT = "awaiting_deployment"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class PlayerSlot(Enum):
    """The two seats of a match. The initiating player always sits in ONE."""

    ONE = "player_one"
    TWO = "player_two"

    def opponent(self) -> PlayerSlot:
        """Return the opposing slot."""
        return PlayerSlot.TWO if self is PlayerSlot.ONE else PlayerSlot.ONE


class FireOutcome(Enum):
    MISS = "MISS"
    HIT = "HIT"
    SUNK = "SUNK"


@dataclass(frozen=True)
class FireResult:
    """Outcome of a single fire action."""

    outcome: FireOutcome
    sunk_ship_type: str | None = None
    game_won: bool = False


@dataclass
class Match:
    """Authoritative state of one game between two players.

    Transitions check every precondition before touching state, so a raised
    error always leaves the match exactly as it was. Events produced by a
    transition are kept in an outbox until the caller drains them with
    :meth:`collect_events`.
    """

    match_id: str
    player_one_id: str
    vs_computer: bool = False
    player_two_id: str | None = None
    turn: PlayerSlot | None = None
    boards: dict[PlayerSlot, Board] = field(default_factory=dict)
    created_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    winner: str | None = None
    _outbox: list[MatchEvent] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def start(
        cls,
        match_id: str,
        player_id: str,
        vs_computer: bool = False,
        now: datetime | None = None,
    ) -> Match:
        """Create a match seated by ``player_id``, who also takes the first turn."""
        match = cls(
            match_id=match_id,
            player_one_id=player_id,
            vs_computer=vs_computer,
            turn=PlayerSlot.ONE,
            created_at=now or utcnow(),
        )
        if vs_computer:
            match._outbox.append(MatchCreated(match_id))
        logger.info(
            "match_created",
            extra={"match_id": match_id, "player_id": player_id, "vs_computer": vs_computer},
        )
        return match

    @property
    def state(self) -> MatchState:
        if self.finished_at is not None:
            return MatchState.FINISHED
        if self.players_ready():
            return MatchState.IN_PROGRESS
        if self.player_two_id is not None:
            return MatchState.AWAITING_DEPLOYMENT
        return MatchState.CREATED

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None

    @property
    def turn_player_id(self) -> str | None:
        return self.player_id(self.turn) if self.turn is not None else None

    def player_id(self, slot: PlayerSlot) -> str | None:
        return self.player_one_id if slot is PlayerSlot.ONE else self.player_two_id

    def slot_of(self, player_id: str) -> PlayerSlot:
        if player_id == self.player_one_id:
            return PlayerSlot.ONE
        if self.player_two_id is not None and player_id == self.player_two_id:
            return PlayerSlot.TWO
        logger.error(
            "unknown_player", extra={"match_id": self.match_id, "player_id": player_id}
        )
        raise UnknownPlayer(player_id)

    def board_of(self, player_id: str) -> Board | None:
        return self.boards.get(self.slot_of(player_id))

    def players_ready(self) -> bool:
        return (
            self.player_two_id is not None
            and PlayerSlot.ONE in self.boards
            and PlayerSlot.TWO in self.boards
        )

    def collect_events(self) -> list[MatchEvent]:
        """Return pending events and clear the outbox."""
        events, self._outbox = self._outbox, []
        return events

    def join(self, player_id: str) -> None:
        with tracer.start_as_current_span("match.join") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("player", player_id)
            if self.player_two_id is not None:
                logger.error(
                    "join_rejected_match_full",
                    extra={"match_id": self.match_id, "player_id": player_id},
                )
                raise MatchJoinError("Another player is already playing this match.")
            if player_id == self.player_one_id:
                logger.error(
                    "join_rejected_same_player",
                    extra={"match_id": self.match_id, "player_id": player_id},
                )
                raise MatchJoinError("A player cannot join their own match as the opponent.")
            self.player_two_id = player_id
            logger.info("match_joined", extra={"match_id": self.match_id, "player_id": player_id})

    def deploy_fleet(
        self,
        player_id: str,
        placements: Sequence[ShipPlacement],
        field_service: FieldService = _FIELD_SERVICE,
        validator: FleetValidator = _VALIDATOR,
        now: datetime | None = None,
    ) -> None:
        """Validate a fleet, build the player's board and start the match once both are in."""
        with tracer.start_as_current_span("match.deploy_fleet") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("player", player_id)
            slot = self.slot_of(player_id)
            if slot in self.boards:
                logger.error(
                    "deploy_rejected_already_deployed",
                    extra={"match_id": self.match_id, "player_id": player_id},
                )
                raise ShipsAlreadyDeployed(player_id)

            ships = validator.validate(placements)
            self.boards[slot] = field_service.build_board(ships, owner=player_id)
            logger.info(
                "fleet_deployed",
                extra={"match_id": self.match_id, "player_id": player_id, "ships": len(ships)},
            )

            if self.players_ready():
                self.started_at = now or utcnow()
                span.set_attribute("match.started", True)
                logger.info(
                    "match_started",
                    extra={"match_id": self.match_id, "turn": self.turn_player_id},
                )

    def fire(
        self,
        player_id: str,
        coord: Coordinate,
        field_service: FieldService = _FIELD_SERVICE,
        now: datetime | None = None,
    ) -> FireResult:
        """Resolve one shot by ``player_id`` at the opponent's board.

        The turn always passes to the opponent after a resolved shot, including the
        shot that wins the match.
        """
        with tracer.start_as_current_span("match.fire") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("player", player_id)
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)
            self._check_can_fire(player_id, coord)

            slot = self.slot_of(player_id)
            notify_opponent = self.vs_computer and self.turn is PlayerSlot.ONE
            target_board = self.boards[slot.opponent()]
            cell = target_board.mark_hit(coord)

            if cell.ship is None:
                result = FireResult(FireOutcome.MISS)
            elif not field_service.is_ship_sunk(target_board, cell.ship):
                result = FireResult(FireOutcome.HIT)
            elif not field_service.all_ships_sunk(target_board):
                result = FireResult(FireOutcome.SUNK, sunk_ship_type=cell.ship.name)
            else:
                result = FireResult(FireOutcome.SUNK, sunk_ship_type=cell.ship.name, game_won=True)
                self.winner = player_id
                self.finished_at = now or utcnow()
                span.set_attribute("match.winner", player_id)
                self._outbox.append(MatchFinishedEvent(self.match_id, player_id))
                logger.info("match_finished", extra={"match_id": self.match_id, "winner": player_id})

            self.turn = slot.opponent()
            span.set_attribute("shot.outcome", result.outcome.value)
            span.set_attribute("next_player", self.turn_player_id or "")
            if notify_opponent:
                self._outbox.append(FireOccurred(self.match_id))

            MOVE_COUNTER.add(1, attributes={"result": result.outcome.value, "slot": slot.value})
            logger.info(
                "shot_resolved",
                extra={
                    "match_id": self.match_id,
                    "player_id": player_id,
                    "coordinate": str(coord),
                    "outcome": result.outcome.value,
                    "sunk_ship_type": result.sunk_ship_type,
                },
            )
            return result

    def _check_can_fire(self, player_id: str, coord: Coordinate) -> None:
        if self.is_finished:
            logger.error(
                "fire_rejected_match_finished",
                extra={"match_id": self.match_id, "player_id": player_id, "winner": self.winner},
            )
            raise MatchFinished(self.winner)
        if not self.players_ready():
            logger.error(
                "fire_rejected_not_started",
                extra={"match_id": self.match_id, "player_id": player_id},
            )
            raise MatchNotStarted("Both fleets must be deployed before firing.")
        slot = self.slot_of(player_id)
        if not coord.is_on_board(self.boards[slot.opponent()].size):
            logger.error(
                "fire_rejected_off_board",
                extra={
                    "match_id": self.match_id,
                    "player_id": player_id,
                    "coordinate": str(coord),
                },
            )
            raise InvalidCoordinate(str(coord), "outside the board")
        if slot is not self.turn:
            logger.error(
                "fire_rejected_wrong_player",
                extra={
                    "match_id": self.match_id,
                    "player_id": player_id,
                    "current": self.turn_player_id,
                },
            )
            raise NotPlayersTurn(player_id)
