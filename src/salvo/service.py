"""Match service: the application boundary in front of the engine.

Every mutation goes through a single :meth:`MatchRepository.update` call so that
concurrent callers (a human and the automated opponent) cannot overwrite each
other's results. Events recorded by the engine are drained inside that update
and published once it has returned, outside the per-match lock.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator

from salvo.contracts import (
    BoardView,
    DeployFleetCommand,
    FireCommand,
    FireResponse,
    JoinMatchCommand,
    MatchView,
    ShipDeployment,
    StartMatchCommand,
)
from salvo.engine.coordinates import decode, encode
from salvo.engine.errors import DeploymentError, InvalidCoordinate, MatchNotFound, SalvoError
from salvo.engine.events import MatchEvent
from salvo.engine.field import FieldService
from salvo.engine.fleet import FleetValidator, ShipPlacement
from salvo.engine.match import FireResult, Match
from salvo.notifications import EventPublisher
from salvo.repository import MatchRepository
from salvo.telemetry import get_tracer, record_match_metric

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.service")


def _new_match_id() -> str:
    return str(uuid.uuid4())


class MatchService:
    """Starts, joins, deploys and fires on matches stored in a repository."""

    def __init__(
        self,
        repository: MatchRepository,
        publisher: EventPublisher,
        field_service: FieldService | None = None,
        validator: FleetValidator | None = None,
        id_factory: Callable[[], str] = _new_match_id,
    ) -> None:
        self.repository = repository
        self.publisher = publisher
        self.field_service = field_service or FieldService()
        self.validator = validator or FleetValidator()
        self._id_factory = id_factory

    def start_match(self, command: StartMatchCommand) -> MatchView:
        with self._operation("start_match", player_id=command.player_id):
            match = Match.start(self._id_factory(), command.player_id, command.vs_computer)
            events = match.collect_events()
            self.repository.put(match)
            record_match_metric(
                "salvo_matches_created_total", 1, {"vs_computer": command.vs_computer}
            )
        self._publish(events)
        return self._view(match)

    def join_match(self, match_id: str, command: JoinMatchCommand) -> MatchView:
        with self._operation("join_match", match_id=match_id, player_id=command.player_id):
            match = self.repository.update(match_id, lambda m: self._apply_join(m, command))
        return self._view(match)

    def deploy_fleet(self, match_id: str, command: DeployFleetCommand) -> MatchView:
        with self._operation("deploy_fleet", match_id=match_id, player_id=command.player_id):
            placements = [self._to_placement(ship) for ship in command.ships]

            def apply(match: Match) -> tuple[Match, list[MatchEvent]]:
                match.deploy_fleet(
                    command.player_id,
                    placements,
                    field_service=self.field_service,
                    validator=self.validator,
                )
                return match, match.collect_events()

            match, events = self.repository.update(match_id, apply)
            record_match_metric(
                "salvo_fleets_deployed_total", 1, {"started": match.started_at is not None}
            )
        self._publish(events)
        return self._view(match)

    def fire(self, match_id: str, command: FireCommand) -> FireResponse:
        with self._operation("fire", match_id=match_id, player_id=command.player_id) as span:
            coord = decode(command.coordinate)

            def apply(match: Match) -> tuple[FireResult, list[MatchEvent]]:
                result = match.fire(command.player_id, coord, field_service=self.field_service)
                return result, match.collect_events()

            result, events = self.repository.update(match_id, apply)
            span.set_attribute("shot.outcome", result.outcome.value)
            record_match_metric("salvo_shots_total", 1, {"outcome": result.outcome.value})
            if result.game_won:
                record_match_metric("salvo_matches_finished_total", 1)
        self._publish(events)
        return FireResponse.from_result(result)

    def get_match(self, match_id: str) -> MatchView:
        return self._view(self._load(match_id))

    def board_view(self, match_id: str, owner_id: str, viewer_id: str) -> BoardView:
        """Return ``owner_id``'s board; ship positions are only shown to the owner."""
        match = self._load(match_id)
        board = match.board_of(owner_id)
        if board is None:
            return BoardView(owner=owner_id)
        hits: list[str] = []
        misses: list[str] = []
        for coord, cell in board:
            if cell.hit:
                (misses if cell.is_water else hits).append(encode(coord))
        ships = (
            [encode(coord) for ship in board.ships for coord in ship.coordinates]
            if viewer_id == owner_id
            else []
        )
        remaining = sum(
            1 for ship in board.ships if not self.field_service.is_ship_sunk(board, ship)
        )
        return BoardView(
            owner=owner_id, ships=ships, hits=hits, misses=misses, ships_remaining=remaining
        )

    def _load(self, match_id: str) -> Match:
        match = self.repository.get(match_id)
        if match is None:
            raise MatchNotFound(match_id)
        return match

    @staticmethod
    def _apply_join(match: Match, command: JoinMatchCommand) -> Match:
        match.join(command.player_id)
        return match

    @staticmethod
    def _to_placement(ship: ShipDeployment) -> ShipPlacement:
        try:
            coords = tuple(decode(label) for label in ship.coordinates)
        except InvalidCoordinate as exc:
            raise DeploymentError(
                f"{ship.ship_type} has an invalid coordinate: {exc.reason} ({exc.label!r}).",
                ship_type=ship.ship_type,
            ) from exc
        return ShipPlacement(ship.ship_type, coords)

    def _publish(self, events: list[MatchEvent]) -> None:
        for event in events:
            self.publisher.publish(event)

    @contextmanager
    def _operation(self, name: str, **attributes: str) -> Iterator:
        with tracer.start_as_current_span(f"service.{name}") as span:
            for key, value in attributes.items():
                span.set_attribute(key, value)
            try:
                yield span
            except SalvoError as exc:
                span.record_exception(exc)
                span.set_attribute("error", True)
                record_match_metric(
                    "salvo_rejected_actions_total",
                    1,
                    {"operation": name, "reason": type(exc).__name__},
                )
                logger.info(
                    "action_rejected",
                    extra={"operation": name, "reason": type(exc).__name__, **attributes},
                )
                raise

    @staticmethod
    def _view(match: Match) -> MatchView:
        return MatchView(
            match_id=match.match_id,
            state=match.state,
            player_one_id=match.player_one_id,
            player_two_id=match.player_two_id,
            vs_computer=match.vs_computer,
            turn_player_id=match.turn_player_id,
            winner=match.winner,
            created_at=match.created_at,
            started_at=match.started_at,
            finished_at=match.finished_at,
        )
