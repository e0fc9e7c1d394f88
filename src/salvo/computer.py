"""Automated opponent that plays through the match service like any other client."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable

from salvo.config import ServiceConfig
from salvo.contracts import DeployFleetCommand, FireCommand, FireResponse, JoinMatchCommand
from salvo.engine.errors import MatchFinished, NotPlayersTurn
from salvo.engine.events import FireOccurred, MatchCreated, MatchEvent, MatchFinishedEvent
from salvo.service import MatchService
from salvo.strategy import FiringStrategy, random_fleet
from salvo.telemetry import get_tracer, record_match_metric

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.computer")

ShotListener = Callable[[str, str, FireResponse], None]


class ComputerPlayer:
    """Reacts to bus events: joins and deploys on creation, fires when it is its turn.

    Only the targeting state of unfinished matches is kept. Callers that want
    to see the shots pass ``on_shot``, called with the match id, label and response.
    """

    def __init__(
        self,
        service: MatchService,
        config: ServiceConfig | None = None,
        rng: random.Random | None = None,
        on_shot: ShotListener | None = None,
    ) -> None:
        self.service = service
        self.config = config or ServiceConfig()
        self._rng = rng or random.Random()
        self._strategies: dict[str, FiringStrategy] = {}
        self._on_shot = on_shot

    @property
    def player_id(self) -> str:
        return self.config.computer_player_id

    def handle(self, event: MatchEvent) -> None:
        if isinstance(event, MatchCreated):
            self.join_and_deploy(event.match_id)
        elif isinstance(event, FireOccurred):
            self.take_turn(event.match_id)
        elif isinstance(event, MatchFinishedEvent):
            self._strategies.pop(event.match_id, None)

    def join_and_deploy(self, match_id: str) -> None:
        with tracer.start_as_current_span("computer.join_and_deploy") as span:
            span.set_attribute("match.id", match_id)
            self.service.join_match(match_id, JoinMatchCommand(player_id=self.player_id))
            logger.info("computer_joined", extra={"match_id": match_id})
            fleet = random_fleet(self._rng)
            self.service.deploy_fleet(
                match_id, DeployFleetCommand(player_id=self.player_id, ships=fleet)
            )
            self._strategies[match_id] = FiringStrategy(self._rng)
            logger.info("computer_deployed", extra={"match_id": match_id})

    def take_turn(self, match_id: str) -> FireResponse | None:
        with tracer.start_as_current_span("computer.take_turn") as span:
            span.set_attribute("match.id", match_id)
            strategy = self._strategies.setdefault(match_id, FiringStrategy(self._rng))
            self._think()
            target = strategy.next_target()
            try:
                response = self.service.fire(
                    match_id, FireCommand(player_id=self.player_id, coordinate=target)
                )
            except MatchFinished as exc:
                logger.info(
                    "computer_fire_after_match_end",
                    extra={"match_id": match_id, "winner": exc.winner},
                )
                self._strategies.pop(match_id, None)
                return None
            except NotPlayersTurn:
                logger.warning("computer_fire_out_of_turn", extra={"match_id": match_id})
                return None

            strategy.record(target, response)
            if self._on_shot is not None:
                self._on_shot(match_id, target, response)
            span.set_attribute("shot.outcome", response.outcome.value)
            record_match_metric(
                "salvo_computer_shots_total", 1, {"outcome": response.outcome.value}
            )
            logger.info(
                "computer_fired",
                extra={
                    "match_id": match_id,
                    "coordinate": target,
                    "outcome": response.outcome.value,
                },
            )
            if response.game_won:
                logger.info("computer_won", extra={"match_id": match_id})
                self._strategies.pop(match_id, None)
            return response

    def _think(self) -> None:
        if self.config.computer_think_seconds > 0:
            time.sleep(self.config.computer_think_seconds)
