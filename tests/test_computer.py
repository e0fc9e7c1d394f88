"""The automated opponent plays through the service like any other client."""

from __future__ import annotations

import random

import pytest

from salvo.computer import ComputerPlayer
from salvo.config import ServiceConfig
from salvo.contracts import (
    DeployFleetCommand,
    FireCommand,
    FireResponse,
    ShipDeployment,
    StartMatchCommand,
)
from salvo.engine.coordinates import all_coordinates, encode
from salvo.engine.errors import MatchFinished
from salvo.engine.events import FireOccurred, MatchFinishedEvent
from salvo.engine.match import FireOutcome, MatchState
from salvo.notifications import InMemoryEventBus
from salvo.repository import InMemoryMatchRepository
from salvo.service import MatchService


Setup = tuple[MatchService, ComputerPlayer]


@pytest.fixture
def fired() -> list[tuple[str, str, FireResponse]]:
    return []


@pytest.fixture
def setup(fired: list[tuple[str, str, FireResponse]]) -> Setup:
    bus = InMemoryEventBus()
    service = MatchService(InMemoryMatchRepository(), bus)
    computer = ComputerPlayer(
        service,
        ServiceConfig(computer_player_id="hal"),
        random.Random(7),
        on_shot=lambda match_id, label, response: fired.append((match_id, label, response)),
    )
    bus.subscribe(computer.handle)
    return service, computer


def test_computer_joins_and_deploys_on_creation(setup: Setup) -> None:
    service, computer = setup
    view = service.start_match(StartMatchCommand(player_id="alice", vs_computer=True))

    assert service.get_match(view.match_id).player_two_id == "hal"
    board = service.repository.get(view.match_id).board_of("hal")
    assert board is not None
    assert len(board.ships) == 5


def test_computer_ignores_matches_against_humans(setup: Setup) -> None:
    service, _ = setup
    view = service.start_match(StartMatchCommand(player_id="alice"))
    assert service.get_match(view.match_id).player_two_id is None


def test_computer_answers_every_human_shot_until_the_end(
    setup: Setup,
    deployments: list[ShipDeployment],
    fired: list[tuple[str, str, FireResponse]],
) -> None:
    service, computer = setup
    match_id = service.start_match(StartMatchCommand(player_id="alice", vs_computer=True)).match_id
    service.deploy_fleet(match_id, DeployFleetCommand(player_id="alice", ships=deployments))

    human_shots = 0
    for coord in all_coordinates():
        if service.get_match(match_id).state is not MatchState.IN_PROGRESS:
            break
        service.fire(match_id, FireCommand(player_id="alice", coordinate=encode(coord)))
        human_shots += 1
        view = service.get_match(match_id)
        if view.state is MatchState.IN_PROGRESS:
            assert view.turn_player_id == "alice"

    view = service.get_match(match_id)
    assert view.state is MatchState.FINISHED
    assert view.winner in {"alice", "hal"}

    shots = [label for fired_match, label, _ in fired if fired_match == match_id]
    assert len(shots) == len(set(shots))
    if view.winner == "alice":
        assert len(shots) == human_shots - 1
    else:
        assert len(shots) == human_shots
        assert fired[-1][2].game_won
    assert match_id not in computer._strategies


def test_late_fire_notification_is_benign(
    setup: Setup, deployments: list[ShipDeployment]
) -> None:
    service, computer = setup
    match_id = service.start_match(StartMatchCommand(player_id="alice", vs_computer=True)).match_id
    service.deploy_fleet(match_id, DeployFleetCommand(player_id="alice", ships=deployments))
    service.repository.update(match_id, _finish_for("alice"))

    assert computer.take_turn(match_id) is None
    computer.handle(FireOccurred(match_id))
    computer.handle(MatchFinishedEvent(match_id, "alice"))
    with pytest.raises(MatchFinished):
        service.fire(match_id, FireCommand(player_id="hal", coordinate="A1"))


def test_out_of_turn_notification_is_dropped(
    setup: Setup, deployments: list[ShipDeployment]
) -> None:
    service, computer = setup
    match_id = service.start_match(StartMatchCommand(player_id="alice", vs_computer=True)).match_id
    service.deploy_fleet(match_id, DeployFleetCommand(player_id="alice", ships=deployments))

    assert computer.take_turn(match_id) is None
    assert service.get_match(match_id).turn_player_id == "alice"


def _finish_for(winner: str):
    def apply(match) -> None:
        match.winner = winner
        match.finished_at = match.started_at
    return apply


def test_out_of_turn_shot_keeps_the_queued_target(
    setup: Setup, deployments: list[ShipDeployment]
) -> None:
    service, computer = setup
    match_id = service.start_match(StartMatchCommand(player_id="alice", vs_computer=True)).match_id
    service.deploy_fleet(match_id, DeployFleetCommand(player_id="alice", ships=deployments))
    strategy = computer._strategies[match_id]
    strategy.record("E5", FireResponse(outcome=FireOutcome.HIT))
    queued = strategy.next_target()

    assert computer.take_turn(match_id) is None
    assert strategy.next_target() == queued


def test_finished_event_drops_targeting_state(setup: Setup) -> None:
    service, computer = setup
    match_id = service.start_match(StartMatchCommand(player_id="alice", vs_computer=True)).match_id
    assert match_id in computer._strategies

    computer.handle(MatchFinishedEvent(match_id, "alice"))

    assert match_id not in computer._strategies
