"""Simple command-line driver for playing a match against the computer."""

from __future__ import annotations

import argparse
import random
import uuid
from typing import Sequence

from salvo.computer import ComputerPlayer
from salvo.config import ServiceConfig, load_service_config
from salvo.contracts import (
    BoardView,
    DeployFleetCommand,
    FireCommand,
    FireResponse,
    ShipDeployment,
    StartMatchCommand,
)
from salvo.engine.coordinates import BOARD_SIZE, COLUMN_LABELS, Coordinate, decode, encode
from salvo.engine.errors import InvalidCoordinate, MatchFinished
from salvo.engine.fleet import FLEET
from salvo.engine.match import FireOutcome, MatchState
from salvo.engine.ship import Orientation, Ship, ShipType
from salvo.notifications import InMemoryEventBus
from salvo.repository import InMemoryMatchRepository
from salvo.service import MatchService
from salvo.strategy import FiringStrategy, random_fleet
from salvo.telemetry import configure_logging, init_telemetry, shutdown_telemetry


def format_board(view: BoardView) -> str:
    """Render a board view as a grid: S ship, X hit, o miss, . unknown water."""
    ships = set(view.ships)
    hits = set(view.hits)
    misses = set(view.misses)

    header = "    " + " ".join(f"{letter:>2}" for letter in COLUMN_LABELS[:BOARD_SIZE])
    rows = [header]
    for row in range(BOARD_SIZE):
        symbols = []
        for col in range(BOARD_SIZE):
            label = encode(Coordinate(row, col))
            if label in hits:
                symbol = "X"
            elif label in misses:
                symbol = "o"
            else:
                symbol = "S" if label in ships else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{row + 1:>2} |" + " ".join(symbols))
    return "\n".join(rows)


def describe_shot(shooter: str, label: str, response: FireResponse) -> str:
    if response.outcome is FireOutcome.SUNK:
        outcome = f"sank the {response.ship_type_sunk}!"
    else:
        outcome = response.outcome.value.lower()
    return f"{shooter} fired at {label}: {outcome}"


def _prompt_orientation(ship_type: ShipType) -> Orientation:
    while True:
        raw = (
            input(
                f"Place your {ship_type.display_name} (length {ship_type.length}). "
                "Orientation [H/V]: "
            )
            .strip()
            .upper()
        )
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Orientation.HORIZONTAL
        if raw in {"V", "VER", "VERTICAL"}:
            return Orientation.VERTICAL
        print("Please enter H for horizontal or V for vertical.")


def _manual_fleet() -> list[ShipDeployment]:
    placed: list[Ship] = []
    for ship_type in FLEET:
        while True:
            print("\nCurrent layout:")
            labels = [encode(coord) for ship in placed for coord in ship.coordinates]
            print(format_board(BoardView(owner="you", ships=labels)))
            orientation = _prompt_orientation(ship_type)
            try:
                start = decode(input("Enter starting coordinate (e.g., A1): "))
            except InvalidCoordinate as exc:
                print(f"Invalid coordinate: {exc.reason}")
                continue
            ship = Ship.from_origin(ship_type, start, orientation)
            fits = all(coord.is_on_board() for coord in ship.coordinates)
            if fits and not any(ship.overlaps(existing) for existing in placed):
                placed.append(ship)
                break
            print("Ship cannot be placed there (out of bounds or overlaps). Try again.")
    return [
        ShipDeployment(ship_type=ship.name, coordinates=[encode(c) for c in ship.coordinates])
        for ship in placed
    ]


def _prompt_manual_setup() -> bool:
    while True:
        raw = input("Would you like to place your ships manually? [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _prompt_for_target(fired: set[str], strategy: FiringStrategy) -> str:
    while True:
        raw = input("Enter target coordinate (e.g., A5), 'auto' for a suggestion or 'q' to quit: ")
        raw = raw.strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        if raw.lower() == "auto":
            label = strategy.next_target()
            print(f"Suggested target: {label}")
            return label
        try:
            label = encode(decode(raw))
        except InvalidCoordinate as exc:
            print(f"Invalid input: {exc.reason}")
            continue
        if label in fired:
            print("That cell has already been targeted. Choose another.")
            continue
        return label


def play_game(seed: int | None = None, config: ServiceConfig | None = None) -> None:
    print("Welcome to Battleship!\n")
    rng = random.Random(seed)
    config = config or load_service_config()

    bus = InMemoryEventBus()
    service = MatchService(InMemoryMatchRepository(), bus)
    replies: list[tuple[str, FireResponse]] = []
    computer = ComputerPlayer(
        service,
        config=config,
        rng=random.Random(rng.random()),
        on_shot=lambda _match_id, label, response: replies.append((label, response)),
    )
    bus.subscribe(computer.handle)

    player_id = f"Player-{uuid.uuid4().hex[:8]}"
    match = service.start_match(StartMatchCommand(player_id=player_id, vs_computer=True))
    match_id = match.match_id
    print(f"Match {match_id} created. You are {player_id}.")

    if _prompt_manual_setup():
        fleet = _manual_fleet()
    else:
        fleet = random_fleet(rng)
        print("\nYour ships have been positioned automatically.")
    service.deploy_fleet(match_id, DeployFleetCommand(player_id=player_id, ships=fleet))

    strategy = FiringStrategy(random.Random(rng.random()))
    fired: set[str] = set()
    while service.get_match(match_id).state is MatchState.IN_PROGRESS:
        print("\nYour Board:")
        print(format_board(service.board_view(match_id, player_id, player_id)))
        print("\nEnemy Waters:")
        print(format_board(service.board_view(match_id, computer.player_id, player_id)))

        label = _prompt_for_target(fired, strategy)
        try:
            response = service.fire(match_id, FireCommand(player_id=player_id, coordinate=label))
        except MatchFinished:
            break
        fired.add(label)
        strategy.record(label, response)
        print(describe_shot("You", label, response))

        for reply_label, reply in replies:
            print(describe_shot("Computer", reply_label, reply))
        replies.clear()

    winner = service.get_match(match_id).winner
    if winner == player_id:
        print("\nCongratulations, you won!")
    else:
        print("\nThe computer won this time. Better luck next battle!")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Battleship against the computer.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--log-level", default=None, help="Console log level (defaults to SALVO_LOG_LEVEL)."
    )
    args = parser.parse_args(argv)
    config = load_service_config()
    configure_logging(args.log_level or config.log_level)
    init_telemetry()
    try:
        play_game(seed=args.seed, config=config)
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
