"""Fleet placement and targeting used by the automated opponent and the CLI."""

from __future__ import annotations

import logging
import random
from collections import deque

from salvo.contracts import FireResponse, ShipDeployment
from salvo.engine.coordinates import BOARD_SIZE, Coordinate, all_coordinates, decode, encode
from salvo.engine.fleet import FLEET
from salvo.engine.match import FireOutcome
from salvo.engine.ship import Orientation, Ship

logger = logging.getLogger(__name__)

MAX_PLACEMENT_ATTEMPTS = 1000


def random_fleet(rng: random.Random) -> list[ShipDeployment]:
    """Place one ship of each type at random, in bounds and without overlap."""
    placed: list[Ship] = []
    for ship_type in FLEET:
        for attempts in range(1, MAX_PLACEMENT_ATTEMPTS + 1):
            orientation = rng.choice(list(Orientation))
            start = Coordinate(rng.randrange(BOARD_SIZE), rng.randrange(BOARD_SIZE))
            candidate = Ship.from_origin(ship_type, start, orientation)
            if all(coord.is_on_board() for coord in candidate.coordinates) and not any(
                candidate.overlaps(existing) for existing in placed
            ):
                placed.append(candidate)
                logger.debug(
                    "random_ship_placed",
                    extra={"ship_type": ship_type.display_name, "attempts": attempts},
                )
                break
        else:
            raise RuntimeError(
                f"Failed to place {ship_type.display_name} after {MAX_PLACEMENT_ATTEMPTS} attempts."
            )
    return [
        ShipDeployment(ship_type=ship.name, coordinates=[encode(c) for c in ship.coordinates])
        for ship in placed
    ]


class FiringStrategy:
    """Hunt/target firing.

    Hunting picks random untargeted cells of one checkerboard colour (the smallest
    ship spans two cells, so it cannot hide between them). A hit that does not
    sink queues its orthogonal neighbours; a sink clears the queue.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._fired: set[Coordinate] = set()
        self._targets: deque[Coordinate] = deque()

    @property
    def hunting(self) -> bool:
        return not self._targets

    def next_target(self) -> str:
        """Suggest the next cell. A queued target stays queued until it is recorded."""
        if self._targets:
            return encode(self._targets[0])
        return encode(self._hunt())

    def record(self, label: str, response: FireResponse) -> None:
        coord = decode(label)
        self._fired.add(coord)
        if coord in self._targets:
            self._targets.remove(coord)
        if response.outcome is FireOutcome.SUNK:
            self._targets.clear()
        elif response.outcome is FireOutcome.HIT:
            for neighbour in coord.neighbours():
                if neighbour not in self._fired and neighbour not in self._targets:
                    self._targets.append(neighbour)

    def _hunt(self) -> Coordinate:
        open_cells = [coord for coord in all_coordinates() if coord not in self._fired]
        if not open_cells:
            raise RuntimeError("No cells left to target.")
        parity = [coord for coord in open_cells if (coord.row + coord.col) % 2 == 0]
        return self._rng.choice(parity or open_cells)
