"""Single-player board (field) for the match engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from salvo.telemetry import get_meter

from .coordinates import BOARD_SIZE, Coordinate, encode
from .errors import InvalidCoordinate
from .ship import Ship

logger = logging.getLogger(__name__)
meter = get_meter("salvo.engine.board")

SHOT_COUNTER = meter.create_counter(
    "salvo_engine_cells_hit",
    unit="1",
    description="Shots received by a board",
)


@dataclass
class Cell:
    """One board square: water or a ship segment, hit or not."""

    ship: Ship | None = None
    hit: bool = False

    @property
    def is_water(self) -> bool:
        return self.ship is None


@dataclass
class Board:
    """Represents a player's 10×10 field and the ships placed on it.

    The grid is private; callers read it through :meth:`cell_at` and iteration
    and change it only through :meth:`mark_hit`.
    """

    size: int = BOARD_SIZE
    owner: str = "unknown"
    _cells: list[list[Cell]] = field(init=False, repr=False)
    _ships: list[Ship] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._cells = [[Cell() for _ in range(self.size)] for _ in range(self.size)]

    @property
    def ships(self) -> tuple[Ship, ...]:
        return tuple(self._ships)

    def cell_at(self, coord: Coordinate) -> Cell:
        if not coord.is_on_board(self.size):
            raise InvalidCoordinate(str(coord), "outside the board")
        return self._cells[coord.row][coord.col]

    def stamp_ship(self, ship: Ship) -> None:
        """Occupy the ship's cells. Overlap and bounds are checked by the fleet validator."""
        for coord in ship.coordinates:
            self._cells[coord.row][coord.col] = Cell(ship=ship)
        self._ships.append(ship)

    def mark_hit(self, coord: Coordinate) -> Cell:
        """Mark a cell as hit. Marking an already hit cell changes nothing."""
        cell = self.cell_at(coord)
        cell.hit = True
        SHOT_COUNTER.add(1, attributes={"water": cell.is_water, "owner": self.owner})
        logger.debug(
            "cell_marked_hit",
            extra={"owner": self.owner, "coordinate": encode(coord), "water": cell.is_water},
        )
        return cell

    def __iter__(self) -> Iterator[tuple[Coordinate, Cell]]:
        for row, cells in enumerate(self._cells):
            for col, cell in enumerate(cells):
                yield Coordinate(row, col), cell

    def hit_coordinates(self) -> list[Coordinate]:
        return [coord for coord, cell in self if cell.hit]
