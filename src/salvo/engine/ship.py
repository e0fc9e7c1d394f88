"""Ship domain model for the match engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .coordinates import Coordinate


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class ShipType(Enum):
    """The five ship classes of the classic fleet, with length and display name."""

    CARRIER = (5, "Carrier")
    BATTLESHIP = (4, "Battleship")
    CRUISER = (3, "Cruiser")
    SUBMARINE = (3, "Submarine")
    DESTROYER = (2, "Destroyer")

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return self.value[0]

    @property
    def display_name(self) -> str:
        return self.value[1]

    @classmethod
    def from_name(cls, name: str) -> ShipType | None:
        """Look up a ship type by display name, ignoring case. Unknown names give None."""
        wanted = name.strip().lower()
        for ship_type in cls:
            if ship_type.display_name.lower() == wanted:
                return ship_type
        return None


def line_of_coordinates(start: Coordinate, length: int, orientation: Orientation) -> tuple[Coordinate, ...]:
    """Return ``length`` cells running right (horizontal) or down (vertical) from ``start``."""
    if orientation is Orientation.HORIZONTAL:
        return tuple(Coordinate(start.row, start.col + offset) for offset in range(length))
    return tuple(Coordinate(start.row + offset, start.col) for offset in range(length))


@dataclass(frozen=True)
class Ship:
    """A single vessel and the cells it occupies.

    Hit state lives on the board cells, so a ship never changes once placed.
    """

    ship_type: ShipType
    coordinates: tuple[Coordinate, ...]

    @classmethod
    def from_origin(cls, ship_type: ShipType, start: Coordinate, orientation: Orientation) -> Ship:
        return cls(ship_type, line_of_coordinates(start, ship_type.length, orientation))

    @property
    def name(self) -> str:
        return self.ship_type.display_name

    def occupies(self, coord: Coordinate) -> bool:
        return coord in self.coordinates

    def overlaps(self, other: Ship) -> bool:
        """Return True if any coordinate overlaps with another ship."""
        return bool(set(self.coordinates) & set(other.coordinates))
