"""Coordinate value type and the label codec (``"B7"`` <-> ``Coordinate(6, 1)``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .errors import InvalidCoordinate

BOARD_SIZE = 10
COLUMN_LABELS = "ABCDEFGHIJ"


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate.

    Values outside the board are representable so that placement validation can
    report them; use :meth:`is_on_board` before indexing a board.
    """

    row: int
    col: int

    def is_on_board(self, size: int = BOARD_SIZE) -> bool:
        """Check whether the coordinate lies inside the board boundaries."""
        return 0 <= self.row < size and 0 <= self.col < size

    def neighbours(self, size: int = BOARD_SIZE) -> list[Coordinate]:
        """Return the orthogonal neighbours that are still on the board."""
        candidates = (
            Coordinate(self.row - 1, self.col),
            Coordinate(self.row + 1, self.col),
            Coordinate(self.row, self.col - 1),
            Coordinate(self.row, self.col + 1),
        )
        return [coord for coord in candidates if coord.is_on_board(size)]

    def __str__(self) -> str:
        if self.is_on_board():
            return encode(self)
        return f"({self.row}, {self.col})"


def decode(label: str) -> Coordinate:
    """Parse a label such as ``a10`` into a coordinate.

    The letter selects the column and the number (1-based) selects the row.
    """
    cleaned = label.strip().upper()
    if len(cleaned) < 2 or len(cleaned) > 3:
        raise InvalidCoordinate(label, "expected a letter followed by a row number")
    letter, digits = cleaned[0], cleaned[1:]
    if letter not in COLUMN_LABELS:
        raise InvalidCoordinate(label, f"column must be between A and {COLUMN_LABELS[-1]}")
    if not digits.isdigit() or not digits.isascii():
        raise InvalidCoordinate(label, "row must be a number")
    row_number = int(digits)
    if not 1 <= row_number <= BOARD_SIZE:
        raise InvalidCoordinate(label, f"row must be between 1 and {BOARD_SIZE}")
    return Coordinate(row_number - 1, COLUMN_LABELS.index(letter))


def encode(coord: Coordinate) -> str:
    """Render a coordinate in canonical form (uppercase letter, unpadded row)."""
    if not coord.is_on_board():
        raise InvalidCoordinate(str(coord), "outside the board")
    return f"{COLUMN_LABELS[coord.col]}{coord.row + 1}"


def all_coordinates(size: int = BOARD_SIZE) -> Iterator[Coordinate]:
    """Yield every board coordinate in row-major order."""
    for row in range(size):
        for col in range(size):
            yield Coordinate(row, col)
