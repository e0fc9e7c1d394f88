"""Stateless construction and queries over a board."""

from __future__ import annotations

from typing import Iterable

from .board import Board
from .coordinates import BOARD_SIZE
from .ship import Ship


class FieldService:
    """Builds boards from validated ships and answers sunk/fleet-destroyed queries.

    Both queries read the current cell hit flags and nothing else.
    """

    def __init__(self, board_size: int = BOARD_SIZE) -> None:
        self.board_size = board_size

    def build_board(self, ships: Iterable[Ship], owner: str = "unknown") -> Board:
        board = Board(size=self.board_size, owner=owner)
        for ship in ships:
            board.stamp_ship(ship)
        return board

    def is_ship_sunk(self, board: Board, ship: Ship) -> bool:
        return all(board.cell_at(coord).hit for coord in ship.coordinates)

    def all_ships_sunk(self, board: Board) -> bool:
        return all(cell.hit for _, cell in board if not cell.is_water)
