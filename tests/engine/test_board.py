"""Tests for the Board mechanics."""

import pytest

from salvo.engine.board import Board
from salvo.engine.coordinates import Coordinate
from salvo.engine.errors import InvalidCoordinate
from salvo.engine.ship import Orientation, Ship, ShipType


def test_new_board_is_all_unhit_water() -> None:
    board = Board()
    cells = list(board)
    assert len(cells) == 100
    assert all(cell.is_water and not cell.hit for _, cell in cells)
    assert board.ships == ()


def test_stamped_ship_cells_reference_the_ship() -> None:
    board = Board()
    ship = Ship.from_origin(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
    board.stamp_ship(ship)

    assert board.cell_at(Coordinate(0, 0)).ship is ship
    assert board.cell_at(Coordinate(0, 1)).ship is ship
    assert board.cell_at(Coordinate(1, 0)).is_water
    assert board.ships == (ship,)


def test_mark_hit_is_idempotent() -> None:
    board = Board()
    first = board.mark_hit(Coordinate(5, 5))
    second = board.mark_hit(Coordinate(5, 5))
    assert first is second
    assert first.hit
    assert board.hit_coordinates() == [Coordinate(5, 5)]


def test_cell_at_rejects_off_board_coordinates() -> None:
    board = Board()
    with pytest.raises(InvalidCoordinate):
        board.cell_at(Coordinate(11, 11))
    with pytest.raises(InvalidCoordinate):
        board.mark_hit(Coordinate(-1, 0))
