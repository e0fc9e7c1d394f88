"""Tests for the coordinate label codec."""

import pytest

from salvo.engine.coordinates import BOARD_SIZE, Coordinate, all_coordinates, decode, encode
from salvo.engine.errors import InvalidCoordinate


def test_decode_maps_letter_to_column_and_number_to_row() -> None:
    assert decode("A1") == Coordinate(0, 0)
    assert decode("B7") == Coordinate(6, 1)
    assert decode("J10") == Coordinate(9, 9)


def test_decode_is_case_insensitive_and_ignores_padding() -> None:
    assert decode(" c3 ") == Coordinate(2, 2)
    assert decode("a01") == Coordinate(0, 0)


@pytest.mark.parametrize("label", ["", "A", "K1", "A0", "A11", "AB", "1A", "A1.5", "A100", "@3"])
def test_decode_rejects_malformed_or_out_of_bounds_labels(label: str) -> None:
    with pytest.raises(InvalidCoordinate):
        decode(label)


def test_invalid_coordinate_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        decode("Z9")


def test_every_coordinate_round_trips() -> None:
    coords = list(all_coordinates())
    assert len(coords) == BOARD_SIZE * BOARD_SIZE
    for coord in coords:
        assert decode(encode(coord)) == coord


@pytest.mark.parametrize("label, canonical", [("a1", "A1"), ("j10", "J10"), ("e05", "E5")])
def test_encode_normalizes_decoded_labels(label: str, canonical: str) -> None:
    assert encode(decode(label)) == canonical


def test_encode_rejects_off_board_coordinates() -> None:
    with pytest.raises(InvalidCoordinate):
        encode(Coordinate(10, 0))


def test_neighbours_stay_on_board() -> None:
    assert set(Coordinate(0, 0).neighbours()) == {Coordinate(1, 0), Coordinate(0, 1)}
    assert len(Coordinate(4, 4).neighbours()) == 4
