"""Fleet deployment validation.

A deployment is accepted only when it is exactly the classic fleet: one ship of each
:class:`ShipType`, each of the right length, laid out in a straight unbroken line,
fully on the board and not sharing any cell with another ship.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from salvo.telemetry import get_meter, get_tracer

from .coordinates import BOARD_SIZE, Coordinate
from .errors import DeploymentError
from .ship import Ship, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.fleet")
meter = get_meter("salvo.engine.fleet")

VALIDATION_COUNTER = meter.create_counter(
    "salvo_engine_fleet_validations",
    unit="1",
    description="Fleet deployments checked by the validator",
)

FLEET: tuple[ShipType, ...] = tuple(ShipType)


@dataclass(frozen=True)
class ShipPlacement:
    """A proposed ship: a type name as sent by the client plus decoded cells."""

    ship_type: str
    coordinates: tuple[Coordinate, ...]


class FleetValidator:
    """Checks a proposed fleet and turns it into :class:`Ship` values."""

    def __init__(self, board_size: int = BOARD_SIZE) -> None:
        self.board_size = board_size

    def validate(self, placements: Sequence[ShipPlacement]) -> list[Ship]:
        with tracer.start_as_current_span("fleet.validate") as span:
            span.set_attribute("fleet.size", len(placements))
            try:
                ships = self._validate(placements)
            except DeploymentError as exc:
                VALIDATION_COUNTER.add(1, attributes={"result": "rejected"})
                span.set_attribute("fleet.rejected", True)
                logger.warning(
                    "fleet_rejected",
                    extra={"reason": str(exc), "ship_type": exc.ship_type},
                )
                raise
            VALIDATION_COUNTER.add(1, attributes={"result": "accepted"})
            return ships

    def _validate(self, placements: Sequence[ShipPlacement]) -> list[Ship]:
        typed = self._check_types(placements)
        for ship_type, placement in typed:
            self._check_length(ship_type, placement)
        for ship_type, placement in typed:
            self._check_straight_line(ship_type, placement)
        for ship_type, placement in typed:
            self._check_bounds(ship_type, placement)
        self._check_overlap(typed)
        return [
            Ship(ship_type, self._ordered(placement.coordinates)) for ship_type, placement in typed
        ]

    def _check_types(
        self, placements: Sequence[ShipPlacement]
    ) -> list[tuple[ShipType, ShipPlacement]]:
        typed: list[tuple[ShipType, ShipPlacement]] = []
        for placement in placements:
            ship_type = ShipType.from_name(placement.ship_type)
            if ship_type is None:
                raise DeploymentError(
                    f"Unknown ship type {placement.ship_type!r}.", ship_type=placement.ship_type
                )
            typed.append((ship_type, placement))

        counts = Counter(ship_type for ship_type, _ in typed)
        for ship_type, count in counts.items():
            if count > 1:
                raise DeploymentError(
                    f"{ship_type.display_name} deployed {count} times; exactly one is required.",
                    ship_type=ship_type.display_name,
                )
        missing = [ship_type.display_name for ship_type in FLEET if ship_type not in counts]
        if missing:
            raise DeploymentError(f"Fleet is missing: {', '.join(missing)}.")
        return typed

    @staticmethod
    def _check_length(ship_type: ShipType, placement: ShipPlacement) -> None:
        if len(placement.coordinates) != ship_type.length:
            raise DeploymentError(
                f"{ship_type.display_name} needs {ship_type.length} cells, "
                f"got {len(placement.coordinates)}.",
                ship_type=ship_type.display_name,
            )

    def _check_straight_line(self, ship_type: ShipType, placement: ShipPlacement) -> None:
        coords = self._ordered(placement.coordinates)
        rows = {coord.row for coord in coords}
        cols = {coord.col for coord in coords}
        if len(rows) == 1:
            steps = [b.col - a.col for a, b in zip(coords, coords[1:])]
        elif len(cols) == 1:
            steps = [b.row - a.row for a, b in zip(coords, coords[1:])]
        else:
            steps = []
        if (len(rows) != 1 and len(cols) != 1) or any(step != 1 for step in steps):
            raise DeploymentError(
                f"{ship_type.display_name} must occupy a straight line of adjacent cells.",
                ship_type=ship_type.display_name,
            )

    def _check_bounds(self, ship_type: ShipType, placement: ShipPlacement) -> None:
        if not all(coord.is_on_board(self.board_size) for coord in placement.coordinates):
            raise DeploymentError(
                f"{ship_type.display_name} does not fit on the board.",
                ship_type=ship_type.display_name,
            )

    @staticmethod
    def _check_overlap(typed: Sequence[tuple[ShipType, ShipPlacement]]) -> None:
        claimed: dict[Coordinate, ShipType] = {}
        for ship_type, placement in typed:
            for coord in placement.coordinates:
                owner = claimed.get(coord)
                if owner is not None:
                    raise DeploymentError(
                        f"{ship_type.display_name} overlaps {owner.display_name} at {coord}.",
                        ship_type=ship_type.display_name,
                    )
                claimed[coord] = ship_type

    @staticmethod
    def _ordered(coords: Sequence[Coordinate]) -> tuple[Coordinate, ...]:
        return tuple(sorted(coords, key=lambda coord: (coord.row, coord.col)))
