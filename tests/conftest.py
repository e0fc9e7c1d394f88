"""Shared fixtures: a valid classic fleet and a match ready for firing."""

from __future__ import annotations

import pytest

from salvo.contracts import ShipDeployment
from salvo.engine.coordinates import decode
from salvo.engine.fleet import ShipPlacement
from salvo.engine.match import Match

CLASSIC_LAYOUT: dict[str, list[str]] = {
    "Carrier": ["A1", "A2", "A3", "A4", "A5"],
    "Battleship": ["C1", "C2", "C3", "C4"],
    "Cruiser": ["E1", "E2", "E3"],
    "Submarine": ["G1", "G2", "G3"],
    "Destroyer": ["I1", "I2"],
}


@pytest.fixture
def layout() -> dict[str, list[str]]:
    return {name: list(labels) for name, labels in CLASSIC_LAYOUT.items()}


@pytest.fixture
def placements(layout: dict[str, list[str]]) -> list[ShipPlacement]:
    return [
        ShipPlacement(name, tuple(decode(label) for label in labels))
        for name, labels in layout.items()
    ]


@pytest.fixture
def deployments(layout: dict[str, list[str]]) -> list[ShipDeployment]:
    return [ShipDeployment(ship_type=name, coordinates=labels) for name, labels in layout.items()]


@pytest.fixture
def started_match(placements: list[ShipPlacement]) -> Match:
    match = Match.start("match-1", "alice")
    match.join("bob")
    match.deploy_fleet("alice", placements)
    match.deploy_fleet("bob", placements)
    return match
