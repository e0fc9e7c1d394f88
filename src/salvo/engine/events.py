"""Outbound events recorded by match transitions and published by the service."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchEvent:
    match_id: str


@dataclass(frozen=True)
class MatchCreated(MatchEvent):
    """A match against the automated opponent was created and is waiting for it to join."""


@dataclass(frozen=True)
class FireOccurred(MatchEvent):
    """The human fired and the automated opponent moves next."""


@dataclass(frozen=True)
class MatchFinishedEvent(MatchEvent):
    winner: str
