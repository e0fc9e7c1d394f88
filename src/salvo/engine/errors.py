"""Error taxonomy raised by the match engine and service."""

from __future__ import annotations


class SalvoError(Exception):
    """Base class for every caller-facing engine error."""


class InvalidCoordinate(SalvoError, ValueError):
    """A coordinate label is malformed or points outside the board."""

    def __init__(self, label: str, reason: str) -> None:
        super().__init__(f"Invalid coordinate {label!r}: {reason}")
        self.label = label
        self.reason = reason


class DeploymentError(SalvoError, ValueError):
    """A proposed fleet was rejected by the deployment validator."""

    def __init__(self, message: str, ship_type: str | None = None) -> None:
        super().__init__(message)
        self.ship_type = ship_type


class MatchNotFound(SalvoError, LookupError):
    """No match is stored under the requested id."""

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match {match_id} not found.")
        self.match_id = match_id


class MatchJoinError(SalvoError, RuntimeError):
    """The match cannot accept another player."""


class UnknownPlayer(SalvoError, LookupError):
    """The player id does not belong to the match."""

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player {player_id} does not exist in the match.")
        self.player_id = player_id


class ShipsAlreadyDeployed(SalvoError, RuntimeError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player {player_id} has already deployed a fleet.")
        self.player_id = player_id


class MatchFinished(SalvoError, RuntimeError):
    """The match already has a winner; carries it so callers can render the result."""

    def __init__(self, winner: str | None) -> None:
        super().__init__(f"Match is finished. Winner: {winner}")
        self.winner = winner


class MatchNotStarted(SalvoError, RuntimeError):
    """Both fleets must be deployed before anyone can fire."""


class NotPlayersTurn(SalvoError, RuntimeError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"It is not {player_id}'s turn.")
        self.player_id = player_id
