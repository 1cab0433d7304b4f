"""Exception types raised by the netscore engine."""

from typing import Optional


class NetscoreError(Exception):
    """Base class for engine errors."""


class StatisticsUnavailableError(NetscoreError):
    """The data-access collaborator failed to supply records for a game.

    Distinct from a game that simply has no statistics recorded: callers
    should retry or show a technical-error state, never render 0-0.
    """

    def __init__(self, message: str, game_id: Optional[int] = None, operation: str = ''):
        super().__init__(message)
        self.game_id = game_id
        self.operation = operation


class GameNotFoundError(StatisticsUnavailableError):
    """The collaborator has no game metadata for a requested id."""


class InvalidPerspectiveError(NetscoreError, ValueError):
    """Viewing team took no part in the game."""

    def __init__(self, game_id: int, team_id: int):
        super().__init__(f'Team {team_id} did not play in game {game_id}')
        self.game_id = game_id
        self.team_id = team_id
