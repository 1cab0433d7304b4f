"""Roster index: resolves court positions to players per game and quarter."""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from .constants import POSITIONS, QUARTERS
from .models import RosterAssignment

logger = logging.getLogger('netscore.roster')


class RosterIndex:
    """
    Lookup of (game, quarter, position) -> player built once from roster assignments.

    Several assignments may exist for the same slot when a lineup has been
    edited. The most recent one wins. When every assignment for a slot
    carries an ``id`` they are ordered by id; if any of them lacks one,
    input order is the recency order for that slot.

    Assignments may name the team the lineup belongs to; team_for() reports
    it so stat records entered by that team can be matched to the players.
    """

    def __init__(self, assignments: Iterable[RosterAssignment] = ()):
        self._slots: dict[tuple[int, int, str], Optional[int]] = {}
        self._teams: dict[int, int] = {}

        candidates: dict[tuple[int, int, str], list[tuple[int, RosterAssignment]]] = defaultdict(list)
        for index, assignment in enumerate(assignments):
            key = (assignment.game_id, assignment.quarter, assignment.position)
            candidates[key].append((index, assignment))
            if assignment.team_id is not None:
                self._teams[assignment.game_id] = assignment.team_id

        replaced = 0
        for key, entries in candidates.items():
            if all(assignment.id is not None for _, assignment in entries):
                entries = sorted(entries, key=lambda pair: (pair[1].id, pair[0]))
            replaced += len(entries) - 1
            self._slots[key] = entries[-1][1].player_id
        self._games = {game_id for game_id, _, _ in self._slots}

        if replaced:
            logger.debug(f'Roster index collapsed {replaced} superseded assignments')

        # (game, quarter) -> players on court, counting recognized positions only
        on_court: dict[tuple[int, int], set[int]] = defaultdict(set)
        for (game_id, quarter, position), player_id in self._slots.items():
            if player_id is not None and position in POSITIONS:
                on_court[(game_id, quarter)].add(player_id)
        self._on_court = {key: frozenset(players) for key, players in on_court.items()}

    @property
    def game_ids(self) -> frozenset[int]:
        return frozenset(self._games)

    def team_for(self, game_id: int) -> Optional[int]:
        """Team the game's lineup was entered for, when the assignments say."""
        return self._teams.get(game_id)

    def position_player(self, game_id: int, quarter: int, position: str) -> Optional[int]:
        """Player holding a position in a quarter, or None if unassigned."""
        return self._slots.get((game_id, quarter, position))

    def on_court(self, game_id: int, quarter: int) -> frozenset[int]:
        """Players holding one of the seven court positions in a quarter."""
        return self._on_court.get((game_id, quarter), frozenset())

    def is_roster_complete(self, game_id: int) -> bool:
        """True iff every position in every quarter has a player assigned."""
        return not self.missing_slots(game_id)

    def missing_slots(self, game_id: int) -> list[tuple[int, str]]:
        """(quarter, position) pairs with no player assigned."""
        return [
            (quarter, position)
            for quarter in QUARTERS
            for position in POSITIONS
            if self._slots.get((game_id, quarter, position)) is None
        ]

    def player_positions(self, game_id: int, player_id: int) -> dict[int, str]:
        """Quarter -> court position held by a player in a game."""
        return {
            quarter: position
            for (g, quarter, position), p in self._slots.items()
            if g == game_id and p == player_id and position in POSITIONS
        }

    def games_played(self, player_id: int, game_ids: Iterable[int]) -> set[int]:
        """Games among game_ids where the player was on court for at least one quarter."""
        return {
            game_id
            for game_id in game_ids
            if any(player_id in self.on_court(game_id, quarter) for quarter in QUARTERS)
        }
