"""Shared fixtures: games, full lineups and stat records."""

import datetime as dt

import pytest

from netscore.config import clear_config_cache
from netscore.constants import COMPLETED, POSITIONS, QUARTERS
from netscore.models import Game, RosterAssignment, StatRecord

HOME = 1
AWAY = 2


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return 'asyncio'


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload engine config for every test."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def make_game():
    """Factory for Game metadata (home team 1 v away team 2 by default)."""

    def _make(game_id=42, status=COMPLETED, date=dt.date(2025, 5, 3), home=HOME, away=AWAY):
        return Game(id=game_id, home_team_id=home, away_team_id=away, status=status, date=date)

    return _make


@pytest.fixture
def full_lineup():
    """
    Factory for a complete lineup: 7 players, each keeping one position all game.

    Player ids are base + 0..6 in court position order (GS first).
    """

    def _make(game_id, base=100):
        return [
            RosterAssignment(game_id=game_id, quarter=q, position=pos, player_id=base + i)
            for q in QUARTERS
            for i, pos in enumerate(POSITIONS)
        ]

    return _make


@pytest.fixture
def make_stat():
    """Factory for StatRecords with an auto-incrementing id."""
    counter = {'next': 1}

    def _make(game_id=42, quarter=1, position='GS', record_id=None, **fields):
        if record_id is None:
            record_id = counter['next']
        counter['next'] = max(counter['next'], record_id) + 1
        return StatRecord(id=record_id, game_id=game_id, quarter=quarter, position=position, **fields)

    return _make


@pytest.fixture
def shooter_stats(make_stat):
    """
    Factory for a game where GS scores and GK concedes each quarter.

    Quarter q: GS goals_for = home_goals[q-1], GK goals_against = away_goals[q-1].
    """

    def _make(game_id, home_goals=(5, 5, 5, 5), away_goals=(4, 4, 4, 4), **extra):
        records = []
        for q in QUARTERS:
            records.append(make_stat(game_id, q, 'GS', goals_for=home_goals[q - 1], **extra))
            records.append(make_stat(game_id, q, 'GK', goals_against=away_goals[q - 1]))
        return records

    return _make
