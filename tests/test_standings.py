"""Unit tests for team records and the ladder."""

import datetime as dt

import pytest

from netscore.aggregation import aggregate_game_score, empty_game_score, forfeit_game_score
from netscore.constants import (
    ABANDONED,
    AWAY_TEAM_FORFEIT,
    BYE,
    DRAW,
    HOME_TEAM_FORFEIT,
    LOSS,
    UPCOMING,
    WIN,
)
from netscore.dedup import deduplicate_stats
from netscore.schemas import LadderPoints
from netscore.standings import counts_for_record, ladder, recent_form, team_record


@pytest.fixture
def fixtures(make_game, shooter_stats):
    """
    Team 1 v team 2 over six rounds (team 1 at home unless noted):

    1: 20-16          -> team 1 win
    2: 12-12          -> draw
    3: team 2 home, 18-10 -> team 2 win
    4: home-team-forfeit (team 1 forfeits) -> team 2 win
    5: abandoned      -> not counted
    6: upcoming       -> not counted
    """
    games = [
        make_game(1, date=dt.date(2025, 5, 1)),
        make_game(2, date=dt.date(2025, 5, 8)),
        make_game(3, date=dt.date(2025, 5, 15), home=2, away=1),
        make_game(4, status=HOME_TEAM_FORFEIT, date=dt.date(2025, 5, 22)),
        make_game(5, status=ABANDONED, date=dt.date(2025, 5, 29)),
        make_game(6, status=UPCOMING, date=dt.date(2025, 6, 5)),
    ]
    stats = {
        1: shooter_stats(1),
        2: shooter_stats(2, (3, 3, 3, 3), (3, 3, 3, 3)),
        3: shooter_stats(3, (5, 5, 4, 4), (2, 2, 3, 3)),
        5: shooter_stats(5, (9, 9, 9, 9), (0, 0, 0, 0)),
    }
    scores = {}
    for game in games:
        if game.is_forfeit:
            scores[game.id] = forfeit_game_score(game)
        elif game.id in stats:
            scores[game.id] = aggregate_game_score(game, deduplicate_stats(stats[game.id]))
        else:
            scores[game.id] = empty_game_score(game.id)
    return games, scores


class TestCountsForRecord:
    """Tests for which games count."""

    def test_statuses(self, make_game):
        """Test completed and forfeits count, others don't."""
        assert counts_for_record(make_game(1), 1)
        assert counts_for_record(make_game(1, status=AWAY_TEAM_FORFEIT), 2)
        assert not counts_for_record(make_game(1, status=BYE), 1)
        assert not counts_for_record(make_game(1, status=ABANDONED), 1)
        assert not counts_for_record(make_game(1, status=UPCOMING), 1)

    def test_other_teams(self, make_game):
        """Test a team's record ignores games it didn't play."""
        assert not counts_for_record(make_game(1), 3)


class TestTeamRecord:
    """Tests for team_record()."""

    def test_home_team(self, fixtures):
        """Test team 1: one win, one draw, two losses."""
        games, scores = fixtures
        record = team_record(1, games, scores)
        assert (record.played, record.wins, record.draws, record.losses) == (4, 1, 1, 2)
        assert record.goals_for == 20 + 12 + 10 + 0
        assert record.goals_against == 16 + 12 + 18 + 10
        assert record.ladder_points == 4 + 2
        assert record.win_rate == 25.0

    def test_away_team(self, fixtures):
        """Test team 2 mirrors team 1."""
        games, scores = fixtures
        record = team_record(2, games, scores)
        assert (record.wins, record.draws, record.losses) == (2, 1, 1)
        assert record.ladder_points == 10

    def test_custom_points(self, fixtures):
        """Test ladder points follow the given scheme."""
        games, scores = fixtures
        record = team_record(2, games, scores, points=LadderPoints(win=2, draw=1, loss=0))
        assert record.ladder_points == 5

    def test_unscored_games_skipped(self, make_game):
        """Test a completed game with no data isn't counted."""
        game = make_game(1)
        record = team_record(1, [game], {1: empty_game_score(1)})
        assert record.played == 0
        assert record.win_rate == 0.0

    def test_goal_percentage(self, fixtures):
        """Test goals for as a percentage of goals against."""
        games, scores = fixtures
        record = team_record(2, games, scores)
        assert record.goal_percentage == pytest.approx(56 / 42 * 100)


class TestRecentForm:
    """Tests for recent_form()."""

    def test_most_recent_first(self, fixtures):
        """Test results are newest first."""
        games, scores = fixtures
        assert recent_form(1, games, scores) == [LOSS, LOSS, DRAW, WIN]
        assert recent_form(2, games, scores, count=2) == [WIN, WIN]


class TestLadder:
    """Tests for ladder()."""

    def test_ranking(self, fixtures):
        """Test teams ranked by ladder points."""
        games, scores = fixtures
        table = ladder([1, 2, 3], games, scores)
        assert [r.team_id for r in table] == [2, 1, 3]
        assert table[2].played == 0

    def test_tie_broken_by_goal_percentage(self, make_game, shooter_stats):
        """Test equal points are separated by goal percentage."""
        games = [make_game(1, home=1, away=2), make_game(2, home=3, away=4)]
        scores = {
            1: aggregate_game_score(games[0], deduplicate_stats(shooter_stats(1, (5, 5, 5, 5), (1, 1, 1, 1)))),
            2: aggregate_game_score(games[1], deduplicate_stats(shooter_stats(2, (5, 5, 5, 5), (4, 4, 4, 4)))),
        }
        table = ladder([3, 1, 4, 2], games, scores)
        assert [r.team_id for r in table] == [1, 3, 4, 2]
