"""Team win/loss/draw records and ladder built from resolved game scores."""

import datetime as dt
import logging
from typing import Iterable, Mapping, Optional

from .config import get_ladder_points, get_recent_games
from .constants import LOSS, RECORD_STATUSES, WIN
from .models import Game, GameScore, PerspectiveScore, TeamRecord
from .perspective import resolve_perspective
from .schemas import LadderPoints

logger = logging.getLogger('netscore.standings')


def counts_for_record(game: Game, team_id: int) -> bool:
    """Completed games and forfeits the team took part in; byes and abandoned games never count."""
    return (
        game.status in RECORD_STATUSES
        and not game.is_bye
        and team_id in (game.home_team_id, game.away_team_id)
    )


def team_results(
    team_id: int,
    games: Iterable[Game],
    scores: Mapping[int, GameScore],
) -> list[tuple[Game, PerspectiveScore]]:
    """
    Scored games for a team, oldest first, each seen from the team's side.

    Games without a score, or whose score has no data, are skipped.
    """
    results = []
    for game in games:
        if not counts_for_record(game, team_id):
            continue
        score = scores.get(game.id)
        if score is None or not score.has_data:
            logger.debug(f'Game {game.id} has no score yet; not counted for team {team_id}')
            continue
        results.append((game, resolve_perspective(score, game, team_id)))
    results.sort(key=lambda pair: (pair[0].date or dt.date.min, pair[0].id))
    return results


def team_record(
    team_id: int,
    games: Iterable[Game],
    scores: Mapping[int, GameScore],
    points: Optional[LadderPoints] = None,
) -> TeamRecord:
    """
    Fold a team's results into a TeamRecord.

    Args:
        team_id: Team to report
        games: Candidate games (others' games are ignored)
        scores: GameScore per game id
        points: Ladder points per result (default from config)

    Returns:
        TeamRecord with wins/losses/draws, goals and ladder points
    """
    points = points or get_ladder_points()
    wins = losses = draws = goals_for = goals_against = 0

    for _, perspective in team_results(team_id, games, scores):
        goals_for += perspective.our_score
        goals_against += perspective.their_score
        if perspective.result == WIN:
            wins += 1
        elif perspective.result == LOSS:
            losses += 1
        else:
            draws += 1

    return TeamRecord(
        team_id=team_id,
        played=wins + losses + draws,
        wins=wins,
        losses=losses,
        draws=draws,
        goals_for=goals_for,
        goals_against=goals_against,
        ladder_points=wins * points.win + draws * points.draw + losses * points.loss,
    )


def recent_form(
    team_id: int,
    games: Iterable[Game],
    scores: Mapping[int, GameScore],
    count: Optional[int] = None,
) -> list[str]:
    """Results of the team's last `count` scored games, most recent first."""
    count = get_recent_games() if count is None else count
    results = team_results(team_id, games, scores)
    return [perspective.result for _, perspective in reversed(results)][:count]


def ladder(
    team_ids: Iterable[int],
    games: Iterable[Game],
    scores: Mapping[int, GameScore],
    points: Optional[LadderPoints] = None,
) -> list[TeamRecord]:
    """Team records ranked by ladder points, then goal percentage, then team id."""
    games = list(games)
    records = [team_record(team_id, games, scores, points) for team_id in team_ids]
    return sorted(records, key=lambda r: (-r.ladder_points, -r.goal_percentage, r.team_id))
