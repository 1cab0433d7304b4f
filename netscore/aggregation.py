"""Perspective-free score aggregation from deduplicated stat records."""

import logging
from dataclasses import replace
from typing import Iterable, Optional

from .config import get_forfeit_score
from .constants import FORFEIT_HOME_WINS, QUARTERS
from .dedup import DedupResult
from .models import Game, GameScore, QuarterScore, ScoreLine, ScoreSource, StatRecord
from .validators import validate_inter_club_scores

logger = logging.getLogger('netscore.aggregation')


def orient_to_home(records: Iterable[StatRecord], game: Game) -> list[StatRecord]:
    """
    Normalize for/against on each record to the home team's side.

    A record's goals_for/goals_against are written from the point of view of
    the team whose recorder entered it. Records entered by the away team are
    swapped; records without a team id are taken as home-oriented already.
    """
    oriented = []
    for record in records:
        if record.team_id is not None and record.team_id == game.away_team_id:
            record = replace(
                record,
                goals_for=record.goals_against,
                goals_against=record.goals_for,
                team_id=game.home_team_id,
            )
        oriented.append(record)
    return oriented


def scoring_side(game: Game, stats: DedupResult) -> tuple[Optional[int], DedupResult]:
    """
    The recording team whose records score the game, with only those records.

    The home team's own records are preferred, then records that name no
    team, then the away team's. Records from teams not in the game are
    never used.
    """
    foreign = stats.recording_teams - {game.home_team_id, game.away_team_id, None}
    if foreign:
        logger.warning(f'Game {game.id}: ignoring stat records entered by teams {sorted(foreign)}')
    return stats.pick_side(game.home_team_id, None, game.away_team_id)


def inter_club_warnings(game: Game, stats: DedupResult) -> tuple[str, ...]:
    """Discrepancies between the two clubs' records when both recorded the game."""
    if not {game.home_team_id, game.away_team_id} <= stats.recording_teams:
        return ()
    messages = tuple(
        f'Game {game.id} {message}'
        for message in validate_inter_club_scores(
            stats.for_team(game.home_team_id).records,
            stats.for_team(game.away_team_id).records,
        )
    )
    for message in messages:
        logger.warning(message)
    return messages


def empty_game_score(game_id: int, warnings: tuple[str, ...] = ()) -> GameScore:
    """0-0 in every quarter, flagged as having no data."""
    return GameScore(
        game_id=game_id,
        quarter_scores=tuple(QuarterScore(q) for q in QUARTERS),
        final_score=ScoreLine(),
        source=ScoreSource.NONE,
        has_data=False,
        warnings=warnings,
    )


def forfeit_game_score(game: Game) -> GameScore:
    """
    Canonical score for a forfeited game, derived from status alone.

    No quarter breakdown exists, so every quarter reports 0-0 while the
    final score carries the forfeit result.
    """
    if not game.is_forfeit:
        raise ValueError(f'Game {game.id} is not a forfeit (status {game.status!r})')

    winner, loser = get_forfeit_score()
    final = ScoreLine(winner, loser) if FORFEIT_HOME_WINS[game.status] else ScoreLine(loser, winner)
    return GameScore(
        game_id=game.id,
        quarter_scores=tuple(QuarterScore(q) for q in QUARTERS),
        final_score=final,
        source=ScoreSource.FORFEIT,
        has_data=True,
    )


def aggregate_game_score(game: Game, stats: DedupResult) -> GameScore:
    """
    Sum goals for/against across positions into per-quarter and final scores.

    Forfeit games bypass aggregation entirely. The result is perspective-free:
    goals_for is the home team's tally once records are oriented to home.
    Only one recording team's records are summed (see scoring_side); when
    both clubs recorded the game, disagreements come back as warnings.

    Args:
        game: Game metadata (status and team ids)
        stats: Deduplicated stat records for the game

    Returns:
        GameScore whose final score is the exact sum of its quarters
    """
    if game.is_forfeit:
        if stats.by_slot:
            logger.debug(f'Game {game.id} is a forfeit; ignoring {len(stats.by_slot)} stat records')
        return forfeit_game_score(game)

    _, side = scoring_side(game, stats)
    if not side.by_slot:
        return empty_game_score(game.id, stats.warnings)

    quarter_scores = []
    final = ScoreLine()
    for quarter in QUARTERS:
        line = ScoreLine()
        for record in orient_to_home(side.quarter_records(quarter), game):
            line = line + ScoreLine(record.goals_for, record.goals_against)
        quarter_scores.append(QuarterScore(quarter, line.goals_for, line.goals_against))
        final = final + line

    return GameScore(
        game_id=game.id,
        quarter_scores=tuple(quarter_scores),
        final_score=final,
        source=ScoreSource.COMPUTED,
        has_data=True,
        warnings=stats.warnings + inter_club_warnings(game, stats),
    )


def display_score(score: GameScore) -> str:
    """Home-away display string, or '-' when nothing has been recorded."""
    if not score.has_data:
        return '-'
    return f'{score.home_score}-{score.away_score}'
