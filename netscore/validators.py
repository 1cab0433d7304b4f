"""Validation functions for rosters, game scores, and player totals."""

from collections import Counter
from typing import Iterable, Mapping

from .constants import POSITIONS, QUARTERS, TOTALS_FIELDS
from .dedup import deduplicate_stats
from .models import GameScore, PlayerStatTotals, ScoreLine, ScoreSource, StatRecord
from .roster import RosterIndex


def validate_roster(roster: RosterIndex, game_id: int) -> list[str]:
    """
    Check a game's lineup for gaps and double-booked players.

    Checks:
    - Every position filled in every quarter
    - No player holding two positions in the same quarter

    Incomplete rosters are advisory only; nothing here blocks scoring.

    Args:
        roster: Roster index covering the game
        game_id: Game to check

    Returns:
        List of validation messages (empty if complete)
    """
    errors = []

    missing_by_quarter: dict[int, list[str]] = {}
    for quarter, position in roster.missing_slots(game_id):
        missing_by_quarter.setdefault(quarter, []).append(position)
    for quarter, positions in missing_by_quarter.items():
        errors.append(f'Game {game_id} Q{quarter} has no player at {", ".join(positions)}')

    for quarter in QUARTERS:
        players = Counter(
            roster.position_player(game_id, quarter, position) for position in POSITIONS
        )
        players.pop(None, None)
        doubled = sorted(p for p, count in players.items() if count > 1)
        if doubled:
            errors.append(
                f'Game {game_id} Q{quarter} has players in more than one position: '
                f'{", ".join(str(p) for p in doubled)}'
            )

    return errors


def validate_game_score(score: GameScore) -> list[str]:
    """
    Validate a GameScore's internal consistency.

    Checks:
    - Quarters 1-4 present
    - No negative goals
    - Final score equals the sum of the quarters (not for forfeits, which
      carry no quarter breakdown)

    Args:
        score: GameScore to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    quarters = {qs.quarter for qs in score.quarter_scores}
    missing = [q for q in QUARTERS if q not in quarters]
    if missing:
        errors.append(f'Game {score.game_id} score is missing quarters {missing}')

    for qs in score.quarter_scores:
        if qs.goals_for < 0 or qs.goals_against < 0:
            errors.append(
                f'Game {score.game_id} Q{qs.quarter} has negative goals '
                f'({qs.goals_for}-{qs.goals_against})'
            )

    if score.source is ScoreSource.FORFEIT:
        return errors

    summed = ScoreLine()
    for qs in score.quarter_scores:
        summed = summed + qs.line
    if summed != score.final_score:
        errors.append(
            f'Game {score.game_id} final score {score.home_score}-{score.away_score} '
            f'does not match quarter total {summed.goals_for}-{summed.goals_against}'
        )

    return errors


def _quarter_lines(records: Iterable[StatRecord]) -> dict[int, ScoreLine]:
    dedup = deduplicate_stats(records)
    lines = {}
    for quarter in QUARTERS:
        line = ScoreLine()
        for record in dedup.quarter_records(quarter):
            line = line + ScoreLine(record.goals_for, record.goals_against)
        lines[quarter] = line
    return lines


def validate_inter_club_scores(
    home_stats: Iterable[StatRecord], away_stats: Iterable[StatRecord]
) -> list[str]:
    """
    Compare the two clubs' own records of the same game.

    Each side records for/against from its own point of view, so one
    side's goals-for must equal the other side's goals-against in every
    quarter.

    Args:
        home_stats: Stat records entered by the home team
        away_stats: Stat records entered by the away team

    Returns:
        List of discrepancy messages (empty if both sides agree)
    """
    errors = []
    home = _quarter_lines(home_stats)
    away = _quarter_lines(away_stats)

    for quarter in QUARTERS:
        h, a = home[quarter], away[quarter]
        if h.goals_for != a.goals_against:
            errors.append(
                f'Q{quarter}: home recorded {h.goals_for} goals for, '
                f'away recorded {a.goals_against} goals against'
            )
        if h.goals_against != a.goals_for:
            errors.append(
                f'Q{quarter}: home recorded {h.goals_against} goals against, '
                f'away recorded {a.goals_for} goals for'
            )

    return errors


def validate_player_totals(
    totals: Mapping[int, PlayerStatTotals], max_rating: float = 10.0
) -> list[str]:
    """
    Sanity-check player rollups.

    Checks:
    - No negative counts
    - Games played implies quarters on court, and vice versa
    - Rating within 0 to max_rating

    Args:
        totals: PlayerStatTotals keyed by player id
        max_rating: Upper rating bound

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    for player_id, t in totals.items():
        if player_id != t.player_id:
            errors.append(f'Totals keyed under {player_id} belong to player {t.player_id}')

        negative = [name for name in TOTALS_FIELDS if getattr(t, name) < 0]
        if negative:
            errors.append(f'Player {t.player_id} has negative {", ".join(negative)}')

        quarters = sum(t.quarters_by_position.values())
        if t.games_played and not quarters:
            errors.append(f'Player {t.player_id} played {t.games_played} games with no quarters on court')
        if quarters and not t.games_played:
            errors.append(f'Player {t.player_id} has {quarters} quarters on court but no games played')
        if quarters > t.games_played * len(QUARTERS):
            errors.append(
                f'Player {t.player_id} has {quarters} quarters on court '
                f'in only {t.games_played} games'
            )

        if not 0 <= t.rating <= max_rating:
            errors.append(f'Player {t.player_id} rating {t.rating} out of range (0-{max_rating})')

    return errors
