"""
Player performance rollups across many games.

Each game contributes one row per on-court player per quarter (the "map"
step, independent per game). Rows are concatenated into a polars frame and
summed per player (the "reduce" step), which is order-independent and so
deterministic however the per-game work was scheduled.
"""

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

import polars as pl

from .config import get_rating_config, get_recent_games
from .constants import COMPLETED, POSITIONS, QUARTERS, STAT_FIELDS, TOTALS_FIELDS
from .dedup import DedupResult
from .models import Game, PlayerGamePerformance, PlayerStatTotals
from .roster import RosterIndex
from .schemas import RatingConfig

logger = logging.getLogger('netscore.performance')

CONTRIBUTION_SCHEMA = {
    'player_id': pl.Int64,
    'game_id': pl.Int64,
    'game_date': pl.Date,
    'quarter': pl.Int64,
    'position': pl.Utf8,
    **{name: pl.Int64 for name in TOTALS_FIELDS},
    'rating': pl.Int64,
}


@dataclass(frozen=True)
class TimeRange:
    """Which of the eligible games to include: all, the last N completed, or this month."""
    kind: str = 'all'
    count: int = 0

    ALL = 'all'
    LAST = 'last'
    MONTH = 'month'

    @classmethod
    def all(cls) -> 'TimeRange':
        return cls(cls.ALL)

    @classmethod
    def last(cls, count: Optional[int] = None) -> 'TimeRange':
        count = get_recent_games() if count is None else count
        if count < 1:
            raise ValueError(f'Last-N time range needs a positive count, got {count}')
        return cls(cls.LAST, count)

    @classmethod
    def this_month(cls) -> 'TimeRange':
        return cls(cls.MONTH)

    @classmethod
    def parse(cls, value: str) -> 'TimeRange':
        """
        Parse a selector string: 'all', 'last5' / 'last-5' / 'last', 'month' / 'this-month'.

        Raises:
            ValueError: Unrecognized selector
        """
        value = value.strip().lower()
        if value == cls.ALL:
            return cls.all()
        if value in ('month', 'this-month', 'current-month'):
            return cls.this_month()
        match = re.match(r'^last[-_ ]?(\d*)$', value)
        if match:
            return cls.last(int(match.group(1)) if match.group(1) else None)
        raise ValueError(f'Invalid time range: {value!r}')

    def select(self, games: Iterable[Game], today: Optional[dt.date] = None) -> list[Game]:
        """Apply the selector to games that already passed eligibility filtering."""
        games = list(games)
        if self.kind == self.ALL:
            return games
        if self.kind == self.LAST:
            completed = [g for g in games if g.status == COMPLETED]
            completed.sort(key=lambda g: (g.date is not None, g.date or dt.date.min, g.id), reverse=True)
            return completed[: self.count]
        if self.kind == self.MONTH:
            today = today or dt.date.today()
            return [
                g for g in games
                if g.date is not None and (g.date.year, g.date.month) == (today.year, today.month)
            ]
        raise ValueError(f'Invalid time range kind: {self.kind!r}')


def eligible_games(games: Iterable[Game]) -> list[Game]:
    """Drop forfeits, byes and abandoned games; they never count toward player stats."""
    eligible = []
    for game in games:
        if game.allows_player_stats:
            eligible.append(game)
        else:
            logger.debug(f'Game {game.id} ({game.status}) excluded from player statistics')
    return eligible


def fallback_rating(goals: int, rebounds: int, intercepts: int, config: Optional[RatingConfig] = None) -> float:
    """
    Deterministic rating when no recorded rating exists.

    clamp(base + goals_weight*goals + rebounds_weight*rebounds
          + intercepts_weight*intercepts, minimum, maximum), to one decimal.
    """
    config = config or get_rating_config()
    raw = (
        config.base
        + config.goals_weight * goals
        + config.rebounds_weight * rebounds
        + config.intercepts_weight * intercepts
    )
    return round(min(max(raw, config.minimum), config.maximum), 1)


def game_contributions(game: Game, roster: RosterIndex, stats: Optional[DedupResult]) -> list[dict]:
    """
    One row per on-court player per quarter for a single game.

    Slots with a player but no stat record still produce a zero row so the
    player counts as having played. Only records entered by the lineup's
    team (or naming no team) are read; without a team on the lineup the
    home club's records are preferred, as for scoring.
    """
    side_team, side = None, None
    if stats is not None:
        lineup_team = roster.team_for(game.id)
        if lineup_team is None:
            side_team, side = stats.pick_side(game.home_team_id, None, game.away_team_id)
        else:
            side_team, side = stats.pick_side(lineup_team, None)

    rows = []
    for quarter in QUARTERS:
        for position in POSITIONS:
            player_id = roster.position_player(game.id, quarter, position)
            if player_id is None:
                continue
            record = side.get(quarter, position, side_team) if side is not None else None
            row = {
                'player_id': player_id,
                'game_id': game.id,
                'game_date': game.date,
                'quarter': quarter,
                'position': position,
            }
            for record_field, totals_field in STAT_FIELDS.items():
                row[totals_field] = getattr(record, record_field) if record is not None else 0
            row['rating'] = record.rating if record is not None else None
            rows.append(row)
    return rows


def contributions_frame(rows: list[dict]) -> pl.DataFrame:
    return pl.DataFrame(rows, schema=CONTRIBUTION_SCHEMA)


class PlayerPerformanceAggregator:
    """Rolls up per-player totals over a filtered set of games."""

    def __init__(self, rating_config: Optional[RatingConfig] = None):
        self.rating_config = rating_config or get_rating_config()

    def contributions(
        self,
        games: Iterable[Game],
        roster: RosterIndex,
        stats_by_game: Mapping[int, DedupResult],
    ) -> pl.DataFrame:
        """Per-game rows for every game, concatenated."""
        frames = [
            contributions_frame(game_contributions(game, roster, stats_by_game.get(game.id)))
            for game in games
        ]
        if not frames:
            return contributions_frame([])
        return pl.concat(frames, how='vertical')

    def select_games(
        self,
        games: Iterable[Game],
        time_range: TimeRange,
        today: Optional[dt.date] = None,
    ) -> list[Game]:
        """Forfeit/bye/abandoned exclusion first, then the time-range selector."""
        return time_range.select(eligible_games(games), today=today)

    def aggregate(
        self,
        player_ids: Optional[Iterable[int]],
        games: Iterable[Game],
        roster: RosterIndex,
        stats_by_game: Mapping[int, DedupResult],
        time_range: Optional[TimeRange] = None,
        today: Optional[dt.date] = None,
    ) -> dict[int, PlayerStatTotals]:
        """
        Compute PlayerStatTotals for each requested player.

        Args:
            player_ids: Players to report; None reports every player found on court
            games: Candidate games (already season/date filtered by the caller)
            roster: Roster index covering the games
            stats_by_game: Deduplicated stat records per game id
            time_range: Game selector (default: all)
            today: Reference date for the current-month selector

        Returns:
            Dict mapping player id to totals. Requested players with no
            qualifying games get all-zero totals and the fallback rating.
        """
        selected = self.select_games(games, time_range or TimeRange.all(), today=today)
        frame = self.contributions(selected, roster, stats_by_game)

        if player_ids is not None:
            wanted = sorted(set(player_ids))
            frame = frame.filter(pl.col('player_id').is_in(wanted))
        else:
            wanted = sorted(frame.get_column('player_id').unique().to_list())

        sums = {
            row['player_id']: row
            for row in frame.group_by('player_id')
            .agg(
                pl.col('game_id').n_unique().alias('games_played'),
                *[pl.col(name).sum() for name in TOTALS_FIELDS],
            )
            .iter_rows(named=True)
        }

        quarters_by_position: dict[int, dict[str, int]] = {}
        for row in frame.group_by(['player_id', 'position']).agg(pl.len().alias('quarters')).iter_rows(named=True):
            quarters_by_position.setdefault(row['player_id'], {})[row['position']] = row['quarters']

        recorded_ratings = {
            row['player_id']: row['rating']
            for row in frame.filter((pl.col('quarter') == 1) & pl.col('rating').is_not_null())
            .sort(['game_date', 'game_id'], descending=True, nulls_last=True)
            .group_by('player_id', maintain_order=True)
            .first()
            .iter_rows(named=True)
        }

        results = {}
        for player_id in wanted:
            row = sums.get(player_id, {})
            counts = {name: row.get(name, 0) or 0 for name in TOTALS_FIELDS}
            rating = recorded_ratings.get(player_id)
            if rating is None:
                rating = fallback_rating(
                    counts['goals'], counts['rebounds'], counts['intercepts'], self.rating_config
                )
            by_position = quarters_by_position.get(player_id, {})
            results[player_id] = PlayerStatTotals(
                player_id=player_id,
                games_played=row.get('games_played', 0) or 0,
                rating=float(rating),
                quarters_by_position={p: by_position.get(p, 0) for p in POSITIONS},
                **counts,
            )

        logger.debug(
            f'Aggregated {len(results)} players over {len(selected)} games '
            f'({frame.height} on-court quarters)'
        )
        return results

    def game_log(
        self,
        player_id: int,
        games: Iterable[Game],
        roster: RosterIndex,
        stats_by_game: Mapping[int, DedupResult],
    ) -> list[PlayerGamePerformance]:
        """One PlayerGamePerformance per eligible game the player was on court, newest first."""
        selected = eligible_games(games)
        frame = self.contributions(selected, roster, stats_by_game).filter(
            pl.col('player_id') == player_id
        )
        per_game = (
            frame.group_by('game_id')
            .agg(
                pl.col('game_date').first(),
                pl.col('position').unique().alias('positions'),
                pl.len().alias('quarters_played'),
                *[pl.col(name).sum() for name in TOTALS_FIELDS],
            )
            .sort(['game_date', 'game_id'], descending=True, nulls_last=True)
        )

        log = []
        for row in per_game.iter_rows(named=True):
            log.append(
                PlayerGamePerformance(
                    game_id=row['game_id'],
                    date=row['game_date'],
                    positions_played=tuple(p for p in POSITIONS if p in row['positions']),
                    quarters_played=row['quarters_played'],
                    **{name: row[name] for name in TOTALS_FIELDS},
                )
            )
        return log


def aggregate_player_performance(
    player_ids: Optional[Iterable[int]],
    games: Iterable[Game],
    roster: RosterIndex,
    stats_by_game: Mapping[int, DedupResult],
    time_range: Optional[TimeRange] = None,
    today: Optional[dt.date] = None,
) -> dict[int, PlayerStatTotals]:
    """Shortcut for PlayerPerformanceAggregator().aggregate(...)."""
    return PlayerPerformanceAggregator().aggregate(
        player_ids, games, roster, stats_by_game, time_range=time_range, today=today
    )


def player_game_log(
    player_id: int,
    games: Iterable[Game],
    roster: RosterIndex,
    stats_by_game: Mapping[int, DedupResult],
) -> list[PlayerGamePerformance]:
    """Shortcut for PlayerPerformanceAggregator().game_log(...)."""
    return PlayerPerformanceAggregator().game_log(player_id, games, roster, stats_by_game)


def totals_frame(totals: Mapping[int, PlayerStatTotals]) -> pl.DataFrame:
    """Leaderboard frame, best rating first, then goals."""
    rows = [
        {
            'player_id': t.player_id,
            'games_played': t.games_played,
            **{name: getattr(t, name) for name in TOTALS_FIELDS},
            'rating': t.rating,
        }
        for t in totals.values()
    ]
    schema = {
        'player_id': pl.Int64,
        'games_played': pl.Int64,
        **{name: pl.Int64 for name in TOTALS_FIELDS},
        'rating': pl.Float64,
    }
    return pl.DataFrame(rows, schema=schema).sort(
        ['rating', 'goals', 'player_id'], descending=[True, True, False]
    )
