"""Data models for the netscore engine.

Input records are read-only snapshots supplied by the data-access
collaborator; result types are derived and immutable.
"""

import datetime as dt
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .constants import (
    BYE,
    FORFEIT_STATUSES,
    NO_PLAYER_STATS_STATUSES,
    POSITIONS,
    UPCOMING,
)


@dataclass(frozen=True)
class RosterAssignment:
    """A player placed at a court position for one quarter of a game."""
    game_id: int
    quarter: int
    position: str  # one of POSITIONS, or an 'off' marker
    player_id: Optional[int] = None
    id: Optional[int] = None
    team_id: Optional[int] = None  # team the lineup was entered for

    @property
    def is_on_court(self) -> bool:
        return self.player_id is not None and self.position in POSITIONS


@dataclass(frozen=True)
class StatRecord:
    """Position-indexed statistics for one quarter. Has no direct player id."""
    id: int
    game_id: Optional[int]
    quarter: Optional[int]
    position: Optional[str]
    goals_for: int = 0
    goals_against: int = 0
    missed_goals: int = 0
    rebounds: int = 0
    intercepts: int = 0
    bad_pass: int = 0
    handling_error: int = 0
    pick_up: int = 0
    infringement: int = 0
    rating: Optional[int] = None
    team_id: Optional[int] = None  # team whose recorder entered the row

    @property
    def slot(self) -> Optional[Tuple[int, int, str]]:
        """(game_id, quarter, position) key, or None when the record can't be keyed."""
        if self.game_id is None or self.quarter is None or not self.position:
            return None
        return (self.game_id, self.quarter, self.position)


@dataclass(frozen=True)
class OfficialScore:
    """Authoritative per-quarter score entered for one team."""
    game_id: int
    team_id: int
    quarter: int
    score: int
    id: Optional[int] = None


@dataclass(frozen=True)
class Game:
    """Game metadata needed for aggregation and perspective mapping."""
    id: int
    home_team_id: Optional[int]
    away_team_id: Optional[int]
    status: str = UPCOMING
    date: Optional[dt.date] = None

    @property
    def is_forfeit(self) -> bool:
        return self.status in FORFEIT_STATUSES

    @property
    def is_bye(self) -> bool:
        return self.status == BYE or self.away_team_id is None

    @property
    def allows_player_stats(self) -> bool:
        return self.status not in NO_PLAYER_STATS_STATUSES and not self.is_bye

    @property
    def team_ids(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.home_team_id, self.away_team_id)


class ScoreSource(str, Enum):
    """Where a GameScore came from."""
    OFFICIAL = 'official'
    PRELOADED = 'preloaded'
    CACHED = 'cached'
    COMPUTED = 'computed'
    FORFEIT = 'forfeit'
    NONE = 'none'


@dataclass(frozen=True)
class ScoreLine:
    """A for/against pair."""
    goals_for: int = 0
    goals_against: int = 0

    def __add__(self, other: 'ScoreLine') -> 'ScoreLine':
        return ScoreLine(
            self.goals_for + other.goals_for,
            self.goals_against + other.goals_against,
        )

    @property
    def total(self) -> int:
        return self.goals_for + self.goals_against

    def swapped(self) -> 'ScoreLine':
        return ScoreLine(self.goals_against, self.goals_for)


@dataclass(frozen=True)
class QuarterScore:
    quarter: int
    goals_for: int = 0
    goals_against: int = 0

    @property
    def line(self) -> ScoreLine:
        return ScoreLine(self.goals_for, self.goals_against)


@dataclass(frozen=True)
class GameScore:
    """
    Perspective-free score for a game.

    goals_for is the home team's goals and goals_against the away team's,
    both per quarter (ordered 1-4) and in total.
    """
    game_id: int
    quarter_scores: Tuple[QuarterScore, ...]
    final_score: ScoreLine
    source: ScoreSource = ScoreSource.COMPUTED
    has_data: bool = True
    warnings: Tuple[str, ...] = ()

    def quarter(self, quarter: int) -> ScoreLine:
        for qs in self.quarter_scores:
            if qs.quarter == quarter:
                return qs.line
        return ScoreLine()

    @property
    def home_score(self) -> int:
        return self.final_score.goals_for

    @property
    def away_score(self) -> int:
        return self.final_score.goals_against

    def with_source(self, source: ScoreSource) -> 'GameScore':
        return replace(self, source=source)


@dataclass(frozen=True)
class PerspectiveScore:
    """A GameScore seen from one team's side (or club-wide when viewing_team_id is None)."""
    game_id: int
    our_score: int
    their_score: int
    result: Optional[str]  # win/loss/draw, None without a perspective
    viewing_team_id: Optional[int] = None
    quarter_scores: Tuple[QuarterScore, ...] = ()
    has_data: bool = True
    advisories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlayerStatTotals:
    """Per-player rollup across a filtered set of games."""
    player_id: int
    games_played: int = 0
    goals: int = 0
    goals_against: int = 0
    missed_goals: int = 0
    rebounds: int = 0
    intercepts: int = 0
    bad_pass: int = 0
    handling_error: int = 0
    pick_up: int = 0
    infringement: int = 0
    rating: float = 5.0
    quarters_by_position: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PlayerGamePerformance:
    """One player's line for a single game."""
    game_id: int
    date: Optional[dt.date]
    positions_played: Tuple[str, ...]
    quarters_played: int
    goals: int = 0
    goals_against: int = 0
    missed_goals: int = 0
    rebounds: int = 0
    intercepts: int = 0
    bad_pass: int = 0
    handling_error: int = 0
    pick_up: int = 0
    infringement: int = 0


@dataclass(frozen=True)
class TeamRecord:
    """Win/loss/draw record for a team over a set of games."""
    team_id: int
    played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    goals_for: int = 0
    goals_against: int = 0
    ladder_points: int = 0

    @property
    def win_rate(self) -> float:
        """Percentage of games won (0-100)."""
        return (self.wins / self.played) * 100 if self.played else 0.0

    @property
    def goal_percentage(self) -> float:
        """Goals for as a percentage of goals against, as used for ladder tie-breaks."""
        return (self.goals_for / self.goals_against) * 100 if self.goals_against else 0.0


@dataclass(frozen=True)
class PerformanceReport:
    """Player totals plus the advisories gathered while computing them."""
    totals: Dict[int, PlayerStatTotals]
    game_ids: Tuple[int, ...] = ()
    incomplete_roster_games: Tuple[int, ...] = ()
    warnings: Tuple[str, ...] = ()
