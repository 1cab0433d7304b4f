from .models import (
    Game,
    GameScore,
    OfficialScore,
    PerformanceReport,
    PerspectiveScore,
    PlayerGamePerformance,
    PlayerStatTotals,
    QuarterScore,
    RosterAssignment,
    ScoreLine,
    ScoreSource,
    StatRecord,
    TeamRecord,
)
from .errors import (
    GameNotFoundError,
    InvalidPerspectiveError,
    NetscoreError,
    StatisticsUnavailableError,
)
from .roster import RosterIndex
from .dedup import DedupResult, deduplicate_stats
from .aggregation import aggregate_game_score, display_score, forfeit_game_score, orient_to_home
from .reconciler import SOURCE_PRIORITY, SourceReconciler, choose_source
from .perspective import determine_result, resolve_perspective
from .performance import (
    PlayerPerformanceAggregator,
    TimeRange,
    aggregate_player_performance,
    fallback_rating,
    player_game_log,
    totals_frame,
)
from .standings import ladder, recent_form, team_record
from .validators import (
    validate_game_score,
    validate_inter_club_scores,
    validate_player_totals,
    validate_roster,
)
from .provider import DataProvider, InMemoryDataProvider, InMemoryScoreCache, JsonDataProvider, ScoreCache
from .engine import StatsEngine

__all__ = [
    # Models
    'Game',
    'GameScore',
    'OfficialScore',
    'PerformanceReport',
    'PerspectiveScore',
    'PlayerGamePerformance',
    'PlayerStatTotals',
    'QuarterScore',
    'RosterAssignment',
    'ScoreLine',
    'ScoreSource',
    'StatRecord',
    'TeamRecord',
    # Errors
    'NetscoreError',
    'StatisticsUnavailableError',
    'GameNotFoundError',
    'InvalidPerspectiveError',
    # Components
    'RosterIndex',
    'DedupResult',
    'deduplicate_stats',
    'aggregate_game_score',
    'forfeit_game_score',
    'orient_to_home',
    'display_score',
    'SOURCE_PRIORITY',
    'SourceReconciler',
    'choose_source',
    'determine_result',
    'resolve_perspective',
    'PlayerPerformanceAggregator',
    'TimeRange',
    'aggregate_player_performance',
    'fallback_rating',
    'player_game_log',
    'totals_frame',
    # Standings
    'team_record',
    'ladder',
    'recent_form',
    # Validation
    'validate_roster',
    'validate_game_score',
    'validate_inter_club_scores',
    'validate_player_totals',
    # Collaborators
    'DataProvider',
    'ScoreCache',
    'InMemoryDataProvider',
    'InMemoryScoreCache',
    'JsonDataProvider',
    # Engine
    'StatsEngine',
]
