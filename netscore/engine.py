"""
Statistics engine facade.

Wires the data-access collaborator and optional score cache to the pure
components: roster index, deduplicator, aggregator, source reconciler,
perspective resolver and player performance aggregator.
"""

import asyncio
import datetime as dt
import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Sequence

from .config import get_max_concurrency
from .constants import UPCOMING
from .dedup import DedupResult, deduplicate_stats
from .errors import GameNotFoundError, InvalidPerspectiveError, NetscoreError, StatisticsUnavailableError
from .models import (
    Game,
    GameScore,
    PerformanceReport,
    PerspectiveScore,
    PlayerGamePerformance,
    PlayerStatTotals,
    RosterAssignment,
    ScoreSource,
    StatRecord,
    TeamRecord,
)
from .perspective import resolve_perspective
from .performance import PlayerPerformanceAggregator, TimeRange
from .provider import DataProvider, ScoreCache
from .reconciler import SourceReconciler
from .roster import RosterIndex
from .schemas import GameRow, OfficialScoreRow, RosterAssignmentRow, StatRecordRow, parse_records
from .standings import counts_for_record, ladder, team_record
from .validators import validate_roster

logger = logging.getLogger('netscore.engine')


class StatsEngine:
    """
    Query surface for game scores, perspectives and player rollups.

    The engine holds no state between calls beyond its collaborators.
    Collaborator calls for independent games run concurrently, bounded by
    max_concurrency.
    """

    def __init__(
        self,
        provider: DataProvider,
        cache: Optional[ScoreCache] = None,
        max_concurrency: Optional[int] = None,
        aggregator: Optional[PlayerPerformanceAggregator] = None,
    ):
        """
        Initialize engine.

        Args:
            provider: Data-access collaborator
            cache: Optional score cache collaborator
            max_concurrency: Limit on in-flight collaborator calls (default from config)
            aggregator: Player performance aggregator (default: configured rating formula)
        """
        self.provider = provider
        self.cache = cache
        self.max_concurrency = max_concurrency or get_max_concurrency()
        self.reconciler = SourceReconciler()
        self.aggregator = aggregator or PlayerPerformanceAggregator()
        self._semaphore = asyncio.Semaphore(self.max_concurrency)

    async def _fetch(self, operation: str, game_id: int, call: Callable[[int], Awaitable[Any]]) -> Any:
        """Run one collaborator call, turning its failures into StatisticsUnavailableError."""
        async with self._semaphore:
            try:
                return await call(game_id)
            except NetscoreError:
                raise
            except Exception as e:
                logger.error(f'{operation} failed for game {game_id}: {e}')
                raise StatisticsUnavailableError(
                    f'Statistics unavailable for game {game_id}: {operation} failed ({e})',
                    game_id=game_id,
                    operation=operation,
                ) from e

    async def get_game(self, game_id: int) -> Game:
        """
        Fetch and validate game metadata.

        Raises:
            GameNotFoundError: Collaborator has no usable game for this id
            StatisticsUnavailableError: Collaborator call failed
        """
        row = await self._fetch('get_game', game_id, self.provider.get_game)
        games = parse_records([row], GameRow) if row is not None else []
        if not games:
            raise GameNotFoundError(f'Game {game_id} not found', game_id=game_id, operation='get_game')
        return games[0]

    async def get_roster_assignments(self, game_id: int) -> list[RosterAssignment]:
        rows = await self._fetch('get_roster_assignments', game_id, self.provider.get_roster_assignments)
        return parse_records(rows or [], RosterAssignmentRow)

    async def get_stat_records(self, game_id: int) -> list[StatRecord]:
        rows = await self._fetch('get_stat_records', game_id, self.provider.get_stat_records)
        return parse_records(rows or [], StatRecordRow)

    async def _score_game(
        self,
        game: Game,
        force_fresh: bool = False,
        preloaded_stats: Optional[Sequence[Any]] = None,
    ) -> GameScore:
        cached = None
        if self.cache is not None and not force_fresh:
            cached = self.cache.get(game)

        official_rows = await self._fetch('get_official_scores', game.id, self.provider.get_official_scores)
        official = parse_records(official_rows or [], OfficialScoreRow)
        preloaded = parse_records(preloaded_stats, StatRecordRow) if preloaded_stats is not None else None

        score = await self.reconciler.reconcile(
            game,
            official,
            fetch_stats=lambda: self.get_stat_records(game.id),
            preloaded_stats=preloaded,
            cached=cached,
            force_fresh=force_fresh,
        )

        if self.cache is not None and score.has_data and score.source is not ScoreSource.CACHED:
            self.cache.set(game, score)
        return score

    async def compute_game_score(
        self,
        game_id: int,
        force_fresh: bool = False,
        preloaded_stats: Optional[Sequence[Any]] = None,
    ) -> GameScore:
        """
        Resolve the authoritative score for a game.

        Args:
            game_id: Game to score
            force_fresh: Skip the cache (official scores still win)
            preloaded_stats: Stat records the caller already holds for this game

        Returns:
            GameScore tagged with its source; has_data is False when nothing
            has been recorded

        Raises:
            GameNotFoundError: Unknown game
            StatisticsUnavailableError: Collaborator call failed
        """
        game = await self.get_game(game_id)
        return await self._score_game(game, force_fresh, preloaded_stats)

    async def compute_game_scores(
        self,
        game_ids: Iterable[int],
        force_fresh: bool = False,
        preloaded_stats: Optional[Mapping[int, Sequence[Any]]] = None,
    ) -> dict[int, GameScore]:
        """
        Score many games concurrently.

        Game metadata is always fetched first. A batch cache entry for the
        exact set of games is used when present, computed under the games'
        current statuses, and no refresh or preloaded records were given.

        Returns:
            Dict mapping game id to GameScore, in request order
        """
        ids = list(dict.fromkeys(game_ids))
        if not ids:
            return {}
        games = await asyncio.gather(*(self.get_game(gid) for gid in ids))

        if self.cache is not None and not force_fresh and not preloaded_stats:
            batch = self.cache.get_batch(games)
            if batch is not None and all(gid in batch for gid in ids):
                logger.debug(f'Using cached batch of {len(ids)} game scores')
                return {gid: batch[gid].with_source(ScoreSource.CACHED) for gid in ids}

        preloaded_stats = preloaded_stats or {}
        scores = await asyncio.gather(
            *(self._score_game(game, force_fresh, preloaded_stats.get(game.id)) for game in games)
        )
        results = dict(zip(ids, scores))

        if self.cache is not None and all(s.has_data for s in scores):
            self.cache.set_batch(games, results)
        return results

    async def roster_advisories(self, game: Game) -> tuple[str, ...]:
        """Incomplete-roster messages for a played game (empty when not applicable)."""
        if not game.allows_player_stats or game.status == UPCOMING:
            return ()
        roster = RosterIndex(await self.get_roster_assignments(game.id))
        messages = validate_roster(roster, game.id)
        for message in messages:
            logger.warning(message)
        return tuple(messages)

    async def resolve_perspective(
        self,
        game_id: int,
        viewing_team_id: Optional[int] = None,
        force_fresh: bool = False,
    ) -> PerspectiveScore:
        """
        Score a game from a team's side, or club-wide when viewing_team_id is None.

        Raises:
            InvalidPerspectiveError: Team took no part in the game
            GameNotFoundError: Unknown game
            StatisticsUnavailableError: Collaborator call failed
        """
        game = await self.get_game(game_id)
        if viewing_team_id is not None and viewing_team_id not in game.team_ids:
            raise InvalidPerspectiveError(game.id, viewing_team_id)

        score, advisories = await asyncio.gather(
            self._score_game(game, force_fresh),
            self.roster_advisories(game),
        )
        return resolve_perspective(score, game, viewing_team_id, advisories=advisories)

    async def _load_game(self, game: Game) -> tuple[list[RosterAssignment], DedupResult]:
        assignments, records = await asyncio.gather(
            self.get_roster_assignments(game.id),
            self.get_stat_records(game.id),
        )
        return assignments, deduplicate_stats(records, game.id)

    async def _load_games(self, games: Sequence[Game]) -> tuple[RosterIndex, dict[int, DedupResult]]:
        """Fetch every game's roster and stats concurrently, then merge."""
        loaded = await asyncio.gather(*(self._load_game(game) for game in games))
        assignments = [a for game_assignments, _ in loaded for a in game_assignments]
        stats_by_game = {game.id: dedup for game, (_, dedup) in zip(games, loaded)}
        return RosterIndex(assignments), stats_by_game

    async def performance_report(
        self,
        players: Optional[Iterable[int]],
        games: Iterable[Any],
        time_range: TimeRange | str | None = None,
        today: Optional[dt.date] = None,
    ) -> PerformanceReport:
        """
        Player totals with incomplete-roster and data-quality advisories.

        Args:
            players: Player ids to report, or None for everyone on court
            games: Games (models or raw rows) already filtered by season/date
            time_range: TimeRange or selector string (default: all)
            today: Reference date for the current-month selector

        Returns:
            PerformanceReport
        """
        if isinstance(time_range, str):
            time_range = TimeRange.parse(time_range)
        selected = self.aggregator.select_games(
            parse_records(games, GameRow), time_range or TimeRange.all(), today=today
        )
        roster, stats_by_game = await self._load_games(selected)

        totals = self.aggregator.aggregate(players, selected, roster, stats_by_game)
        incomplete = tuple(g.id for g in selected if not roster.is_roster_complete(g.id))
        if incomplete:
            logger.warning(f'Incomplete rosters for games {list(incomplete)}; totals are partial')

        return PerformanceReport(
            totals=totals,
            game_ids=tuple(g.id for g in selected),
            incomplete_roster_games=incomplete,
            warnings=tuple(w for g in selected for w in stats_by_game[g.id].warnings),
        )

    async def aggregate_player_performance(
        self,
        players: Optional[Iterable[int]],
        games: Iterable[Any],
        time_range: TimeRange | str | None = None,
        today: Optional[dt.date] = None,
    ) -> dict[int, PlayerStatTotals]:
        """Player id -> PlayerStatTotals over the selected games."""
        report = await self.performance_report(players, games, time_range, today)
        return report.totals

    async def player_game_log(self, player_id: int, games: Iterable[Any]) -> list[PlayerGamePerformance]:
        """Per-game lines for one player, newest first."""
        eligible = [g for g in parse_records(games, GameRow) if g.allows_player_stats]
        roster, stats_by_game = await self._load_games(eligible)
        return self.aggregator.game_log(player_id, eligible, roster, stats_by_game)

    async def _record_scores(self, team_ids: set[int], games: list[Game]) -> dict[int, GameScore]:
        relevant = [g.id for g in games if any(counts_for_record(g, t) for t in team_ids)]
        return await self.compute_game_scores(relevant)

    async def team_record(self, team_id: int, games: Iterable[Any]) -> TeamRecord:
        """Win/loss/draw record for a team over the given games."""
        games = parse_records(games, GameRow)
        scores = await self._record_scores({team_id}, games)
        return team_record(team_id, games, scores)

    async def ladder(self, team_ids: Iterable[int], games: Iterable[Any]) -> list[TeamRecord]:
        """Ranked team records over the given games."""
        team_ids = list(team_ids)
        games = parse_records(games, GameRow)
        scores = await self._record_scores(set(team_ids), games)
        return ladder(team_ids, games, scores)
