"""
Score source reconciliation.

A game can have an official recorded score, caller-supplied stat records,
a previously cached score and fresh stat records from the data-access
collaborator, and they may disagree. The sources are tried in the fixed
order of SOURCE_PRIORITY; the first one that applies wins:

    1. OFFICIAL  - official score rows exist for both teams
    2. PRELOADED - the caller supplied stat records (trusted as fresh)
    3. CACHED    - a cached score exists and no forced refresh was asked for
    4. COMPUTED  - fetch stat records and aggregate them

A forced refresh only skips the cache; official scores still win.
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from .aggregation import aggregate_game_score, empty_game_score, forfeit_game_score
from .constants import QUARTERS
from .dedup import deduplicate_stats
from .models import (
    Game,
    GameScore,
    OfficialScore,
    QuarterScore,
    ScoreLine,
    ScoreSource,
    StatRecord,
)

logger = logging.getLogger('netscore.reconciler')

SOURCE_PRIORITY = (
    ScoreSource.OFFICIAL,
    ScoreSource.PRELOADED,
    ScoreSource.CACHED,
    ScoreSource.COMPUTED,
)

StatFetcher = Callable[[], Awaitable[Sequence[StatRecord]]]


def has_official_scores(game: Game, official_scores: Iterable[OfficialScore]) -> bool:
    """Official scores count only when both participating teams have rows."""
    teams = {row.team_id for row in official_scores if row.game_id == game.id}
    return game.home_team_id in teams and game.away_team_id in teams


def choose_source(
    game: Game,
    official_scores: Sequence[OfficialScore],
    preloaded_stats: Optional[Sequence[StatRecord]] = None,
    cached: Optional[GameScore] = None,
    force_fresh: bool = False,
) -> ScoreSource:
    """
    Decide which source supplies the score for a game.

    Args:
        game: Game metadata
        official_scores: Official score rows for the game (may be empty)
        preloaded_stats: Stat records the caller already holds, or None
        cached: Previously computed score from the cache collaborator, or None
        force_fresh: Skip the cache

    Returns:
        The first applicable source in SOURCE_PRIORITY
    """
    for source in SOURCE_PRIORITY:
        if source is ScoreSource.OFFICIAL and has_official_scores(game, official_scores):
            return source
        if source is ScoreSource.PRELOADED and preloaded_stats is not None:
            return source
        if source is ScoreSource.CACHED and cached is not None and not force_fresh:
            return source
    return ScoreSource.COMPUTED


def official_game_score(game: Game, official_scores: Iterable[OfficialScore]) -> GameScore:
    """
    Build a GameScore from official rows.

    Rows are summed per (team, quarter) and mapped to home/away through the
    game's team ids. Rows for other teams or games are ignored with a warning.
    """
    totals: dict[tuple[int, int], int] = defaultdict(int)
    warnings = []

    for row in official_scores:
        if row.game_id != game.id:
            warnings.append(f'Official score row for game {row.game_id} ignored (expected {game.id})')
            continue
        if row.team_id not in (game.home_team_id, game.away_team_id):
            warnings.append(
                f'Official score row for team {row.team_id} ignored; '
                f'game {game.id} is {game.home_team_id} v {game.away_team_id}'
            )
            continue
        totals[(row.team_id, row.quarter)] += row.score

    for warning in warnings:
        logger.warning(warning)

    quarters = sorted(set(QUARTERS) | {quarter for _, quarter in totals})
    quarter_scores = []
    final = ScoreLine()
    for quarter in quarters:
        line = ScoreLine(
            totals.get((game.home_team_id, quarter), 0),
            totals.get((game.away_team_id, quarter), 0),
        )
        quarter_scores.append(QuarterScore(quarter, line.goals_for, line.goals_against))
        final = final + line

    return GameScore(
        game_id=game.id,
        quarter_scores=tuple(quarter_scores),
        final_score=final,
        source=ScoreSource.OFFICIAL,
        has_data=True,
        warnings=tuple(warnings),
    )


def score_from_stats(game: Game, stats: Iterable[StatRecord], source: ScoreSource) -> GameScore:
    """Deduplicate and aggregate stat records, tagging the result with its source."""
    if game.is_forfeit:
        return forfeit_game_score(game)
    score = aggregate_game_score(game, deduplicate_stats(stats, game.id))
    if not score.has_data:
        return score
    return score.with_source(source)


class SourceReconciler:
    """Runs the source decision for a game and produces its GameScore."""

    async def reconcile(
        self,
        game: Game,
        official_scores: Sequence[OfficialScore],
        fetch_stats: StatFetcher,
        preloaded_stats: Optional[Sequence[StatRecord]] = None,
        cached: Optional[GameScore] = None,
        force_fresh: bool = False,
    ) -> GameScore:
        """
        Resolve the authoritative score for one game.

        Args:
            game: Game metadata
            official_scores: Official score rows already fetched for the game
            fetch_stats: Coroutine function fetching stat records; only awaited
                when no higher-priority source applies
            preloaded_stats: Stat records supplied by the caller, or None
            cached: Cached score, or None
            force_fresh: Ignore the cached score

        Returns:
            GameScore tagged with the source it came from
        """
        source = choose_source(game, official_scores, preloaded_stats, cached, force_fresh)
        if official_scores and source is not ScoreSource.OFFICIAL:
            logger.warning(
                f'Game {game.id}: official scores recorded for one team only; '
                f'falling back to {source.value}'
            )
        logger.debug(f'Game {game.id}: using {source.value} score')

        if source is ScoreSource.OFFICIAL:
            return official_game_score(game, official_scores)

        if source is ScoreSource.PRELOADED:
            return score_from_stats(game, preloaded_stats or (), ScoreSource.PRELOADED)

        if source is ScoreSource.CACHED:
            return cached.with_source(ScoreSource.CACHED)

        if game.is_forfeit:
            return forfeit_game_score(game)

        stats = await fetch_stats()
        if not stats:
            logger.debug(f'Game {game.id}: no stat records recorded')
            return empty_game_score(game.id)
        return score_from_stats(game, stats, ScoreSource.COMPUTED)
