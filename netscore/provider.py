"""
Collaborator interfaces consumed by the engine, with reference implementations.

The engine never fetches or stores anything itself. It talks to a
DataProvider (async, may be called concurrently for independent games)
and optionally to a ScoreCache holding previously computed GameScores.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence, runtime_checkable

from .config import get_cache_ttl
from .models import Game, GameScore, OfficialScore, RosterAssignment, StatRecord
from .utils import load_rows

logger = logging.getLogger('netscore.provider')


@runtime_checkable
class DataProvider(Protocol):
    """Data-access collaborator. Methods may return engine models or raw row dicts."""

    async def get_game(self, game_id: int) -> Game | dict | None: ...

    async def get_roster_assignments(self, game_id: int) -> Sequence[RosterAssignment | dict]: ...

    async def get_stat_records(self, game_id: int) -> Sequence[StatRecord | dict]: ...

    async def get_official_scores(self, game_id: int) -> Sequence[OfficialScore | dict]: ...


@runtime_checkable
class ScoreCache(Protocol):
    """Read/write store for computed GameScores. Staleness is the cache's concern."""

    def get(self, game: Game) -> Optional[GameScore]: ...

    def set(self, game: Game, score: GameScore) -> None: ...

    def get_batch(self, games: Sequence[Game]) -> Optional[dict[int, GameScore]]: ...

    def set_batch(self, games: Sequence[Game], scores: dict[int, GameScore]) -> None: ...


def batch_key(game_ids: Iterable[int]) -> str:
    """Composite cache key for a list of games, independent of order."""
    return 'batch-' + ','.join(str(g) for g in sorted(set(game_ids)))


class InMemoryScoreCache:
    """
    Process-local score cache with a staleness window.

    Entries are keyed by game id and remember the game status they were
    computed under; a status change (e.g. completed -> forfeit-loss) makes the
    entry stale immediately. Batch entries remember the status of every game
    in the batch the same way. Writes are plain overwrites.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = get_cache_ttl() if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[Any, tuple[float, Any, Any]] = {}

    def _fresh(self, key: Any, status: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, stored_status, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        if status is not None and stored_status != status:
            logger.debug(f'Cache entry {key} computed under status {stored_status}, now {status}')
            del self._entries[key]
            return None
        return value

    def get(self, game: Game) -> Optional[GameScore]:
        return self._fresh(game.id, game.status)

    def set(self, game: Game, score: GameScore) -> None:
        self._entries[game.id] = (self._clock(), game.status, score)

    @staticmethod
    def _statuses(games: Sequence[Game]) -> dict[int, Optional[str]]:
        return {game.id: game.status for game in games}

    def get_batch(self, games: Sequence[Game]) -> Optional[dict[int, GameScore]]:
        """Scores for exactly these games, stale if any game's status has changed."""
        value = self._fresh(batch_key(game.id for game in games), self._statuses(games))
        return dict(value) if value is not None else None

    def set_batch(self, games: Sequence[Game], scores: dict[int, GameScore]) -> None:
        self._entries[batch_key(game.id for game in games)] = (
            self._clock(),
            self._statuses(games),
            dict(scores),
        )

    def invalidate(self, game_id: int) -> None:
        """Drop a game's entry and every batch entry containing it."""
        self._entries.pop(game_id, None)
        for key in [k for k in self._entries if isinstance(k, str)]:
            if str(game_id) in key[len('batch-'):].split(','):
                del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class InMemoryDataProvider:
    """DataProvider over lists already held in memory (models or raw dicts)."""

    def __init__(
        self,
        games: Iterable[Any] = (),
        roster_assignments: Iterable[Any] = (),
        stat_records: Iterable[Any] = (),
        official_scores: Iterable[Any] = (),
    ):
        self.games = list(games)
        self.roster_assignments = list(roster_assignments)
        self.stat_records = list(stat_records)
        self.official_scores = list(official_scores)

    @staticmethod
    def _game_id(row: Any) -> Any:
        if isinstance(row, dict):
            return row.get('gameId', row.get('game_id'))
        return getattr(row, 'game_id', None)

    def _for_game(self, rows: list, game_id: int) -> list:
        return [row for row in rows if self._game_id(row) == game_id]

    async def get_game(self, game_id: int) -> Any:
        for game in self.games:
            gid = game.get('id') if isinstance(game, dict) else game.id
            if gid == game_id:
                return game
        return None

    async def get_roster_assignments(self, game_id: int) -> list:
        return self._for_game(self.roster_assignments, game_id)

    async def get_stat_records(self, game_id: int) -> list:
        return self._for_game(self.stat_records, game_id)

    async def get_official_scores(self, game_id: int) -> list:
        return self._for_game(self.official_scores, game_id)


class JsonDataProvider(InMemoryDataProvider):
    """
    DataProvider reading exported records from a directory of JSON files.

    Expected layout (each file a list of camelCase row objects):
        games.json, rosters.json, stats.json, official_scores.json

    Missing files are treated as empty; malformed files raise.
    """

    FILES = {
        'games': 'games.json',
        'roster_assignments': 'rosters.json',
        'stat_records': 'stats.json',
        'official_scores': 'official_scores.json',
    }

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        super().__init__(
            **{attr: load_rows(self.data_dir / filename) for attr, filename in self.FILES.items()}
        )
        logger.info(
            f'Loaded {len(self.games)} games, {len(self.stat_records)} stat records '
            f'from {self.data_dir}'
        )
