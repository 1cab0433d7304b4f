"""Engine configuration management."""

from functools import lru_cache
from pathlib import Path

from .schemas import EngineConfig, LadderPoints, RatingConfig
from .utils import load_json


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """
    Load engine configuration from netscore/data/engine_config.json.

    Configuration is cached after first load.

    Returns:
        EngineConfig object with validated settings

    Raises:
        FileNotFoundError: If engine_config.json doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from netscore.config import get_config
        config = get_config()
        print(f"Forfeit score: {config.forfeit_winner_goals}-{config.forfeit_loser_goals}")
    """
    config_path = Path(__file__).parent / 'data' / 'engine_config.json'
    return load_json(config_path, schema=EngineConfig)


def get_forfeit_score() -> tuple[int, int]:
    """Get (winner goals, loser goals) awarded for a forfeit."""
    config = get_config()
    return config.forfeit_winner_goals, config.forfeit_loser_goals


def get_cache_ttl() -> int:
    """Get score cache staleness window in seconds."""
    return get_config().cache_ttl_seconds


def get_recent_games() -> int:
    """Get default number of games for the 'last N' time range."""
    return get_config().recent_games


def get_max_concurrency() -> int:
    """Get maximum concurrent collaborator calls per batch."""
    return get_config().max_concurrency


def get_rating_config() -> RatingConfig:
    """Get fallback rating formula settings."""
    return get_config().rating


def get_ladder_points() -> LadderPoints:
    """Get competition points per result."""
    return get_config().ladder_points


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
