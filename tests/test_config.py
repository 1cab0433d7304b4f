"""Tests for configuration, schemas and JSON loading."""

import json
import logging

import pytest

from netscore.config import (
    get_cache_ttl,
    get_config,
    get_forfeit_score,
    get_ladder_points,
    get_max_concurrency,
    get_rating_config,
    get_recent_games,
)
from netscore.constants import BYE, COMPLETED
from netscore.logging_config import get_logger, setup_logging
from netscore.models import Game, StatRecord
from netscore.schemas import (
    EngineConfig,
    GameRow,
    OfficialScoreRow,
    RosterAssignmentRow,
    StatRecordRow,
    parse_records,
)
from netscore.utils import load_json, load_rows


class TestEngineConfig:
    """Tests for the packaged engine configuration."""

    def test_defaults(self):
        """Test values shipped in engine_config.json."""
        assert get_forfeit_score() == (10, 0)
        assert get_cache_ttl() == 1800
        assert get_recent_games() == 5
        assert get_max_concurrency() == 8
        assert get_rating_config().goals_weight == 0.2
        assert get_ladder_points().win == 4

    def test_config_cached(self):
        """Test config is loaded once."""
        assert get_config() is get_config()

    def test_forfeit_needs_winner(self):
        """Test a forfeit score without a winner is rejected."""
        with pytest.raises(ValueError, match='must exceed'):
            EngineConfig(forfeit_winner_goals=0, forfeit_loser_goals=0)

    def test_extra_keys_rejected(self):
        """Test unknown settings are rejected."""
        with pytest.raises(ValueError):
            EngineConfig.model_validate({'forfeit_score': 10})

    def test_rating_bounds(self):
        """Test minimum above maximum is rejected."""
        with pytest.raises(ValueError, match='exceeds maximum'):
            EngineConfig.model_validate({'rating': {'minimum': 9, 'maximum': 2}})


class TestLoadJson:
    """Tests for load_json()."""

    def test_load_with_schema(self, tmp_path):
        """Test a valid file is validated into the schema."""
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'recent_games': 3}))
        config = load_json(path, schema=EngineConfig)
        assert config.recent_games == 3

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / 'nope.json')

    def test_schema_failure(self, tmp_path):
        """Test a schema mismatch raises ValueError."""
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'recent_games': 0}))
        with pytest.raises(ValueError, match='Schema validation failed'):
            load_json(path, schema=EngineConfig)

    def test_load_rows(self, tmp_path):
        """Test a missing export file holds no rows and a list is returned as-is."""
        assert load_rows(tmp_path / 'stats.json') == []
        path = tmp_path / 'games.json'
        path.write_text(json.dumps([{'id': 1}]))
        assert load_rows(path) == [{'id': 1}]


class TestRowSchemas:
    """Tests for raw record parsing."""

    def test_camel_case_stat_row(self):
        """Test camelCase keys map to engine fields."""
        row = {'id': 3, 'gameId': 42, 'quarter': 2, 'position': 'GA', 'goalsFor': 5, 'badPass': 1}
        record = StatRecordRow.model_validate(row).to_model()
        assert record == StatRecord(id=3, game_id=42, quarter=2, position='GA', goals_for=5, bad_pass=1)

    def test_snake_case_stat_row(self):
        """Test snake_case names are accepted too."""
        record = StatRecordRow.model_validate({'id': 3, 'game_id': 42, 'pick_up': 2}).to_model()
        assert record.pick_up == 2
        assert record.quarter is None

    def test_null_counts_are_zero(self):
        """Test null counting columns become 0."""
        record = StatRecordRow.model_validate({'id': 1, 'rebounds': None}).to_model()
        assert record.rebounds == 0

    def test_blank_position_is_missing(self):
        """Test an empty position can't be keyed."""
        record = StatRecordRow.model_validate({'id': 1, 'gameId': 1, 'quarter': 1, 'position': ' '}).to_model()
        assert record.slot is None

    def test_rating_range(self):
        """Test a rating outside 0-10 is rejected."""
        with pytest.raises(ValueError):
            StatRecordRow.model_validate({'id': 1, 'rating': 11})

    def test_game_row(self):
        """Test game rows parse status and date."""
        game = GameRow.model_validate(
            {'id': 1, 'homeTeamId': 5, 'awayTeamId': 6, 'status': 'Completed', 'date': '2025-05-03'}
        ).to_model()
        assert game.status == COMPLETED
        assert game.date.isoformat() == '2025-05-03'

    def test_bye_flag(self):
        """Test the bye flag becomes the bye status."""
        game = GameRow.model_validate({'id': 1, 'homeTeamId': 5, 'isBye': True}).to_model()
        assert game.status == BYE
        assert game.is_bye

    def test_unknown_status(self):
        """Test an unknown status is rejected."""
        with pytest.raises(ValueError, match='Invalid game status'):
            GameRow.model_validate({'id': 1, 'status': 'postponed'})

    def test_official_row_negative_score(self):
        """Test negative official scores are rejected."""
        with pytest.raises(ValueError):
            OfficialScoreRow.model_validate({'gameId': 1, 'teamId': 1, 'quarter': 1, 'score': -1})

    def test_parse_records_skips_invalid(self, caplog):
        """Test invalid rows are logged and skipped, models pass through."""
        game = Game(id=9, home_team_id=1, away_team_id=2)
        rows = [game, {'id': 10, 'status': 'completed'}, {'id': 11, 'status': 'nonsense'}]
        with caplog.at_level(logging.WARNING, logger='netscore.schemas'):
            parsed = parse_records(rows, GameRow)
        assert [g.id for g in parsed] == [9, 10]
        assert 'Skipping invalid GameRow' in caplog.text

    def test_parse_roster_rows(self):
        """Test roster rows with a null player parse."""
        parsed = parse_records(
            [{'gameId': 1, 'quarter': 1, 'position': 'GS', 'playerId': None}], RosterAssignmentRow
        )
        assert parsed[0].player_id is None
        assert not parsed[0].is_on_court


class TestLogging:
    """Tests for logging setup."""

    def test_setup_console_only(self):
        """Test console-only logging adds one handler."""
        logger = setup_logging(level=logging.DEBUG, log_to_file=False)
        assert logger.name == 'netscore'
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        logger.handlers = []
        logger.setLevel(logging.NOTSET)

    def test_setup_file(self, tmp_path):
        """Test a timestamped log file is created."""
        logger = setup_logging(log_dir=tmp_path / 'logs', log_to_console=False)
        for handler in logger.handlers:
            handler.close()
        assert len(list((tmp_path / 'logs').glob('netscore_*.log'))) == 1
        logger.handlers = []
        logger.setLevel(logging.NOTSET)

    def test_component_levels(self):
        """Test one component can be made more verbose than the rest."""
        logger = setup_logging(
            log_to_file=False, component_levels={'reconciler': logging.DEBUG}
        )
        component = logging.getLogger('netscore.reconciler')
        assert component.isEnabledFor(logging.DEBUG)
        assert not logging.getLogger('netscore.dedup').isEnabledFor(logging.DEBUG)
        component.setLevel(logging.NOTSET)
        logger.handlers = []
        logger.setLevel(logging.NOTSET)

    def test_unknown_component(self):
        """Test a typo in a component name is reported."""
        with pytest.raises(ValueError, match='Unknown component'):
            setup_logging(log_to_file=False, component_levels={'reconcile': logging.DEBUG})
        logger = get_logger()
        logger.handlers = []
        logger.setLevel(logging.NOTSET)

    def test_get_logger(self):
        """Test named loggers sit under the netscore logger."""
        root = get_logger()
        assert get_logger('netscore.engine').parent is root
