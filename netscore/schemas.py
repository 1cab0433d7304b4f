"""Pydantic schemas for raw collaborator records and engine configuration."""

import datetime as dt
import logging
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import BYE, GAME_STATUSES, STAT_FIELDS
from .models import Game, OfficialScore, RosterAssignment, StatRecord

logger = logging.getLogger('netscore.schemas')


class _Row(BaseModel):
    """Raw record row. Accepts camelCase keys from the web app or snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class RosterAssignmentRow(_Row):
    """Roster assignment as stored by the lineup editor."""

    id: int | None = None
    game_id: int
    quarter: int = Field(..., ge=1, le=4)
    position: str = Field(..., min_length=1)
    player_id: int | None = None
    team_id: int | None = None

    def to_model(self) -> RosterAssignment:
        return RosterAssignment(
            game_id=self.game_id,
            quarter=self.quarter,
            position=self.position,
            player_id=self.player_id,
            team_id=self.team_id,
            id=self.id,
        )


class StatRecordRow(_Row):
    """
    Position-based statistic row.

    game_id, quarter and position stay optional: a row missing them is still
    parsed so the deduplicator can drop it with a data-quality warning.
    """

    id: int
    game_id: int | None = None
    quarter: int | None = None
    position: str | None = None
    goals_for: int = Field(0, ge=0)
    goals_against: int = Field(0, ge=0)
    missed_goals: int = Field(0, ge=0)
    rebounds: int = Field(0, ge=0)
    intercepts: int = Field(0, ge=0)
    bad_pass: int = Field(0, ge=0)
    handling_error: int = Field(0, ge=0)
    pick_up: int = Field(0, ge=0)
    infringement: int = Field(0, ge=0)
    rating: int | None = Field(None, ge=0, le=10)
    team_id: int | None = None

    @field_validator(*STAT_FIELDS, mode='before')
    @classmethod
    def null_counts_are_zero(cls, v):
        """Counting columns default to 0 in storage; treat null the same way."""
        return 0 if v is None else v

    @field_validator('position', mode='before')
    @classmethod
    def blank_position_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_model(self) -> StatRecord:
        return StatRecord(**self.model_dump())


class OfficialScoreRow(_Row):
    """Official per-quarter score for one team."""

    id: int | None = None
    game_id: int
    team_id: int
    quarter: int = Field(..., ge=1)
    score: int = Field(..., ge=0)

    def to_model(self) -> OfficialScore:
        return OfficialScore(
            game_id=self.game_id,
            team_id=self.team_id,
            quarter=self.quarter,
            score=self.score,
            id=self.id,
        )


class GameRow(_Row):
    """Game metadata."""

    id: int
    home_team_id: int | None = None
    away_team_id: int | None = None
    status: str = 'upcoming'
    date: dt.date | None = None
    is_bye: bool = False

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v):
        """Ensure status is a known game status."""
        if v is None:
            return 'upcoming'
        v = str(v).strip().lower()
        if v not in GAME_STATUSES:
            raise ValueError(f'Invalid game status: {v}')
        return v

    def to_model(self) -> Game:
        return Game(
            id=self.id,
            home_team_id=self.home_team_id,
            away_team_id=self.away_team_id,
            status=BYE if self.is_bye else self.status,
            date=self.date,
        )


def parse_records(rows: Iterable[Any], schema: type[_Row]) -> list:
    """
    Convert raw rows into engine models.

    Rows that are already engine models pass through untouched. Rows that fail
    validation are logged and skipped so one corrupt row can't abort a batch.

    Args:
        rows: dicts (camelCase or snake_case) or engine model instances
        schema: Row schema to validate dicts against

    Returns:
        List of engine model instances
    """
    model_type = {
        RosterAssignmentRow: RosterAssignment,
        StatRecordRow: StatRecord,
        OfficialScoreRow: OfficialScore,
        GameRow: Game,
    }[schema]

    parsed = []
    for row in rows:
        if isinstance(row, model_type):
            parsed.append(row)
            continue
        try:
            parsed.append(schema.model_validate(row).to_model())
        except ValidationError as e:
            logger.warning(f'Skipping invalid {schema.__name__}: {e.errors()[0]["msg"]} ({row!r})')
    return parsed


class RatingConfig(BaseModel):
    """Fallback player rating formula."""

    base: float = 5.0
    goals_weight: float = 0.2
    rebounds_weight: float = 0.3
    intercepts_weight: float = 0.4
    minimum: float = 1.0
    maximum: float = 10.0

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.minimum > self.maximum:
            raise ValueError(f'Rating minimum {self.minimum} exceeds maximum {self.maximum}')
        return self

    model_config = ConfigDict(extra='forbid')


class LadderPoints(BaseModel):
    """Competition points awarded per result."""

    win: int = Field(4, ge=0)
    draw: int = Field(2, ge=0)
    loss: int = Field(0, ge=0)

    model_config = ConfigDict(extra='forbid')


class EngineConfig(BaseModel):
    """Engine configuration settings."""

    forfeit_winner_goals: int = Field(10, ge=0)
    forfeit_loser_goals: int = Field(0, ge=0)
    cache_ttl_seconds: int = Field(1800, ge=0)
    recent_games: int = Field(5, ge=1, le=50)
    max_concurrency: int = Field(8, ge=1, le=64)
    rating: RatingConfig = Field(default_factory=RatingConfig)
    ladder_points: LadderPoints = Field(default_factory=LadderPoints)

    @model_validator(mode='after')
    def validate_forfeit_score(self):
        """A forfeit must have a winner."""
        if self.forfeit_winner_goals <= self.forfeit_loser_goals:
            raise ValueError(
                f'Forfeit winner goals ({self.forfeit_winner_goals}) must exceed '
                f'loser goals ({self.forfeit_loser_goals})'
            )
        return self

    model_config = ConfigDict(extra='forbid')
