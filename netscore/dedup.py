"""Statistic record deduplication."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .constants import POSITIONS, QUARTERS
from .models import StatRecord

logger = logging.getLogger('netscore.dedup')

SlotKey = tuple[Optional[int], int, str]


def _slot_order(key: SlotKey) -> tuple:
    team_id, quarter, position = key
    return (quarter, POSITIONS.index(position), team_id is not None, team_id or 0)


@dataclass(frozen=True)
class DedupResult:
    """
    Authoritative stat records for one game, keyed by (team, quarter, position).

    The team is the recording team's id, or None for records that don't
    name one. When both clubs record the same game each keeps its own
    records; pick_side() chooses the set to read.
    """
    by_slot: dict[SlotKey, StatRecord] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()

    @property
    def records(self) -> list[StatRecord]:
        """Flat list ordered by quarter, then court position, then recording team."""
        return [self.by_slot[key] for key in sorted(self.by_slot, key=_slot_order)]

    @property
    def recording_teams(self) -> set[Optional[int]]:
        return {team_id for team_id, _, _ in self.by_slot}

    def get(self, quarter: int, position: str, team_id: Optional[int] = None) -> StatRecord | None:
        return self.by_slot.get((team_id, quarter, position))

    def quarter_records(self, quarter: int) -> list[StatRecord]:
        return [r for (_, q, _), r in self.by_slot.items() if q == quarter]

    def for_team(self, team_id: Optional[int]) -> 'DedupResult':
        """Only the records entered by team_id (None: records without a team)."""
        return DedupResult(
            by_slot={key: r for key, r in self.by_slot.items() if key[0] == team_id},
            warnings=self.warnings,
        )

    def pick_side(self, *team_ids: Optional[int]) -> tuple[Optional[int], 'DedupResult']:
        """
        First of team_ids that recorded anything, with only its records.

        Returns (None, empty result) when none of them did.
        """
        recorded = self.recording_teams
        for team_id in team_ids:
            if team_id in recorded:
                return team_id, self.for_team(team_id)
        return None, DedupResult(warnings=self.warnings)


def deduplicate_stats(records: Iterable[StatRecord], game_id: int | None = None) -> DedupResult:
    """
    Collapse duplicate stat records so each (team, quarter, position) has one record.

    The record with the highest id wins. Records from different recording
    teams never replace each other. Records that can't be keyed (missing
    game, quarter or position, or a quarter/position outside the recognized
    set) are dropped and reported as warnings rather than failing the game.

    Args:
        records: Stat records for one game, all quarters and positions mixed
        game_id: Expected game (default: the first keyable record's game);
            records for other games are dropped

    Returns:
        DedupResult with the authoritative record per slot
    """
    by_slot: dict[SlotKey, StatRecord] = {}
    warnings: list[str] = []
    duplicates = 0

    for record in records:
        if record.slot is None:
            warnings.append(f'Stat record {record.id} has no game, quarter or position; dropped')
            continue
        if game_id is None:
            game_id = record.game_id
        elif record.game_id != game_id:
            warnings.append(
                f'Stat record {record.id} belongs to game {record.game_id}, not {game_id}; dropped'
            )
            continue
        if record.quarter not in QUARTERS or record.position not in POSITIONS:
            warnings.append(
                f'Stat record {record.id} has unrecognized slot '
                f'Q{record.quarter} {record.position}; dropped'
            )
            continue

        key = (record.team_id, record.quarter, record.position)
        existing = by_slot.get(key)
        if existing is not None:
            duplicates += 1
            if existing.id >= record.id:
                continue
        by_slot[key] = record

    if duplicates:
        logger.debug(f'Discarded {duplicates} superseded stat records (game {game_id})')
    for warning in warnings:
        logger.warning(warning)

    return DedupResult(by_slot=by_slot, warnings=tuple(warnings))
