"""Unit tests for stat record deduplication."""

import random

import pytest

from netscore.constants import POSITIONS, QUARTERS
from netscore.dedup import deduplicate_stats
from netscore.models import StatRecord


def random_records(rng, game_id=42, count=60):
    """Random records with plenty of slot collisions and shuffled ids."""
    ids = rng.sample(range(1, 10_000), count)
    return [
        StatRecord(
            id=record_id,
            game_id=game_id,
            quarter=rng.choice(QUARTERS),
            position=rng.choice(POSITIONS),
            goals_for=rng.randint(0, 10),
            goals_against=rng.randint(0, 10),
        )
        for record_id in ids
    ]


class TestDeduplication:
    """Tests for the highest-id-wins rule."""

    def test_duplicate_position_keeps_highest_id(self, make_stat):
        """Test game 42 Q1 GS records id 5 and id 9: id 9 wins."""
        records = [
            make_stat(42, 1, 'GS', record_id=5, goals_for=4),
            make_stat(42, 1, 'GS', record_id=9, goals_for=6),
        ]
        result = deduplicate_stats(records)
        assert result.get(1, 'GS').id == 9
        assert result.get(1, 'GS').goals_for == 6
        assert len(result.records) == 1

    def test_input_order_does_not_matter(self, make_stat):
        """Test the higher id wins even when it comes first."""
        records = [
            make_stat(42, 1, 'GS', record_id=9, goals_for=6),
            make_stat(42, 1, 'GS', record_id=5, goals_for=4),
        ]
        assert deduplicate_stats(records).get(1, 'GS').id == 9

    def test_distinct_slots_kept(self, make_stat):
        """Test records in different slots are all retained."""
        records = [make_stat(42, q, pos) for q in QUARTERS for pos in POSITIONS]
        result = deduplicate_stats(records)
        assert len(result.records) == 28
        assert result.warnings == ()

    def test_records_ordered_by_quarter_then_position(self, make_stat):
        """Test the flat list is in quarter then court order."""
        records = [make_stat(42, 2, 'GK'), make_stat(42, 1, 'GK'), make_stat(42, 1, 'GS')]
        ordered = [(r.quarter, r.position) for r in deduplicate_stats(records).records]
        assert ordered == [(1, 'GS'), (1, 'GK'), (2, 'GK')]

    def test_empty_input(self):
        """Test no records gives an empty result."""
        result = deduplicate_stats([])
        assert result.records == []
        assert result.warnings == ()

    def test_recording_team_is_part_of_the_key(self, make_stat):
        """Test each club keeps its own Q1 GS record; duplicates within a club still collapse."""
        records = [
            make_stat(42, 1, 'GS', record_id=1, goals_for=4, team_id=2),
            make_stat(42, 1, 'GS', record_id=3, goals_for=5, team_id=1),
            make_stat(42, 1, 'GS', record_id=7, goals_for=6, team_id=1),
        ]
        result = deduplicate_stats(records)
        assert [r.id for r in result.records] == [7, 1]
        assert result.get(1, 'GS') is None
        assert result.get(1, 'GS', team_id=1).goals_for == 6


class TestPickSide:
    """Tests for choosing one recording team's records."""

    def test_first_team_that_recorded(self, make_stat):
        """Test the first listed team with records is chosen."""
        result = deduplicate_stats([
            make_stat(42, 1, 'GS', team_id=2),
            make_stat(42, 2, 'GS'),
        ])
        team_id, side = result.pick_side(1, None, 2)
        assert team_id is None
        assert [r.quarter for r in side.records] == [2]

    def test_nobody_recorded(self, make_stat):
        """Test no matching team gives an empty side."""
        team_id, side = deduplicate_stats([make_stat(42, 1, 'GS', team_id=9)]).pick_side(1, 2)
        assert team_id is None
        assert side.by_slot == {}


class TestMalformedRecords:
    """Tests for records that can't be keyed."""

    @pytest.mark.parametrize(
        'quarter, position',
        [(None, 'GS'), (1, None), (1, '')],
    )
    def test_unkeyable_record_dropped(self, make_stat, quarter, position):
        """Test records missing quarter or position are dropped with a warning."""
        records = [make_stat(42, 1, 'GA', goals_for=3), make_stat(42, quarter, position, goals_for=50)]
        result = deduplicate_stats(records)
        assert len(result.records) == 1
        assert len(result.warnings) == 1
        assert 'dropped' in result.warnings[0]

    def test_missing_game_id_dropped(self):
        """Test a record with no game id is dropped."""
        result = deduplicate_stats([StatRecord(id=1, game_id=None, quarter=1, position='GS')])
        assert result.records == []
        assert len(result.warnings) == 1

    def test_unrecognized_slot_dropped(self, make_stat):
        """Test quarter 5 or an unknown position is dropped."""
        records = [make_stat(42, 5, 'GS'), make_stat(42, 1, 'XX'), make_stat(42, 1, 'GS')]
        result = deduplicate_stats(records)
        assert len(result.records) == 1
        assert len(result.warnings) == 2

    def test_other_game_dropped(self, make_stat):
        """Test records for a different game are dropped."""
        records = [make_stat(42, 1, 'GS'), make_stat(43, 1, 'GA')]
        result = deduplicate_stats(records, game_id=42)
        assert [r.game_id for r in result.records] == [42]
        assert 'belongs to game 43' in result.warnings[0]


class TestDeduplicationProperties:
    """Property checks over seeded random record sets."""

    @pytest.mark.parametrize('seed', range(20))
    def test_idempotent(self, seed):
        """Test deduplicating the output again yields the same output."""
        once = deduplicate_stats(random_records(random.Random(seed)))
        twice = deduplicate_stats(once.records)
        assert twice.by_slot == once.by_slot

    @pytest.mark.parametrize('seed', range(20))
    def test_at_most_one_record_per_slot(self, seed):
        """Test each kept record is the highest id for its slot."""
        records = random_records(random.Random(seed))
        result = deduplicate_stats(records)
        for (_, quarter, position), kept in result.by_slot.items():
            candidates = [r.id for r in records if (r.quarter, r.position) == (quarter, position)]
            assert kept.id == max(candidates)
        assert len(result.records) == len({(r.quarter, r.position) for r in records})
