"""Shared fixtures for the play tree tests."""

from typing import Iterable, Tuple

import pytest

from nfl_decision_tree.playtree import PlayCollector, PlayStore, PlayType
from nfl_decision_tree.playtree import DetailedPlaySummary, LeafNode, OverallPlaySummary

# play_type, down, distance_needed, field_location, time_remaining,
# score_differential, distance_gained, turned_over
CategorizedRow = Tuple[PlayType, int, int, int, int, int, int, bool]


def make_store(rows: Iterable[CategorizedRow]) -> PlayStore:
    collector = PlayCollector()
    for row in rows:
        collector.insert_categorized(*row)
    return collector.finalize()


def make_leaf(**counts: int) -> LeafNode:
    """Leaf with the given number of plays per play type name, no yards gained."""
    total = sum(counts.values())
    plays = {}
    for name, count in counts.items():
        play_type = PlayType[name]
        plays[play_type] = DetailedPlaySummary.create(
            play_type=play_type,
            distances=[0] * count,
            turnover_count=0,
            condition_play_count=total,
            overall=OverallPlaySummary(total_count=100),
        )
    return LeafNode(plays=dict(sorted(plays.items())))


@pytest.fixture
def separable_store() -> PlayStore:
    """100 plays: runs on first down, punts on fourth, otherwise identical."""
    rows = [(PlayType.RUN_LEFT, 0, 2, 1, 0, 3, 4, False)] * 50
    rows += [(PlayType.PUNT, 3, 2, 1, 0, 3, 40, False)] * 50
    return make_store(rows)


@pytest.fixture
def mixed_store() -> PlayStore:
    """Plays varying across every characteristic."""
    rows = []
    for i in range(60):
        play_type = PlayType(i % 3) if i % 4 else PlayType.PASS_SHORT_LEFT
        rows.append(
            (
                play_type,
                i % 4,
                (i // 4) % 5,
                (i // 3) % 3,
                (i // 7) % 2,
                (i // 2) % 7,
                i % 11 - 3,
                i % 13 == 0,
            )
        )
    return make_store(rows)
