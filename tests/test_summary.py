"""Tests for play summaries and the summary factory."""

import pytest

from nfl_decision_tree.playtree import DetailedPlaySummary, OverallPlaySummary
from nfl_decision_tree.playtree import PlaySummaryFactory, PlayType

from conftest import make_leaf, make_store


def _detailed(play_type, distances, turnovers=0, condition_total=None, overall_total=10):
    return DetailedPlaySummary.create(
        play_type=play_type,
        distances=distances,
        turnover_count=turnovers,
        condition_play_count=condition_total or len(distances),
        overall=OverallPlaySummary(total_count=overall_total),
    )


def test_overall_summary_from_samples():
    summary = OverallPlaySummary.from_samples([1, 2, 3, 4], turnover_count=1)
    assert summary.total_count == 4
    assert summary.average_distance == pytest.approx(2.5)
    assert summary.distance_variance == pytest.approx(1.25)
    assert summary.turnover_rate == 250


def test_overall_summary_empty():
    summary = OverallPlaySummary.from_samples([], turnover_count=0)
    assert summary == OverallPlaySummary()


def test_detailed_summary_shares():
    summary = _detailed(PlayType.RUN_LEFT, [5, -1, 2], turnovers=1, condition_total=4)
    assert summary.play_count == 3
    assert summary.condition_share == 750
    assert summary.type_share == 300
    assert summary.turnover_rate == 333
    assert summary.distances.tolist() == [-1, 2, 5]
    assert str(summary).startswith("pct of category:750 pct of all type plays:300")


def test_merge_rejects_other_play_type():
    runs = _detailed(PlayType.RUN_LEFT, [1])
    punts = _detailed(PlayType.PUNT, [40])
    with pytest.raises(ValueError):
        runs.merge(punts, 2)


def test_merge_data():
    result = {PlayType.RUN_LEFT: _detailed(PlayType.RUN_LEFT, [2, 4])}
    other = {
        PlayType.RUN_LEFT: _detailed(PlayType.RUN_LEFT, [6], condition_total=2),
        PlayType.PUNT: _detailed(PlayType.PUNT, [40], condition_total=2),
    }
    PlaySummaryFactory.merge_data(result, other)

    assert list(result) == [PlayType.RUN_LEFT, PlayType.PUNT]
    runs = result[PlayType.RUN_LEFT]
    assert runs.play_count == 3
    assert runs.average_distance == pytest.approx(4.0)
    assert runs.condition_share == 750
    assert runs.type_share == 300
    assert result[PlayType.PUNT].condition_share == 250

    # other is never modified
    assert other[PlayType.RUN_LEFT].play_count == 1
    assert other[PlayType.RUN_LEFT].condition_share == 500
    assert result[PlayType.PUNT] is not other[PlayType.PUNT]


def test_merge_data_rescales_types_only_in_result():
    result = {PlayType.PUNT: _detailed(PlayType.PUNT, [40, 45])}
    other = {PlayType.FIELD_GOAL: _detailed(PlayType.FIELD_GOAL, [0, 0])}
    PlaySummaryFactory.merge_data(result, other)
    assert result[PlayType.PUNT].condition_share == 500
    assert result[PlayType.FIELD_GOAL].condition_share == 500


def _as_tuple(data):
    return {
        play_type: (
            s.play_count,
            s.condition_share,
            s.type_share,
            s.turnover_count,
            s.distances.tolist(),
        )
        for play_type, s in data.items()
    }


def test_merge_data_is_associative():
    def parts():
        a = {PlayType.RUN_LEFT: _detailed(PlayType.RUN_LEFT, [1, 2], turnovers=1)}
        b = {
            PlayType.RUN_LEFT: _detailed(PlayType.RUN_LEFT, [3], condition_total=2),
            PlayType.PUNT: _detailed(PlayType.PUNT, [50], condition_total=2),
        }
        c = {PlayType.PASS_DEEP_LEFT: _detailed(PlayType.PASS_DEEP_LEFT, [30, 0, 12])}
        return a, b, c

    a, b, c = parts()
    PlaySummaryFactory.merge_data(a, b)
    PlaySummaryFactory.merge_data(a, c)
    left = a

    a, b, c = parts()
    PlaySummaryFactory.merge_data(b, c)
    PlaySummaryFactory.merge_data(a, b)
    right = a

    assert _as_tuple(left) == _as_tuple(right)


def test_build_summary_data_covers_every_play_type():
    store = make_store(
        [
            (PlayType.RUN_LEFT, 0, 0, 0, 0, 0, 3, False),
            (PlayType.RUN_LEFT, 1, 0, 0, 0, 0, -2, True),
            (PlayType.PUNT, 3, 0, 0, 0, 0, 40, False),
        ]
    )
    data = store.summary_data
    assert set(data) == set(PlayType)
    assert data[PlayType.RUN_LEFT].total_count == 2
    assert data[PlayType.RUN_LEFT].average_distance == pytest.approx(0.5)
    assert data[PlayType.RUN_LEFT].turnover_rate == 500
    assert data[PlayType.FIELD_GOAL].total_count == 0


def test_build_detailed_data_only_present_types():
    store = make_store(
        [
            (PlayType.RUN_LEFT, 0, 0, 0, 0, 0, 3, False),
            (PlayType.RUN_LEFT, 1, 0, 0, 0, 0, -2, True),
            (PlayType.PUNT, 3, 0, 0, 0, 0, 40, False),
        ]
    )
    detailed = PlaySummaryFactory.build_detailed_data(
        store.get_indexes(), store.summary_data
    )
    assert list(detailed) == [PlayType.RUN_LEFT, PlayType.PUNT]
    assert detailed[PlayType.RUN_LEFT].condition_share == 666
    assert detailed[PlayType.RUN_LEFT].type_share == 1000
    assert detailed[PlayType.PUNT].condition_share == 333


def test_summary_dict_round_trip_keeps_shares():
    summary = _detailed(PlayType.PUNT, [35, 41], condition_total=5)
    restored = DetailedPlaySummary.from_dict(summary.to_dict())
    assert restored.condition_share == summary.condition_share
    assert restored.type_share == summary.type_share
    assert restored.distances.tolist() == [35, 41]


def test_detailed_summary_equality():
    summary = _detailed(PlayType.RUN_LEFT, [3, 1, 2])
    assert summary == _detailed(PlayType.RUN_LEFT, [1, 2, 3])
    assert summary == summary.copy()
    assert summary != _detailed(PlayType.RUN_LEFT, [1, 2, 4])
    assert summary != _detailed(PlayType.RUN_LEFT, [1, 2])
    assert summary != _detailed(PlayType.PUNT, [1, 2, 3])

    shifted = summary.copy()
    shifted.update_condition_stats(6)
    assert summary != shifted


def test_leaf_equality():
    assert make_leaf(RUN_LEFT=3, PUNT=1) == make_leaf(RUN_LEFT=3, PUNT=1)
    assert make_leaf(RUN_LEFT=3) != make_leaf(RUN_LEFT=2)
