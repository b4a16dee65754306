"""Tests for play types, categories and raw value conversion."""

import numpy as np
import pytest

from nfl_decision_tree.core import DataError
from nfl_decision_tree.playtree import PlayCharacteristic, PlayType, PlayTypeSet
from nfl_decision_tree.playtree import Down, DistanceNeeded, FieldLocation
from nfl_decision_tree.playtree import TimeRemaining, ScoreDifferential
from nfl_decision_tree.playtree import category_count, category_label
from nfl_decision_tree.playtree._types import distance_to_distance_needed
from nfl_decision_tree.playtree._types import down_to_category
from nfl_decision_tree.playtree._types import minutes_to_time_remaining
from nfl_decision_tree.playtree._types import score_to_score_differential, to_category, to_flag
from nfl_decision_tree.playtree._types import yards_to_field_location


def test_category_counts():
    assert category_count(PlayCharacteristic.DOWN_NUMBER) == 4
    assert category_count(PlayCharacteristic.DISTANCE_NEEDED) == 5
    assert category_count(PlayCharacteristic.FIELD_LOCATION) == 3
    assert category_count(PlayCharacteristic.TIME_REMAINING) == 2
    assert category_count(PlayCharacteristic.SCORE_DIFFERENTIAL) == 7
    assert len(PlayType) == 11


def test_category_labels():
    assert category_label(PlayCharacteristic.DOWN_NUMBER, 0) == "first down"
    assert category_label(PlayCharacteristic.SCORE_DIFFERENTIAL, 3) == "Tied"
    with pytest.raises(DataError):
        category_label(PlayCharacteristic.TIME_REMAINING, 2)


def test_play_type_parse():
    assert PlayType.parse("Run Up Middle") is PlayType.RUN_MIDDLE
    assert PlayType.parse("punt") is PlayType.PUNT
    assert PlayType.parse("field_goal") is PlayType.FIELD_GOAL
    assert PlayType.parse(np.int64(4)) is PlayType.PASS_SHORT_MIDDLE
    assert PlayType.PASS_DEEP_LEFT.label == "Deep Pass Left"
    with pytest.raises(DataError):
        PlayType.parse("Kneel")
    with pytest.raises(DataError):
        PlayType.parse(11)


@pytest.mark.parametrize(
    "yards, expected",
    [
        (0, DistanceNeeded.ONE_OR_LESS),
        (1, DistanceNeeded.ONE_OR_LESS),
        (4, DistanceNeeded.FOUR_TO_ONE),
        (10, DistanceNeeded.TEN_TO_FOUR),
        (19, DistanceNeeded.TWENTY_TO_TEN),
        (20, DistanceNeeded.OVER_TWENTY),
    ],
)
def test_distance_needed(yards, expected):
    assert distance_to_distance_needed(yards) is expected


def test_field_location():
    assert yards_to_field_location(90) is FieldLocation.OWN_RED_ZONE
    assert yards_to_field_location(89) is FieldLocation.MIDDLE
    assert yards_to_field_location(11) is FieldLocation.MIDDLE
    assert yards_to_field_location(10) is FieldLocation.OPP_RED_ZONE


def test_time_remaining_covers_both_halves():
    assert minutes_to_time_remaining(1) is TimeRemaining.INSIDE_TWO_MINUTES
    assert minutes_to_time_remaining(2) is TimeRemaining.OUTSIDE_TWO_MINUTES
    assert minutes_to_time_remaining(31) is TimeRemaining.INSIDE_TWO_MINUTES
    assert minutes_to_time_remaining(32) is TimeRemaining.OUTSIDE_TWO_MINUTES


@pytest.mark.parametrize(
    "own, opp, expected",
    [
        (0, 15, ScoreDifferential.DOWN_OVER_FOURTEEN),
        (0, 14, ScoreDifferential.DOWN_OVER_SEVEN),
        (0, 7, ScoreDifferential.DOWN_SEVEN_LESS),
        (7, 7, ScoreDifferential.EVEN),
        (7, 0, ScoreDifferential.UP_SEVEN_LESS),
        (14, 0, ScoreDifferential.UP_OVER_SEVEN),
        (21, 0, ScoreDifferential.UP_OVER_FOURTEEN),
    ],
)
def test_score_differential(own, opp, expected):
    assert score_to_score_differential(own, opp) is expected


def test_down_out_of_range():
    assert down_to_category(4) is Down.FOURTH
    with pytest.raises(DataError):
        down_to_category(0)
    with pytest.raises(DataError):
        down_to_category(5)


def test_play_type_set_operations():
    runs = PlayTypeSet([PlayType.RUN_LEFT, PlayType.RUN_MIDDLE])
    kicks = PlayTypeSet([PlayType.PUNT, PlayType.RUN_LEFT])

    assert list(runs | kicks) == [PlayType.RUN_LEFT, PlayType.RUN_MIDDLE, PlayType.PUNT]
    assert list(runs & kicks) == [PlayType.RUN_LEFT]
    assert list(runs - kicks) == [PlayType.RUN_MIDDLE]
    assert len(~runs) == len(PlayType) - 2
    assert len(PlayTypeSet.full()) == len(PlayType)
    assert PlayTypeSet() == PlayTypeSet.full() - PlayTypeSet.full()
    assert not PlayTypeSet()
    assert PlayType.PUNT in kicks
    assert PlayType.PUNT not in runs


def test_to_category_rejects_fractional_codes():
    assert to_category(PlayCharacteristic.DOWN_NUMBER, 2.0) is Down.THIRD
    assert to_category(PlayCharacteristic.DOWN_NUMBER, np.int64(1)) is Down.SECOND
    for value in (1.5, np.float64(0.25), float("nan"), float("inf")):
        with pytest.raises(DataError):
            to_category(PlayCharacteristic.DOWN_NUMBER, value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, True),
        (False, False),
        (np.bool_(True), True),
        (0, False),
        (1, True),
        (np.int64(1), True),
        ("False", False),
        ("TRUE", True),
        (" no ", False),
        ("1", True),
    ],
)
def test_to_flag(value, expected):
    assert to_flag(value) is expected


@pytest.mark.parametrize("value", ["maybe", "", 2, -1, 0.5, None])
def test_to_flag_rejects_other_values(value):
    with pytest.raises(DataError):
        to_flag(value)
