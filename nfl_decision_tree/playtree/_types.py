from __future__ import annotations

from enum import IntEnum
from numbers import Integral, Real
from typing import Dict, Type

import numpy as np

from nfl_decision_tree.core._exceptions import DataError


class PlayType(IntEnum):
    """Play types derived from those listed in the play-by-play data."""

    RUN_LEFT = 0
    RUN_MIDDLE = 1
    RUN_RIGHT = 2
    PASS_SHORT_RIGHT = 3
    PASS_SHORT_MIDDLE = 4
    PASS_SHORT_LEFT = 5
    PASS_DEEP_RIGHT = 6
    PASS_DEEP_MIDDLE = 7
    PASS_DEEP_LEFT = 8
    FIELD_GOAL = 9
    PUNT = 10

    @property
    def label(self) -> str:
        return _PLAY_TYPE_LABELS[self]

    @classmethod
    def parse(cls, value: object) -> PlayType:
        """Resolve a play type from its code, enum name or label."""
        if isinstance(value, PlayType):
            return value
        if isinstance(value, Integral) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError as e:
                raise DataError(f"Unknown play type code: {value}") from e
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            if text.upper() in cls.__members__:
                return cls[text.upper()]
            for play_type, label in _PLAY_TYPE_LABELS.items():
                if label.lower() == text.lower():
                    return play_type
        raise DataError(f"Unknown play type: {value!r}")


_PLAY_TYPE_LABELS: Dict[PlayType, str] = {
    PlayType.RUN_LEFT: "Run Left",
    PlayType.RUN_MIDDLE: "Run Up Middle",
    PlayType.RUN_RIGHT: "Run Right",
    PlayType.PASS_SHORT_RIGHT: "Short Pass Right",
    PlayType.PASS_SHORT_MIDDLE: "Short Pass Middle",
    PlayType.PASS_SHORT_LEFT: "Short Pass Left",
    PlayType.PASS_DEEP_RIGHT: "Deep Pass Right",
    PlayType.PASS_DEEP_MIDDLE: "Deep Pass Middle",
    PlayType.PASS_DEEP_LEFT: "Deep Pass Left",
    PlayType.FIELD_GOAL: "Field Goal Attempt",
    PlayType.PUNT: "Punt",
}


class PlayCharacteristic(IntEnum):
    """Situation characteristics shown to affect play selection."""

    DOWN_NUMBER = 0
    DISTANCE_NEEDED = 1
    FIELD_LOCATION = 2
    TIME_REMAINING = 3
    SCORE_DIFFERENTIAL = 4

    @property
    def column(self) -> str:
        """Column name used for this characteristic in data frames."""
        return _CHARACTERISTIC_COLUMNS[self]


class Down(IntEnum):
    FIRST = 0
    SECOND = 1
    THIRD = 2
    FOURTH = 3


class DistanceNeeded(IntEnum):
    """Yards needed for a first down, grouped to keep outliers from driving splits."""

    OVER_TWENTY = 0
    TWENTY_TO_TEN = 1
    TEN_TO_FOUR = 2
    FOUR_TO_ONE = 3
    ONE_OR_LESS = 4


class FieldLocation(IntEnum):
    """Location of the ball. A red zone here is the 10 yards nearest a goal line."""

    OWN_RED_ZONE = 0
    MIDDLE = 1
    OPP_RED_ZONE = 2


class TimeRemaining(IntEnum):
    OUTSIDE_TWO_MINUTES = 0
    INSIDE_TWO_MINUTES = 1


class ScoreDifferential(IntEnum):
    DOWN_OVER_FOURTEEN = 0
    DOWN_OVER_SEVEN = 1
    DOWN_SEVEN_LESS = 2
    EVEN = 3
    UP_SEVEN_LESS = 4
    UP_OVER_SEVEN = 5
    UP_OVER_FOURTEEN = 6


CATEGORY_ENUMS: Dict[PlayCharacteristic, Type[IntEnum]] = {
    PlayCharacteristic.DOWN_NUMBER: Down,
    PlayCharacteristic.DISTANCE_NEEDED: DistanceNeeded,
    PlayCharacteristic.FIELD_LOCATION: FieldLocation,
    PlayCharacteristic.TIME_REMAINING: TimeRemaining,
    PlayCharacteristic.SCORE_DIFFERENTIAL: ScoreDifferential,
}

_CHARACTERISTIC_COLUMNS: Dict[PlayCharacteristic, str] = {
    PlayCharacteristic.DOWN_NUMBER: "down",
    PlayCharacteristic.DISTANCE_NEEDED: "distance_needed",
    PlayCharacteristic.FIELD_LOCATION: "field_location",
    PlayCharacteristic.TIME_REMAINING: "time_remaining",
    PlayCharacteristic.SCORE_DIFFERENTIAL: "score_differential",
}

_CATEGORY_LABELS: Dict[Type[IntEnum], Dict[int, str]] = {
    Down: {
        Down.FIRST: "first down",
        Down.SECOND: "second down",
        Down.THIRD: "third down",
        Down.FOURTH: "fourth down",
    },
    DistanceNeeded: {
        DistanceNeeded.OVER_TWENTY: "over twenty yards",
        DistanceNeeded.TWENTY_TO_TEN: "ten to twenty yards",
        DistanceNeeded.TEN_TO_FOUR: "four to ten yards",
        DistanceNeeded.FOUR_TO_ONE: "one to four yards",
        DistanceNeeded.ONE_OR_LESS: "less than one yard",
    },
    FieldLocation: {
        FieldLocation.OWN_RED_ZONE: "backed up, own red zone",
        FieldLocation.MIDDLE: "between red zones",
        FieldLocation.OPP_RED_ZONE: "scoring range, opponent red zone",
    },
    TimeRemaining: {
        TimeRemaining.OUTSIDE_TWO_MINUTES: "Outside two minute warning",
        TimeRemaining.INSIDE_TWO_MINUTES: "Inside two minute warning",
    },
    ScoreDifferential: {
        ScoreDifferential.DOWN_OVER_FOURTEEN: "Down over 14 points",
        ScoreDifferential.DOWN_OVER_SEVEN: "Down between 7 and 14 points",
        ScoreDifferential.DOWN_SEVEN_LESS: "Down 7 or less points",
        ScoreDifferential.EVEN: "Tied",
        ScoreDifferential.UP_SEVEN_LESS: "Up 7 or less points",
        ScoreDifferential.UP_OVER_SEVEN: "Up between 7 and 14 points",
        ScoreDifferential.UP_OVER_FOURTEEN: "Up over 14 points",
    },
}


def category_count(characteristic: PlayCharacteristic) -> int:
    """Number of categories a characteristic can take."""
    return len(CATEGORY_ENUMS[characteristic])


def to_category(characteristic: PlayCharacteristic, value: int) -> IntEnum:
    """Convert an integer code to the characteristic's category enum."""
    enum_cls = CATEGORY_ENUMS[characteristic]
    if isinstance(value, Real) and not isinstance(value, Integral):
        if not float(value).is_integer():
            raise DataError(
                f"Invalid {characteristic.column} category code: {value}"
            )
    try:
        return enum_cls(int(value))
    except ValueError as e:
        raise DataError(
            f"Invalid {characteristic.column} category code: {value}"
        ) from e


def category_label(characteristic: PlayCharacteristic, value: int) -> str:
    """Human-readable label of a category value."""
    category = to_category(characteristic, value)
    return _CATEGORY_LABELS[type(category)][category]


def down_to_category(down: int) -> Down:
    if down < 1 or down > 4:
        raise DataError(f"Down must be between 1 and 4, got {down}")
    return Down(down - 1)


def distance_to_distance_needed(distance_needed: int) -> DistanceNeeded:
    """Convert yards needed for a first down into a distance category."""
    if distance_needed <= 1:
        return DistanceNeeded.ONE_OR_LESS
    elif distance_needed <= 4:
        return DistanceNeeded.FOUR_TO_ONE
    elif distance_needed <= 10:
        return DistanceNeeded.TEN_TO_FOUR
    elif distance_needed < 20:
        return DistanceNeeded.TWENTY_TO_TEN
    return DistanceNeeded.OVER_TWENTY


def yards_to_field_location(yard_line: int) -> FieldLocation:
    """Convert the offense's yards to go for a touchdown into a field location."""
    if yard_line >= 90:
        return FieldLocation.OWN_RED_ZONE
    elif yard_line > 10:
        return FieldLocation.MIDDLE
    return FieldLocation.OPP_RED_ZONE


def minutes_to_time_remaining(minutes: int) -> TimeRemaining:
    """Convert minutes left in the game into a time remaining category.

    The two minute warning applies to both halves, so the last two minutes
    of the second quarter (30 to 32 minutes left in the game) count too.
    """
    if minutes < 2 or 30 <= minutes < 32:
        return TimeRemaining.INSIDE_TWO_MINUTES
    return TimeRemaining.OUTSIDE_TWO_MINUTES


def score_to_score_differential(own_score: int, opp_score: int) -> ScoreDifferential:
    score_diff = own_score - opp_score
    if score_diff < -14:
        return ScoreDifferential.DOWN_OVER_FOURTEEN
    elif score_diff < -7:
        return ScoreDifferential.DOWN_OVER_SEVEN
    elif score_diff < 0:
        return ScoreDifferential.DOWN_SEVEN_LESS
    elif score_diff == 0:
        return ScoreDifferential.EVEN
    elif score_diff <= 7:
        return ScoreDifferential.UP_SEVEN_LESS
    elif score_diff <= 14:
        return ScoreDifferential.UP_OVER_SEVEN
    return ScoreDifferential.UP_OVER_FOURTEEN


_TRUE_FLAGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_FLAGS = frozenset({"false", "f", "no", "n", "0"})


def to_flag(value: object) -> bool:
    """Read a yes/no value such as a turnover flag.

    Accepts booleans, the integers 0 and 1, and ``true``/``false`` style
    strings in any case.
    """
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, Integral) and int(value) in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_FLAGS:
            return True
        if text in _FALSE_FLAGS:
            return False
    raise DataError(f"Not a true/false value: {value!r}")
