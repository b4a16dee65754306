from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict

from ._types import PlayType, PlayCharacteristic
from ._types import Down, DistanceNeeded, FieldLocation, TimeRemaining
from ._types import ScoreDifferential, down_to_category, distance_to_distance_needed
from ._types import yards_to_field_location, minutes_to_time_remaining
from ._types import score_to_score_differential


@dataclass(frozen=True, slots=True)
class SinglePlay:
    """A single NFL play, with every situation characteristic already categorized."""

    ref_id: int = field(
        metadata={
            "description": "Unique reference id, the play's position in the store."
        }
    )
    play_type: PlayType = field(metadata={"description": "The play called."})
    down: Down = field(metadata={"description": "The down the play was run on."})
    distance_needed: DistanceNeeded = field(
        metadata={"description": "Yards needed for a first down, categorized."}
    )
    field_location: FieldLocation = field(
        metadata={"description": "Location of the ball on the field."}
    )
    time_remaining: TimeRemaining = field(
        metadata={"description": "Whether the play is inside a two minute warning."}
    )
    score_differential: ScoreDifferential = field(
        metadata={"description": "Offense score relative to the defense."}
    )
    distance_gained: int = field(
        default=0, metadata={"description": "Yards gained on the play."}
    )
    turned_over: bool = field(
        default=False,
        metadata={"description": "Whether the offense lost the ball on the play."},
    )

    @classmethod
    def from_raw(
        cls,
        ref_id: int,
        play_type: PlayType,
        down: int,
        distance_needed: int,
        yard_line: int,
        minutes: int,
        own_score: int,
        opp_score: int,
        distance_gained: int,
        turned_over: bool,
    ) -> SinglePlay:
        """Build a play from raw game values, converting them to categories."""
        return cls(
            ref_id=ref_id,
            play_type=PlayType.parse(play_type),
            down=down_to_category(down),
            distance_needed=distance_to_distance_needed(distance_needed),
            field_location=yards_to_field_location(yard_line),
            time_remaining=minutes_to_time_remaining(minutes),
            score_differential=score_to_score_differential(own_score, opp_score),
            distance_gained=int(distance_gained),
            turned_over=bool(turned_over),
        )

    def value(self, characteristic: PlayCharacteristic) -> int:
        """Integer category code of the play for a characteristic."""
        if characteristic == PlayCharacteristic.DOWN_NUMBER:
            return int(self.down)
        elif characteristic == PlayCharacteristic.DISTANCE_NEEDED:
            return int(self.distance_needed)
        elif characteristic == PlayCharacteristic.FIELD_LOCATION:
            return int(self.field_location)
        elif characteristic == PlayCharacteristic.TIME_REMAINING:
            return int(self.time_remaining)
        elif characteristic == PlayCharacteristic.SCORE_DIFFERENTIAL:
            return int(self.score_differential)
        raise ValueError(f"Unknown play characteristic: {characteristic!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the play to a dictionary of plain integers and booleans."""
        d = asdict(self)
        for key, val in d.items():
            if not isinstance(val, bool):
                d[key] = int(val)
        return d

    def __str__(self) -> str:
        characteristics = " ".join(
            f"{c.column}:{self.value(c)}" for c in PlayCharacteristic
        )
        return (
            f"RefId:{self.ref_id} Play:{self.play_type.label} {characteristics} "
            f"Distance Gained:{self.distance_gained} Turned Over:{int(self.turned_over)}"
        )
