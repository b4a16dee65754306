"""Storage for the plays a tree is built from.

Plays go through two distinct phases with no overlap: they are inserted into a
``PlayCollector``, then ``finalize`` turns the collector into a ``PlayStore``,
building the indexes and the overall play statistics. The store is read-only;
the only way to get one is to finalize a collector.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Sequence, overload

import numpy as np
import numpy.typing as npt
import pandas as pd

from nfl_decision_tree.core._exceptions import DataError
from ._index import PlayIndexSet
from ._play import SinglePlay
from ._summary import OverallSummaryData, PlaySummaryFactory
from ._types import PlayCharacteristic, PlayType, to_category, to_flag


logger = logging.getLogger(__name__)

_FINALIZE_KEY = object()


def _frozen(values: Sequence[int] | Sequence[bool], dtype: npt.DTypeLike) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    arr.flags.writeable = False
    return arr


class PlayStore:
    """Finalized, read-only store of plays.

    Plays are kept in a single arena, with one column array per attribute so
    index sets can divide plays by handle. Obtain one through
    ``PlayCollector.finalize``; constructing one directly raises ``TypeError``.
    """

    def __init__(self, plays: Sequence[SinglePlay], *, _key: object = None):
        if _key is not _FINALIZE_KEY:
            raise TypeError("PlayStore is created by PlayCollector.finalize()")
        self._plays: tuple[SinglePlay, ...] = tuple(plays)
        for position, play in enumerate(self._plays):
            if play.ref_id != position:
                raise DataError(
                    f"Play ref_id {play.ref_id} does not match its position {position}"
                )

        self._play_types = _frozen([p.play_type for p in self._plays], np.int8)
        self._distances_gained = _frozen(
            [p.distance_gained for p in self._plays], np.int64
        )
        self._turnovers = _frozen([p.turned_over for p in self._plays], np.bool_)
        self._columns: Dict[PlayCharacteristic, np.ndarray] = {
            c: _frozen([p.value(c) for p in self._plays], np.int8)
            for c in PlayCharacteristic
        }

        self._indexes = PlayIndexSet.from_store(self)
        self._summary_data = PlaySummaryFactory.build_summary_data(self._indexes)

    @classmethod
    def _from_plays(cls, plays: Sequence[SinglePlay]) -> PlayStore:
        """Store of plays in insertion order, each ``ref_id`` being its position."""
        return cls(plays, _key=_FINALIZE_KEY)

    @property
    def plays(self) -> tuple[SinglePlay, ...]:
        return self._plays

    @property
    def play_types(self) -> npt.NDArray[np.int8]:
        """Play type codes, by play handle."""
        return self._play_types

    @property
    def distances_gained(self) -> npt.NDArray[np.int64]:
        return self._distances_gained

    @property
    def turnovers(self) -> npt.NDArray[np.bool_]:
        return self._turnovers

    def column(self, characteristic: PlayCharacteristic) -> npt.NDArray[np.int8]:
        """Category codes of a characteristic, by play handle."""
        return self._columns[characteristic]

    def get_indexes(self) -> PlayIndexSet:
        """A copy of the store's indexes, free to be split as plays are divided up."""
        return self._indexes.copy()

    @property
    def summary_data(self) -> OverallSummaryData:
        """Overall statistics for every play type in the store."""
        return dict(self._summary_data)

    def __len__(self) -> int:
        return len(self._plays)

    def __iter__(self) -> Iterator[SinglePlay]:
        return iter(self._plays)

    @overload
    def __getitem__(self, key: int) -> SinglePlay: ...

    @overload
    def __getitem__(self, key: slice) -> tuple[SinglePlay, ...]: ...

    def __getitem__(self, key: int | slice) -> SinglePlay | tuple[SinglePlay, ...]:
        return self._plays[key]

    def to_frame(self) -> pd.DataFrame:
        """Categorized plays as a data frame, one row per play."""
        return pd.DataFrame(
            {
                "ref_id": np.arange(len(self._plays), dtype=np.int64),
                "play_type": [PlayType(int(t)).name for t in self._play_types],
                **{c.column: self._columns[c].astype(np.int64) for c in PlayCharacteristic},
                "distance_gained": self._distances_gained,
                "turned_over": self._turnovers,
            }
        )

    def __repr__(self) -> str:
        return f"PlayStore(plays={len(self._plays)})"


class PlayCollector:
    """Collects plays before a store is finalized.

    Plays inserted after ``finalize`` are ignored; they never reach the
    finalized store.
    """

    def __init__(self) -> None:
        self._plays: List[SinglePlay] = []
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def __len__(self) -> int:
        return len(self._plays)

    def insert_play(
        self,
        play_type: PlayType | str | int,
        down: int,
        distance_needed: int,
        yard_line: int,
        minutes: int,
        own_score: int,
        opp_score: int,
        distance_gained: int,
        turned_over: bool | str | int,
    ) -> SinglePlay | None:
        """Insert a play from raw game values.

        Args:
            play_type: The play called.
            down: The down, 1 to 4.
            distance_needed: Yards needed for a first down.
            yard_line: Yards the offense needs for a touchdown.
            minutes: Minutes remaining in the game.
            own_score: Offense score before the play.
            opp_score: Defense score before the play.
            distance_gained: Yards gained on the play.
            turned_over: Whether the offense lost the ball. A bool, 0 or 1, or a
                true/false string.

        Returns:
            The inserted play, or None if the collector is already finalized.
        """
        if self._reject_if_finalized():
            return None
        play = SinglePlay.from_raw(
            ref_id=len(self._plays),
            play_type=PlayType.parse(play_type),
            down=int(down),
            distance_needed=int(distance_needed),
            yard_line=int(yard_line),
            minutes=int(minutes),
            own_score=int(own_score),
            opp_score=int(opp_score),
            distance_gained=int(distance_gained),
            turned_over=to_flag(turned_over),
        )
        self._plays.append(play)
        return play

    def insert_categorized(
        self,
        play_type: PlayType | str | int,
        down: int,
        distance_needed: int,
        field_location: int,
        time_remaining: int,
        score_differential: int,
        distance_gained: int = 0,
        turned_over: bool | str | int = False,
    ) -> SinglePlay | None:
        """Insert a play whose characteristics are already category codes."""
        if self._reject_if_finalized():
            return None
        play = SinglePlay(
            ref_id=len(self._plays),
            play_type=PlayType.parse(play_type),
            down=to_category(PlayCharacteristic.DOWN_NUMBER, down),  # type: ignore
            distance_needed=to_category(PlayCharacteristic.DISTANCE_NEEDED, distance_needed),  # type: ignore
            field_location=to_category(PlayCharacteristic.FIELD_LOCATION, field_location),  # type: ignore
            time_remaining=to_category(PlayCharacteristic.TIME_REMAINING, time_remaining),  # type: ignore
            score_differential=to_category(
                PlayCharacteristic.SCORE_DIFFERENTIAL, score_differential
            ),  # type: ignore
            distance_gained=int(distance_gained),
            turned_over=to_flag(turned_over),
        )
        self._plays.append(play)
        return play

    def finalize(self) -> PlayStore:
        """Build the indexes and overall statistics. Ends the insert phase.

        Raises:
            ValueError: If the collector was already finalized.
            DataError: If no plays were inserted.
        """
        if self._finalized:
            raise ValueError("Play collector already finalized")
        if not self._plays:
            raise DataError("No plays inserted, nothing to finalize")

        store = PlayStore._from_plays(self._plays)
        self._finalized = True
        logger.info(f"Finalized play store with {len(store)} plays")
        return store

    def _reject_if_finalized(self) -> bool:
        if self._finalized:
            logger.warning("Play collector already finalized, ignoring inserted play")
            return True
        return False
