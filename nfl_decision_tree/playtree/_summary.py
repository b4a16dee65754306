"""Statistics about groups of plays.

Two kinds exist. The overall summary describes every play of a type in the
store and is the baseline. The detailed summary describes the plays of a type
that meet a set of conditions, relative to that baseline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict

import numpy as np
import numpy.typing as npt

from ._index import PlayIndexSet
from ._types import PlayType


logger = logging.getLogger(__name__)

DistanceArray = npt.NDArray[np.int64]


def _per_mille(part: int, whole: int) -> int:
    """Integer share in tenths of a percent."""
    if whole <= 0:
        return 0
    return (part * 1000) // whole


@dataclass(frozen=True, slots=True)
class OverallPlaySummary:
    """Summary statistics for a group of plays."""

    total_count: int = field(default=0, metadata={"description": "Number of plays."})
    average_distance: float = field(
        default=0.0, metadata={"description": "Mean distance gained."}
    )
    distance_variance: float = field(
        default=0.0, metadata={"description": "Population variance of distance gained."}
    )
    turnover_rate: int = field(
        default=0, metadata={"description": "Turnovers per thousand plays."}
    )

    @classmethod
    def from_samples(cls, distances: npt.ArrayLike, turnover_count: int) -> OverallPlaySummary:
        samples = np.asarray(distances, dtype=np.int64)
        total = int(samples.shape[0])
        if total == 0:
            return cls()
        return cls(
            total_count=total,
            average_distance=float(samples.mean()),
            distance_variance=float(samples.var()),
            turnover_rate=_per_mille(turnover_count, total),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "average_distance": self.average_distance,
            "distance_variance": self.distance_variance,
            "turnover_rate": self.turnover_rate,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> OverallPlaySummary:
        return cls(**d)


OverallSummaryData = Dict[PlayType, OverallPlaySummary]
"""Overall summaries for every play type, including those with no plays."""


@dataclass(slots=True, eq=False)
class DetailedPlaySummary:
    """Detailed statistics about the plays of one type under a set of conditions."""

    play_type: PlayType = field(metadata={"description": "The type of the plays."})
    distances: DistanceArray = field(
        metadata={"description": "Sorted distances gained on every play."}
    )
    turnover_count: int = field(
        metadata={"description": "Number of these plays turned over."}
    )
    overall: OverallPlaySummary = field(
        metadata={"description": "Statistics for all plays of this type."}
    )
    group: OverallPlaySummary = field(
        init=False, metadata={"description": "Statistics for the plays in this group."}
    )
    condition_share: int = field(
        init=False,
        metadata={
            "description": "Plays of this type as a share of all plays under "
            "these conditions, per mille."
        },
    )
    type_share: int = field(
        init=False,
        metadata={
            "description": "Plays under these conditions as a share of all plays "
            "of this type, per mille."
        },
    )

    def __post_init__(self) -> None:
        self.distances = np.sort(np.asarray(self.distances, dtype=np.int64))
        self.group = OverallPlaySummary.from_samples(self.distances, self.turnover_count)
        self.condition_share = 1000
        self.type_share = _per_mille(self.play_count, self.overall.total_count)

    @classmethod
    def create(
        cls,
        play_type: PlayType,
        distances: npt.ArrayLike,
        turnover_count: int,
        condition_play_count: int,
        overall: OverallPlaySummary,
    ) -> DetailedPlaySummary:
        summary = cls(
            play_type=play_type,
            distances=np.asarray(distances, dtype=np.int64),
            turnover_count=turnover_count,
            overall=overall,
        )
        summary.update_condition_stats(condition_play_count)
        return summary

    @property
    def play_count(self) -> int:
        """Number of plays of this type under these conditions."""
        return int(self.distances.shape[0])

    @property
    def average_distance(self) -> float:
        return self.group.average_distance

    @property
    def distance_variance(self) -> float:
        return self.group.distance_variance

    @property
    def turnover_rate(self) -> int:
        """Turnovers per thousand plays."""
        return self.group.turnover_rate

    def merge(self, other: DetailedPlaySummary, total_merged_plays: int) -> None:
        """Merge another summary of the same play type into this one.

        Used when combining statistics from similar conditions. The overall
        statistics stay the same.
        """
        if other.play_type != self.play_type:
            raise ValueError(
                f"Cannot merge {other.play_type.name} statistics into "
                f"{self.play_type.name} statistics"
            )
        self.distances = np.sort(np.concatenate([self.distances, other.distances]))
        self.turnover_count += other.turnover_count
        self.group = OverallPlaySummary.from_samples(self.distances, self.turnover_count)
        self.type_share = _per_mille(self.play_count, self.overall.total_count)
        self.update_condition_stats(total_merged_plays)

    def update_condition_stats(self, total_merged_plays: int) -> None:
        """Recompute the condition share against a new total number of plays."""
        self.condition_share = _per_mille(self.play_count, total_merged_plays)

    def copy(self) -> DetailedPlaySummary:
        duplicate = replace(self)
        duplicate.condition_share = self.condition_share
        duplicate.type_share = self.type_share
        return duplicate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DetailedPlaySummary):
            return NotImplemented
        return (
            self.play_type == other.play_type
            and np.array_equal(self.distances, other.distances)
            and self.turnover_count == other.turnover_count
            and self.overall == other.overall
            and self.condition_share == other.condition_share
            and self.type_share == other.type_share
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "play_type": self.play_type.name,
            "distances": self.distances.tolist(),
            "turnover_count": self.turnover_count,
            "overall": self.overall.to_dict(),
            "condition_share": self.condition_share,
            "type_share": self.type_share,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> DetailedPlaySummary:
        summary = cls(
            play_type=PlayType[d["play_type"]],
            distances=np.asarray(d["distances"], dtype=np.int64),
            turnover_count=int(d["turnover_count"]),
            overall=OverallPlaySummary.from_dict(d["overall"]),
        )
        summary.condition_share = int(d["condition_share"])
        summary.type_share = int(d["type_share"])
        return summary

    def __str__(self) -> str:
        return (
            f"pct of category:{self.condition_share}"
            f" pct of all type plays:{self.type_share}"
            f" avg dist:{self.average_distance:.1f}"
            f" dist var:{self.distance_variance:.1f}"
            f" Turnover pct:{self.turnover_rate}"
        )


DetailedPlayData = Dict[PlayType, DetailedPlaySummary]
"""Detailed summaries keyed by play type, in play type order. Only types with plays appear."""


class PlaySummaryFactory:
    """Builds play summaries from index sets."""

    @staticmethod
    def build_summary_data(indexes: PlayIndexSet) -> OverallSummaryData:
        """Overall summary for every play type in a snapshot of the store."""
        distances, turnovers = PlaySummaryFactory._indexes_to_counts(indexes)
        return {
            play_type: OverallPlaySummary.from_samples(
                distances[play_type], turnovers[play_type]
            )
            for play_type in PlayType
        }

    @staticmethod
    def build_detailed_data(
        indexes: PlayIndexSet, overall_data: OverallSummaryData
    ) -> DetailedPlayData:
        """Detailed summaries for the play types present in an index view."""
        distances, turnovers = PlaySummaryFactory._indexes_to_counts(indexes)
        total_play_count = sum(len(d) for d in distances.values())
        return {
            play_type: DetailedPlaySummary.create(
                play_type=play_type,
                distances=distances[play_type],
                turnover_count=turnovers[play_type],
                condition_play_count=total_play_count,
                overall=overall_data[play_type],
            )
            for play_type in PlayType
            if len(distances[play_type])
        }

    @staticmethod
    def merge_data(result: DetailedPlayData, other: DetailedPlayData) -> None:
        """Merge one set of detailed summaries into another, in place.

        Play types found in both are merged, types only in ``other`` are
        copied in, and types only in ``result`` are rescaled to the combined
        number of plays. ``other`` is left untouched.
        """
        play_count = sum(s.play_count for s in result.values()) + sum(
            s.play_count for s in other.values()
        )
        merged: DetailedPlayData = {}
        for play_type in PlayType:
            mine = result.get(play_type)
            theirs = other.get(play_type)
            if mine is not None and theirs is not None:
                mine.merge(theirs, play_count)
                merged[play_type] = mine
            elif mine is not None:
                mine.update_condition_stats(play_count)
                merged[play_type] = mine
            elif theirs is not None:
                inserted = theirs.copy()
                inserted.update_condition_stats(play_count)
                merged[play_type] = inserted

        result.clear()
        result.update(merged)

    @staticmethod
    def copy_data(data: DetailedPlayData) -> DetailedPlayData:
        return {play_type: summary.copy() for play_type, summary in data.items()}

    @staticmethod
    def _indexes_to_counts(
        indexes: PlayIndexSet,
    ) -> tuple[Dict[PlayType, DistanceArray], Dict[PlayType, int]]:
        """Distances gained and turnover counts of the indexed plays, by play type."""
        store = indexes.store
        play_ids = indexes.play_ids()
        play_types = store.play_types[play_ids]
        gained = store.distances_gained[play_ids]
        turned_over = store.turnovers[play_ids]

        distances: Dict[PlayType, DistanceArray] = {}
        turnovers: Dict[PlayType, int] = {}
        for play_type in PlayType:
            mask = play_types == int(play_type)
            distances[play_type] = gained[mask].astype(np.int64)
            turnovers[play_type] = int(np.count_nonzero(turned_over[mask]))
        return distances, turnovers
