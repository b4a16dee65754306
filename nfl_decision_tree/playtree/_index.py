"""Index sets over a play store.

A play store holds every play in a single arena. Index sets hold integer
handles into that arena, bucketed by category for each play characteristic,
so plays can be divided by any characteristic without searching the arena.

Warning: handles stay valid only as long as the store they were built from.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Mapping, Sequence, Set
from typing import Tuple

import numpy as np
import numpy.typing as npt

from nfl_decision_tree.core._exceptions import InvalidIndexError, SplitConsistencyError
from nfl_decision_tree.core._types import IndexArray
from ._types import PlayCharacteristic, category_count

if TYPE_CHECKING:
    from ._store import PlayStore


logger = logging.getLogger(__name__)

CategoryIndex = List[IndexArray]
"""Play handles split by category. Entry ``i`` holds the plays with category ``i``."""


def _freeze(handles: npt.ArrayLike) -> IndexArray:
    arr = np.array(handles, dtype=np.intp).reshape(-1)
    arr.flags.writeable = False
    return arr


class PlayIndexSet:
    """Per-characteristic category indexes into a play store.

    Every play handle present when the indexes were set appears exactly once
    in each available characteristic's index. Dropped characteristics have
    empty indexes and never come back. The last available characteristic is
    never dropped, so any index set can always list its plays.

    Args:
        store: The play store the handles point into.
    """

    __slots__ = ("_store", "_indexes", "_available")

    def __init__(self, store: PlayStore):
        self._store = store
        self._indexes: Dict[PlayCharacteristic, CategoryIndex] = {
            c: [] for c in PlayCharacteristic
        }
        self._available: Set[PlayCharacteristic] = set()

    @classmethod
    def from_store(cls, store: PlayStore) -> PlayIndexSet:
        """Build indexes for every play in the store."""
        indexes: Dict[PlayCharacteristic, CategoryIndex] = {}
        for characteristic in PlayCharacteristic:
            column = store.column(characteristic)
            indexes[characteristic] = [
                np.flatnonzero(column == value)
                for value in range(category_count(characteristic))
            ]
        inst = cls(store)
        inst.set_indexes(indexes)
        return inst

    @property
    def store(self) -> PlayStore:
        """The play store the index handles point into."""
        return self._store

    @property
    def available(self) -> FrozenSet[PlayCharacteristic]:
        """Characteristics that still have an index."""
        return frozenset(self._available)

    def set_indexes(
        self, indexes: Mapping[PlayCharacteristic, Sequence[npt.ArrayLike]]
    ) -> None:
        """Replace all indexes at once. Existing ones are dropped.

        Args:
            indexes: For every characteristic, one sequence of play handles per
                category value.

        Raises:
            InvalidIndexError: If an index is missing, has the wrong number of
                categories, holds no plays, points outside the store, or
                disagrees with the other indexes on the number of plays.
        """
        new_indexes: Dict[PlayCharacteristic, CategoryIndex] = {}
        total: int | None = None
        for characteristic in PlayCharacteristic:
            category_index = indexes.get(characteristic)
            if category_index is None:
                raise InvalidIndexError(
                    f"Index create failed, no index for {characteristic.name}"
                )
            if len(category_index) != category_count(characteristic):
                raise InvalidIndexError(
                    f"Index create failed, {characteristic.name} index has "
                    f"{len(category_index)} categories, expected "
                    f"{category_count(characteristic)}"
                )

            buckets = [_freeze(b) for b in category_index]
            count = sum(len(b) for b in buckets)
            if count == 0:
                raise InvalidIndexError(
                    f"Index create failed, {characteristic.name} index empty after build"
                )
            if total is None:
                total = count
            elif count != total:
                raise InvalidIndexError(
                    f"Index create failed, {characteristic.name} index holds {count} "
                    f"plays while others hold {total}"
                )
            for bucket in buckets:
                if len(bucket) and (bucket.min() < 0 or bucket.max() >= len(self._store)):
                    raise InvalidIndexError(
                        f"Index create failed, {characteristic.name} index points "
                        "outside the play store"
                    )
            new_indexes[characteristic] = buckets

        self._indexes = new_indexes
        self._available = set(PlayCharacteristic)

    def get_index(self, characteristic: PlayCharacteristic) -> Tuple[IndexArray, ...]:
        """Category index for a characteristic. Dropped ones return an empty tuple."""
        return tuple(self._indexes[characteristic])

    def play_ids(self) -> IndexArray:
        """Handles of every play in this index set, through any available index."""
        if not self._available:
            return _freeze([])
        buckets = self._indexes[min(self._available)]
        if not buckets:
            return _freeze([])
        return _freeze(np.concatenate(buckets))

    def __len__(self) -> int:
        if not self._available:
            return 0
        return sum(len(b) for b in self._indexes[min(self._available)])

    def copy(self) -> PlayIndexSet:
        """Independent copy sharing the same store."""
        inst = PlayIndexSet(self._store)
        inst._indexes = {c: list(buckets) for c, buckets in self._indexes.items()}
        inst._available = set(self._available)
        return inst

    def drop_index(self, characteristic: PlayCharacteristic) -> None:
        """Drop the index for a characteristic, usually because it is redundant.

        Dropping the last available index does nothing.
        """
        if characteristic not in self._available:
            return
        if len(self._available) == 1:
            logger.debug(f"Keeping {characteristic.name}, the last available index")
            return
        self._indexes[characteristic] = []
        self._available.discard(characteristic)

    def split_by_characteristic(
        self, characteristic: PlayCharacteristic
    ) -> List[PlayIndexSet]:
        """Split the plays by each category of a characteristic.

        The characteristic is dropped first, since every resulting set holds a
        single category of it. This object keeps the plays of the first
        category with plays; the returned sets hold the others, in category
        order. Nothing is returned if the plays fall into one category or less.

        Raises:
            SplitConsistencyError: If the indexes disagree on which categories
                hold plays.
        """
        splitting_index = self._indexes[characteristic]
        split_values = [v for v, bucket in enumerate(splitting_index) if len(bucket)]

        self.drop_index(characteristic)
        if len(split_values) <= 1:
            return []

        column = self._store.column(characteristic)
        pieces: Dict[PlayCharacteristic, Dict[int, CategoryIndex]] = {}
        for indexed, category_index in self._indexes.items():
            if not category_index:
                continue
            pieces[indexed] = self._split_index(
                column, category_index, characteristic, indexed, split_values
            )

        results: List[PlayIndexSet] = []
        for value in split_values[1:]:
            result = PlayIndexSet(self._store)
            result._available = set(self._available)
            for indexed, by_value in pieces.items():
                result._indexes[indexed] = by_value[value]
            results.append(result)
        for indexed, by_value in pieces.items():
            self._indexes[indexed] = by_value[split_values[0]]

        logger.debug(
            f"Split {characteristic.name} into {len(split_values)} index sets: "
            f"{split_values}"
        )
        return results

    @staticmethod
    def _split_index(
        column: npt.NDArray[np.integer],
        category_index: CategoryIndex,
        characteristic: PlayCharacteristic,
        indexed: PlayCharacteristic,
        split_values: List[int],
    ) -> Dict[int, CategoryIndex]:
        """Split one category index by the categories of another characteristic.

        The split first produces data ordered by this index's categories, then
        by the split categories. The result is swapped around to be keyed by
        split category.
        """
        n_categories = category_count(characteristic)
        split_counts = np.zeros(n_categories, dtype=np.intp)
        per_bucket: List[List[IndexArray]] = []
        for bucket in category_index:
            values = column[bucket]
            bucket_pieces = [_freeze(bucket[values == v]) for v in range(n_categories)]
            split_counts += np.array([len(p) for p in bucket_pieces], dtype=np.intp)
            per_bucket.append(bucket_pieces)

        produced = [int(v) for v in np.flatnonzero(split_counts)]
        if produced != split_values:
            raise SplitConsistencyError(
                f"Index split on {characteristic.name} failed, {indexed.name} index "
                f"produced categories {produced}, expected {split_values}"
            )
        return {
            value: [bucket_pieces[value] for bucket_pieces in per_bucket]
            for value in split_values
        }

    def __repr__(self) -> str:
        available = ", ".join(c.name for c in sorted(self._available))
        return f"PlayIndexSet(plays={len(self)}, available=[{available}])"
