from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np
import numpy.typing as npt

from ._types import PlayType


PLAY_TYPE_COUNT = len(PlayType)


class PlayTypeSet:
    """Fixed-size set of play types backed by a boolean array.

    The array is sized from the ``PlayType`` enumeration, so set operations
    always line up play type by play type.
    """

    __slots__ = ("_bits",)

    def __init__(self, play_types: Iterable[PlayType] = ()):
        self._bits: npt.NDArray[np.bool_] = np.zeros(PLAY_TYPE_COUNT, dtype=np.bool_)
        for play_type in play_types:
            self.add(play_type)

    @classmethod
    def _from_bits(cls, bits: npt.NDArray[np.bool_]) -> PlayTypeSet:
        if bits.shape != (PLAY_TYPE_COUNT,):
            raise ValueError(
                f"Play type set needs {PLAY_TYPE_COUNT} entries, got {bits.shape}"
            )
        inst = cls()
        inst._bits = bits.astype(np.bool_, copy=True)
        return inst

    @classmethod
    def full(cls) -> PlayTypeSet:
        """Set holding every play type."""
        return cls._from_bits(np.ones(PLAY_TYPE_COUNT, dtype=np.bool_))

    def add(self, play_type: PlayType) -> None:
        self._bits[int(play_type)] = True

    def __contains__(self, play_type: object) -> bool:
        if not isinstance(play_type, PlayType):
            return False
        return bool(self._bits[int(play_type)])

    def __iter__(self) -> Iterator[PlayType]:
        return (PlayType(int(i)) for i in np.flatnonzero(self._bits))

    def __len__(self) -> int:
        return int(np.count_nonzero(self._bits))

    def __bool__(self) -> bool:
        return bool(self._bits.any())

    def __or__(self, other: PlayTypeSet) -> PlayTypeSet:
        return PlayTypeSet._from_bits(self._bits | other._bits)

    def __and__(self, other: PlayTypeSet) -> PlayTypeSet:
        return PlayTypeSet._from_bits(self._bits & other._bits)

    def __sub__(self, other: PlayTypeSet) -> PlayTypeSet:
        return PlayTypeSet._from_bits(self._bits & ~other._bits)

    def __invert__(self) -> PlayTypeSet:
        return PlayTypeSet._from_bits(~self._bits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlayTypeSet):
            return NotImplemented
        return bool(np.array_equal(self._bits, other._bits))

    def __repr__(self) -> str:
        return f"PlayTypeSet({[p.name for p in self]})"
