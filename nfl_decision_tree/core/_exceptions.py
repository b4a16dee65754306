class DataError(Exception):
    """Data not in the expected format."""


class CorruptionError(Exception):
    """Internal state corruption detected. A model's state is corrupted."""


class InvalidIndexError(CorruptionError):
    """An index partition is empty or inconsistent after a build."""


class SplitConsistencyError(CorruptionError):
    """Index partitions disagreed on the categories produced by a split."""


class EmptyPopulationError(CorruptionError):
    """A node was asked to build over an index set with no plays."""


class InfiniteSplitRiskError(CorruptionError):
    """A split that should diversify the plays produced no new index sets."""
