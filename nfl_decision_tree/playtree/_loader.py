from __future__ import annotations

import logging
from os import PathLike
from typing import Any, Dict, Tuple

import pandas as pd

from nfl_decision_tree.core._exceptions import DataError
from ._store import PlayCollector
from ._types import PlayCharacteristic


logger = logging.getLogger(__name__)

RAW_COLUMNS: Tuple[str, ...] = (
    "play_type",
    "down",
    "distance_needed",
    "yard_line",
    "minutes",
    "own_score",
    "opp_score",
    "distance_gained",
    "turned_over",
)
"""Columns of a frame holding raw game values."""

CATEGORIZED_COLUMNS: Tuple[str, ...] = (
    "play_type",
    *(c.column for c in PlayCharacteristic),
    "distance_gained",
    "turned_over",
)
"""Columns of a frame holding category codes, as written by ``PlayStore.to_frame``."""


def _normalize(value: Any) -> Any:
    """Turn numpy scalars and whole floats into plain Python values."""
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def collect_from_frame(
    frame: pd.DataFrame, collector: PlayCollector | None = None
) -> PlayCollector:
    """Insert every play in a data frame into a collector.

    Frames with raw game values are preferred over categorized frames when
    both sets of columns are present. Rows without a down are skipped, since
    they are not plays from scrimmage.

    Args:
        frame: Plays, one per row.
        collector: Collector to insert into. A new one is created if None.

    Returns:
        The collector holding the inserted plays.

    Raises:
        DataError: If the frame has neither the raw nor the categorized columns,
            or a row holds values that cannot be converted.
    """
    collector = collector if collector is not None else PlayCollector()
    columns = set(frame.columns)
    if columns.issuperset(RAW_COLUMNS):
        wanted, insert = RAW_COLUMNS, collector.insert_play
    elif columns.issuperset(CATEGORIZED_COLUMNS):
        wanted, insert = CATEGORIZED_COLUMNS, collector.insert_categorized
    else:
        missing = sorted(set(RAW_COLUMNS) - columns)
        raise DataError(f"Play data is missing columns: {missing}")

    inserted = 0
    skipped = 0
    records: list[Dict[str, Any]] = frame.loc[:, list(wanted)].to_dict(orient="records")  # type: ignore
    for row_number, record in enumerate(records):
        if pd.isna(record["down"]):
            skipped += 1
            continue
        values = {key: _normalize(val) for key, val in record.items()}
        try:
            insert(**values)
        except (TypeError, ValueError) as e:
            raise DataError(f"Invalid play in row {row_number}: {e}") from e
        inserted += 1

    if skipped:
        logger.warning(f"Skipped {skipped} rows without a down")
    logger.info(f"Collected {inserted} plays from data frame")
    return collector


def read_plays_csv(
    path: str | PathLike[str], collector: PlayCollector | None = None
) -> PlayCollector:
    """Read plays from a CSV file into a collector."""
    frame = pd.read_csv(path)  # type: ignore
    logger.debug(f"Read {len(frame)} rows from {path}")
    return collect_from_frame(frame, collector)
