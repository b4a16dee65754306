"""Decision tree nodes.

A node is either a decision node, which splits plays by the categories of one
characteristic, or a leaf holding statistics about the plays that reached it.
Building a node builds its whole subtree, consuming the index set it is given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Tuple, Union

import numpy as np
import numpy.typing as npt

from nfl_decision_tree.core._config import settings
from nfl_decision_tree.core._exceptions import EmptyPopulationError
from nfl_decision_tree.core._exceptions import InfiniteSplitRiskError
from ._index import PlayIndexSet
from ._play import SinglePlay
from ._play_type_set import PLAY_TYPE_COUNT
from ._summary import DetailedPlayData, DetailedPlaySummary, OverallSummaryData
from ._summary import PlaySummaryFactory
from ._types import PlayCharacteristic, PlayType, category_label


logger = logging.getLogger(__name__)

SituationValues = Union[SinglePlay, Mapping[PlayCharacteristic, int]]
"""Category codes of a situation, as a play or keyed by characteristic."""


@dataclass(slots=True)
class LeafNode:
    """A terminal node holding statistics about the plays that reached it."""

    plays: DetailedPlayData = field(
        default_factory=dict,
        metadata={"description": "Play statistics by play type, in play type order."},
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "leaf",
            "plays": [summary.to_dict() for summary in self.plays.values()],
        }


@dataclass(slots=True)
class DecisionNode:
    """A node splitting plays by the categories of one characteristic."""

    characteristic: PlayCharacteristic = field(
        metadata={"description": "The characteristic plays are split by."}
    )
    gain_ratio: float = field(
        default=0.0,
        metadata={"description": "Information gain ratio of the split."},
    )
    child_mapping: Dict[int, int] = field(
        default_factory=dict,
        metadata={
            "description": "Position in children of the child for each category "
            "value observed at this node."
        },
    )
    children: List[Node] = field(
        default_factory=list, metadata={"description": "The children of this node."}
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "decision",
            "characteristic": self.characteristic.name,
            "gain_ratio": self.gain_ratio,
            "child_mapping": [[value, pos] for value, pos in self.child_mapping.items()],
            "children": [child.to_dict() for child in self.children],
        }


Node = Union[DecisionNode, LeafNode]


def node_from_dict(d: Dict[str, Any]) -> Node:
    """Rebuild a node and its subtree from ``to_dict`` output."""
    if d["kind"] == "leaf":
        summaries = [DetailedPlaySummary.from_dict(s) for s in d["plays"]]
        return LeafNode(plays={s.play_type: s for s in summaries})
    if d["kind"] == "decision":
        return DecisionNode(
            characteristic=PlayCharacteristic[d["characteristic"]],
            gain_ratio=float(d["gain_ratio"]),
            child_mapping={int(value): int(pos) for value, pos in d["child_mapping"]},
            children=[node_from_dict(c) for c in d["children"]],
        )
    raise KeyError(f"Unknown node kind: {d['kind']}")


def _information(counts: npt.NDArray[np.float64]) -> float:
    """Entropy in bits of a population, given the size of each class."""
    present = counts[counts > 0]
    total = present.sum()
    if total <= 0:
        return 0.0
    probs = present / total
    return float(-np.sum(probs * np.log2(probs)))


def information_gain_ratio(
    play_counts: npt.ArrayLike, split_play_counts: npt.ArrayLike
) -> float:
    """C4.5 information gain ratio of splitting a population.

    Args:
        play_counts: Number of plays of each type in the population.
        split_play_counts: One row per sub-population, the number of plays of
            each type in it. Empty rows are ignored.

    Returns:
        The gain ratio, or 0 if the split produces one sub-population or less.
    """
    counts = np.asarray(play_counts, dtype=np.float64)
    splits = np.atleast_2d(np.asarray(split_play_counts, dtype=np.float64))
    sizes = splits.sum(axis=1)
    splits = splits[sizes > 0]
    sizes = sizes[sizes > 0]
    if len(sizes) <= 1:
        return 0.0

    weights = sizes / counts.sum()
    remainder = sum(w * _information(row) for w, row in zip(weights, splits))
    gain = _information(counts) - remainder
    split_info = float(-np.sum(weights * np.log2(weights)))
    if split_info <= 0:
        return 0.0
    return float(gain / split_info)


def _count_play_types(
    play_types: npt.NDArray[np.int8], handles: npt.ArrayLike
) -> npt.NDArray[np.int64]:
    return np.bincount(play_types[handles], minlength=PLAY_TYPE_COUNT).astype(np.int64)


def build_node(
    indexes: PlayIndexSet,
    overall_data: OverallSummaryData,
    min_gain_ratio: float | None = None,
) -> Node:
    """Build a node and its whole subtree from an index set.

    The index set is consumed: it is split and its indexes dropped as the
    subtree is built, so callers must not use it afterwards.

    Args:
        indexes: The plays that reach the node.
        overall_data: Overall statistics of the store, the baseline for leaves.
        min_gain_ratio: Lowest gain ratio worth splitting on. Defaults to
            ``settings.MIN_GAIN_RATIO``.

    Returns:
        A decision node if some characteristic splits the plays well enough,
        otherwise a leaf.

    Raises:
        EmptyPopulationError: If the index set holds no plays.
        InfiniteSplitRiskError: If splitting on the chosen characteristic
            produced no new index sets.
    """
    if min_gain_ratio is None:
        min_gain_ratio = settings.MIN_GAIN_RATIO

    play_types = indexes.store.play_types
    play_counts = _count_play_types(play_types, indexes.play_ids())
    if play_counts.sum() == 0:
        raise EmptyPopulationError("Node build failed, index set holds no plays")

    best: PlayCharacteristic | None = None
    best_ratio = 0.0
    if np.count_nonzero(play_counts) > 1:
        for characteristic in sorted(indexes.available):
            split_counts = np.array(
                [
                    _count_play_types(play_types, bucket)
                    for bucket in indexes.get_index(characteristic)
                ]
            )
            ratio = information_gain_ratio(play_counts, split_counts)
            if ratio < min_gain_ratio:
                logger.debug(
                    f"Dropping {characteristic.name}, gain ratio {ratio:.4f} "
                    f"below {min_gain_ratio}"
                )
                indexes.drop_index(characteristic)
            elif best is None or ratio > best_ratio:
                best, best_ratio = characteristic, ratio

    if best is None:
        return LeafNode(plays=PlaySummaryFactory.build_detailed_data(indexes, overall_data))

    logger.debug(f"Splitting {len(indexes)} plays on {best.name}, gain ratio {best_ratio:.4f}")
    return _build_decision_node(indexes, overall_data, best, best_ratio, min_gain_ratio)


def _build_decision_node(
    indexes: PlayIndexSet,
    overall_data: OverallSummaryData,
    characteristic: PlayCharacteristic,
    gain_ratio: float,
    min_gain_ratio: float,
) -> DecisionNode:
    node = DecisionNode(characteristic=characteristic, gain_ratio=gain_ratio)
    split_values = [
        value
        for value, bucket in enumerate(indexes.get_index(characteristic))
        if len(bucket)
    ]
    try:
        split_indexes = indexes.split_by_characteristic(characteristic)
        if not split_indexes:
            raise InfiniteSplitRiskError(
                f"Split on {characteristic.name} produced no new index sets"
            )
        # The first category stays in the original index set
        for position, (value, child_indexes) in enumerate(
            zip(split_values, [indexes, *split_indexes])
        ):
            node.child_mapping[value] = position
            node.children.append(build_node(child_indexes, overall_data, min_gain_ratio))
    except Exception:
        node.children.clear()
        node.child_mapping.clear()
        raise
    return node


def _situation_value(values: SituationValues, characteristic: PlayCharacteristic) -> int:
    if isinstance(values, SinglePlay):
        return values.value(characteristic)
    return int(values[characteristic])


def find_match(node: Node, values: SituationValues) -> Mapping[PlayType, DetailedPlaySummary]:
    """Statistics of the leaf a situation falls into.

    Args:
        node: Root of the tree to search.
        values: Category codes of the situation.

    Returns:
        A read-only mapping of copies of the leaf's play statistics, by play
        type. Empty if the situation has a category never observed where the
        tree splits on it.
    """
    current = node
    while True:
        match current:
            case LeafNode(plays=plays):
                return MappingProxyType(PlaySummaryFactory.copy_data(plays))
            case DecisionNode(
                characteristic=characteristic,
                child_mapping=child_mapping,
                children=children,
            ):
                position = child_mapping.get(_situation_value(values, characteristic))
                if position is None:
                    return MappingProxyType({})
                current = children[position]
            case _:
                raise TypeError(f"Not a tree node: {current!r}")


def render_node(node: Node, level: int = 0) -> List[str]:
    """Text lines showing a node and its subtree, children indented under parents."""
    leader = "| " * level
    lines: List[str] = []
    match node:
        case LeafNode(plays=plays):
            for play_type, summary in plays.items():
                lines.append(f"{leader}{play_type.label}: {summary}")
        case DecisionNode(characteristic=characteristic, child_mapping=child_mapping):
            lines.append(f"{leader}Split: {characteristic.name.lower()}")
            for value in sorted(child_mapping):
                lines.append(
                    f"{leader}|-Value: {category_label(characteristic, value)}"
                )
                lines.extend(render_node(node.children[child_mapping[value]], level + 1))
    return lines


LeafPath = Tuple[Tuple[PlayCharacteristic, int], ...]
"""Characteristic values leading from the root to a node."""


def iter_leaves(node: Node, path: LeafPath = ()) -> Iterator[Tuple[LeafPath, LeafNode]]:
    """Yield every leaf with the characteristic values leading to it."""
    match node:
        case LeafNode():
            yield path, node
        case DecisionNode(characteristic=characteristic, child_mapping=child_mapping):
            for value in sorted(child_mapping):
                yield from iter_leaves(
                    node.children[child_mapping[value]], (*path, (characteristic, value))
                )
