"""Statistical pruning of built trees.

Plays are called by probability, not by exact rules, so an information gain
split keeps dividing plays long after the point a coach would make an actual
decision. It is also sensitive to noise and outliers. Pruning merges sibling
leaves back together when they are not meaningfully different:

* Single observations: when all leaves but one hold a single play, the split
  almost certainly came from the randomness of play calling.
* Significant plays: per leaf, play types with a share of at least
  ``significance_ratio`` of the leaf's top share are significant. Leaves with
  the same significant play types are merged. Play types significant in only
  some leaves are ignored when each appears only as single plays and together
  they hold at most ``noise_fraction`` of the plays.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence

from nfl_decision_tree.core._config import Settings, settings
from ._node import DecisionNode, LeafNode, Node
from ._play_type_set import PlayTypeSet
from ._summary import PlaySummaryFactory


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PruneParameters:
    """Thresholds used when deciding whether to merge leaves."""

    significance_ratio: float = field(
        default=0.75,
        metadata={
            "description": "Fraction of a leaf's top play share a play type "
            "needs to be significant."
        },
    )
    low_count_threshold: int = field(
        default=5,
        metadata={
            "description": "Leaves whose most frequent play type has at most this "
            "many plays treat every play type as significant."
        },
    )
    noise_fraction: float = field(
        default=0.5,
        metadata={
            "description": "Largest share of plays that single-play noise may hold."
        },
    )

    def __post_init__(self) -> None:
        if not 0 < self.significance_ratio <= 1:
            raise ValueError("significance_ratio must be > 0 and <= 1")
        if self.low_count_threshold < 0:
            raise ValueError("low_count_threshold must be >= 0")
        if not 0 <= self.noise_fraction <= 1:
            raise ValueError("noise_fraction must be >= 0 and <= 1")

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> PruneParameters:
        config = config if config is not None else settings
        return cls(
            significance_ratio=config.SIGNIFICANCE_RATIO,
            low_count_threshold=config.LOW_COUNT_THRESHOLD,
            noise_fraction=config.NOISE_FRACTION,
        )


def prune_node(node: Node, params: PruneParameters | None = None) -> Node:
    """Prune a subtree, bottom up.

    Decision nodes are updated in place. A decision node whose children are
    all leaves and meet either merge test is replaced by a single leaf.

    Args:
        node: Root of the subtree.
        params: Merge thresholds. Defaults to the values in ``settings``.

    Returns:
        The pruned subtree root: ``node`` itself, or the leaf replacing it.
    """
    if params is None:
        params = PruneParameters.from_settings()

    match node:
        case LeafNode():
            return node
        case DecisionNode():
            # Children are pruned even when this node cannot be
            node.children = [prune_node(child, params) for child in node.children]
            leaves = [child for child in node.children if isinstance(child, LeafNode)]
            if len(leaves) < len(node.children):
                return node
            if _single_play_saturated(leaves) or _same_significant_plays(leaves, params):
                logger.debug(
                    f"Merging {len(leaves)} leaves split on {node.characteristic.name}"
                )
                return merge_leaves(leaves)
            return node
        case _:
            raise TypeError(f"Not a tree node: {node!r}")


def merge_leaves(leaves: Sequence[LeafNode]) -> LeafNode:
    """Single leaf holding the combined statistics of several leaves."""
    if not leaves:
        raise ValueError("No leaves to merge")
    merged = PlaySummaryFactory.copy_data(leaves[0].plays)
    for leaf in leaves[1:]:
        PlaySummaryFactory.merge_data(merged, leaf.plays)
    return LeafNode(plays=merged)


def _is_single_play(leaf: LeafNode) -> bool:
    if len(leaf.plays) != 1:
        return False
    (summary,) = leaf.plays.values()
    return summary.play_count == 1


def _single_play_saturated(leaves: List[LeafNode]) -> bool:
    single_play_leaves = sum(1 for leaf in leaves if _is_single_play(leaf))
    return single_play_leaves >= len(leaves) - 1


def _significant_plays(leaf: LeafNode, params: PruneParameters) -> PlayTypeSet:
    """Play types making up a meaningful share of a leaf's plays."""
    if not leaf.plays:
        return PlayTypeSet()
    most_frequent = max(s.play_count for s in leaf.plays.values())
    if most_frequent <= params.low_count_threshold:
        return PlayTypeSet(leaf.plays)
    # Shares are relative to this leaf, not the leaves combined
    threshold = math.floor(
        max(s.condition_share for s in leaf.plays.values()) * params.significance_ratio
    )
    return PlayTypeSet(
        play_type
        for play_type, summary in leaf.plays.items()
        if summary.condition_share >= threshold
    )


def _same_significant_plays(leaves: List[LeafNode], params: PruneParameters) -> bool:
    single_plays = PlayTypeSet()
    multi_plays = PlayTypeSet()
    any_significant = PlayTypeSet()
    all_significant = PlayTypeSet.full()
    total_play_count = 0
    for leaf in leaves:
        for play_type, summary in leaf.plays.items():
            total_play_count += summary.play_count
            if summary.play_count > 1:
                multi_plays.add(play_type)
            else:
                single_plays.add(play_type)
        significant = _significant_plays(leaf, params)
        any_significant = any_significant | significant
        all_significant = all_significant & significant

    if any_significant == all_significant:
        return True

    some_significant = any_significant - all_significant
    noise = (single_plays - multi_plays) & some_significant
    if noise != some_significant:
        return False
    noise_play_count = sum(
        leaf.plays[play_type].play_count
        for leaf in leaves
        for play_type in noise
        if play_type in leaf.plays
    )
    return noise_play_count <= params.noise_fraction * total_play_count
