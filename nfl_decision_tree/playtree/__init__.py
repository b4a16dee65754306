"""A decision tree of NFL play calling.

Plays are split by situation characteristics using information gain ratio,
then statistically pruned to make up for play calling being probability
based rather than exact.
"""

from ._types import PlayType, PlayCharacteristic
from ._types import Down, DistanceNeeded, FieldLocation, TimeRemaining
from ._types import ScoreDifferential, category_count, category_label
from ._play import SinglePlay
from ._play_type_set import PlayTypeSet
from ._index import PlayIndexSet
from ._summary import OverallPlaySummary, DetailedPlaySummary, PlaySummaryFactory
from ._store import PlayCollector, PlayStore
from ._loader import collect_from_frame, read_plays_csv
from ._node import DecisionNode, LeafNode, Node, build_node, find_match
from ._node import information_gain_ratio
from ._prune import PruneParameters, prune_node
from ._playtree import PlayTree, Situation

__all__ = [
    "PlayType",
    "PlayCharacteristic",
    "Down",
    "DistanceNeeded",
    "FieldLocation",
    "TimeRemaining",
    "ScoreDifferential",
    "category_count",
    "category_label",
    "SinglePlay",
    "PlayTypeSet",
    "PlayIndexSet",
    "OverallPlaySummary",
    "DetailedPlaySummary",
    "PlaySummaryFactory",
    "PlayCollector",
    "PlayStore",
    "collect_from_frame",
    "read_plays_csv",
    "DecisionNode",
    "LeafNode",
    "Node",
    "build_node",
    "find_match",
    "information_gain_ratio",
    "PruneParameters",
    "prune_node",
    "PlayTree",
    "Situation",
]
