"""PlayTree.

Decision tree classifying NFL game situations by the plays called in them.
"""

from __future__ import annotations

import os
from os import PathLike
from typing import Any, Dict, List, Mapping
import logging
from uuid import uuid4
from pathlib import Path
import datetime
import re

import orjson
from pydantic import BaseModel, Field, ValidationError
import pandas as pd

from nfl_decision_tree.core._config import settings
from nfl_decision_tree.core._exceptions import CorruptionError, DataError
from ._loader import collect_from_frame
from ._node import DecisionNode, Node, SituationValues
from ._node import build_node, find_match, iter_leaves, node_from_dict, render_node
from ._prune import PruneParameters, prune_node
from ._store import PlayStore
from ._summary import DetailedPlaySummary
from ._types import PlayCharacteristic, PlayType, category_label
from ._types import down_to_category, distance_to_distance_needed
from ._types import yards_to_field_location, minutes_to_time_remaining
from ._types import score_to_score_differential


logger = logging.getLogger(__name__)


class Situation(BaseModel):
    """A game situation, in raw game values."""

    down: int = Field(..., ge=1, le=4, description="The down, 1 to 4.")
    distance_needed: int = Field(
        ..., ge=0, description="Yards needed for a first down."
    )
    yard_line: int = Field(
        ..., ge=0, le=100, description="Yards the offense needs for a touchdown."
    )
    minutes: int = Field(..., ge=0, le=60, description="Minutes left in the game.")
    own_score: int = Field(..., ge=0, description="Offense score.")
    opp_score: int = Field(..., ge=0, description="Defense score.")

    def category_values(self) -> Dict[PlayCharacteristic, int]:
        """Category codes of the situation, keyed by characteristic."""
        return {
            PlayCharacteristic.DOWN_NUMBER: int(down_to_category(self.down)),
            PlayCharacteristic.DISTANCE_NEEDED: int(
                distance_to_distance_needed(self.distance_needed)
            ),
            PlayCharacteristic.FIELD_LOCATION: int(
                yards_to_field_location(self.yard_line)
            ),
            PlayCharacteristic.TIME_REMAINING: int(
                minutes_to_time_remaining(self.minutes)
            ),
            PlayCharacteristic.SCORE_DIFFERENTIAL: int(
                score_to_score_differential(self.own_score, self.opp_score)
            ),
        }


class PlayTree:
    """Decision tree of NFL play calling.

    Splits plays by situation characteristics using information gain ratio,
    then optionally prunes splits that come from the randomness of play
    calling rather than actual decisions. Thresholds left as None take their
    values from ``settings``.

    Args:
        min_gain_ratio: Lowest information gain ratio worth splitting on.
        significance_ratio: Fraction of a leaf's top play share a play type
            needs to be significant when pruning.
        low_count_threshold: Leaves whose most frequent play type has at most
            this many plays treat every play type as significant.
        noise_fraction: Largest share of plays single-play noise may hold
            for leaves to be merged anyway.
        save_path: Directory to save the tree to.
        name: Name of the tree instance.
    """

    def __init__(
        self,
        min_gain_ratio: float | None = None,
        significance_ratio: float | None = None,
        low_count_threshold: int | None = None,
        noise_fraction: float | None = None,
        save_path: str | PathLike[str] | None = None,
        name: str | None = None,
    ):
        self.min_gain_ratio: float = (
            settings.MIN_GAIN_RATIO if min_gain_ratio is None else min_gain_ratio
        )
        self.significance_ratio: float = (
            settings.SIGNIFICANCE_RATIO
            if significance_ratio is None
            else significance_ratio
        )
        self.low_count_threshold: int = (
            settings.LOW_COUNT_THRESHOLD
            if low_count_threshold is None
            else low_count_threshold
        )
        self.noise_fraction: float = (
            settings.NOISE_FRACTION if noise_fraction is None else noise_fraction
        )
        self._verify_input_data(
            min_gain_ratio=self.min_gain_ratio,
            significance_ratio=self.significance_ratio,
            low_count_threshold=self.low_count_threshold,
            noise_fraction=self.noise_fraction,
        )

        self.name: str = self._get_name(name)
        self.save_path: Path = self._set_save_path(save_path)

        self._store: PlayStore | None = None
        self._root: Node | None = None
        self._pruned: bool = False

    def _verify_input_data(self, **kwargs: Any) -> None:
        """Verify the input data."""
        min_gain_ratio = kwargs["min_gain_ratio"]
        significance_ratio = kwargs["significance_ratio"]
        low_count_threshold = kwargs["low_count_threshold"]
        noise_fraction = kwargs["noise_fraction"]

        if min_gain_ratio <= 0 or min_gain_ratio > 1:
            raise ValueError("min_gain_ratio must be > 0 and <= 1")
        if significance_ratio <= 0 or significance_ratio > 1:
            raise ValueError("significance_ratio must be > 0 and <= 1")
        if low_count_threshold < 0:
            raise ValueError("low_count_threshold must be >= 0")
        if noise_fraction < 0 or noise_fraction > 1:
            raise ValueError("noise_fraction must be >= 0 and <= 1")

    def _get_name(self, name: str | None) -> str:
        if name is None:
            name = str(uuid4()).replace("-", "_")
            logger.debug(f"No name provided. Assigned name: {name}")

        if not re.match(r"^[a-zA-Z0-9_]+$", name):
            raise ValueError("Name must be only alphanumeric and underscores")
        return name

    def _set_save_path(self, save_path: str | PathLike[str] | None) -> Path:
        if save_path is None:
            return (Path(os.getcwd()) / "playtrees" / self.name).resolve()
        else:
            save_path = Path(save_path).resolve()
            if save_path.is_file():
                raise ValueError("Please provide a directory, not a file.")
            return save_path

    @property
    def prune_parameters(self) -> PruneParameters:
        return PruneParameters(
            significance_ratio=self.significance_ratio,
            low_count_threshold=self.low_count_threshold,
            noise_fraction=self.noise_fraction,
        )

    @property
    def root(self) -> Node | None:
        """Root node of the tree, None until fitted."""
        return self._root

    @property
    def pruned(self) -> bool:
        return self._pruned

    @property
    def store(self) -> PlayStore | None:
        """The plays the tree was built from, if available."""
        return self._store

    def get_play_data(self) -> pd.DataFrame | None:
        """Get the categorized plays the tree was built from."""
        if self._store is None:
            return None
        return self._store.to_frame()

    @property
    def node_count(self) -> int:
        """Number of decision and leaf nodes in the tree."""
        if self._root is None:
            return 0
        count = 0
        stack: List[Node] = [self._root]
        while stack:
            node = stack.pop()
            count += 1
            if isinstance(node, DecisionNode):
                stack.extend(node.children)
        return count

    @property
    def depth(self) -> int:
        """Number of decision levels above the deepest leaf."""
        if self._root is None:
            return 0
        return max((len(path) for path, _ in iter_leaves(self._root)), default=0)

    def _require_root(self) -> Node:
        if self._root is None:
            raise ValueError("Tree is not fitted. Call fit first.")
        return self._root

    def fit(self, store: PlayStore) -> PlayTree:
        """Build the tree from every play in a store.

        Args:
            store: Finalized plays to build from.

        Returns:
            The fitted tree.

        Raises:
            CorruptionError: If the indexes are found corrupted while building.
                The tree is left unfitted.
        """
        self._root = None
        self._pruned = False
        logger.info(f"Building tree {self.name} from {len(store)} plays")
        self._root = build_node(store.get_indexes(), store.summary_data, self.min_gain_ratio)
        self._store = store
        logger.info(f"Built tree {self.name} with {self.node_count} nodes")
        return self

    def prune(self) -> PlayTree:
        """Merge leaves whose differences come from the randomness of play calling.

        Pruning an already pruned tree changes nothing.
        """
        root = self._require_root()
        node_count = self.node_count
        self._root = prune_node(root, self.prune_parameters)
        self._pruned = True
        logger.info(
            f"Pruned tree {self.name} from {node_count} to {self.node_count} nodes"
        )
        return self

    def find_match(self, values: SituationValues) -> Mapping[PlayType, DetailedPlaySummary]:
        """Play statistics for a situation given as category codes.

        Args:
            values: A play, or category codes keyed by characteristic.

        Returns:
            Read-only play statistics by play type. Empty if the situation was
            never observed where the tree splits on it.
        """
        return find_match(self._require_root(), values)

    def find_plays(
        self, situation: Situation | Mapping[str, Any]
    ) -> Mapping[PlayType, DetailedPlaySummary]:
        """Play statistics for a situation given as raw game values.

        Raises:
            DataError: If the situation values are invalid.
        """
        if not isinstance(situation, Situation):
            try:
                situation = Situation.model_validate(situation)
            except ValidationError as e:
                raise DataError(f"Invalid situation: {e}") from e
        return self.find_match(situation.category_values())

    def render(self) -> str:
        """Text view of the tree, one line per split value and leaf play type."""
        return "\n".join(render_node(self._require_root()))

    def get_leaves(self) -> pd.DataFrame:
        """Get every leaf's play statistics, one row per leaf and play type.

        Characteristic columns hold the category label leading to the leaf, or
        None where the path does not split on the characteristic.
        """
        rows: List[Dict[str, Any]] = []
        for leaf_id, (path, leaf) in enumerate(iter_leaves(self._require_root())):
            conditions: Dict[str, Any] = {c.column: None for c in PlayCharacteristic}
            for characteristic, value in path:
                conditions[characteristic.column] = category_label(characteristic, value)
            for play_type, summary in leaf.plays.items():
                rows.append(
                    {
                        "leaf_id": leaf_id,
                        **conditions,
                        "play_type": play_type.label,
                        "play_count": summary.play_count,
                        "condition_share": summary.condition_share,
                        "type_share": summary.type_share,
                        "average_distance": summary.average_distance,
                        "distance_variance": summary.distance_variance,
                        "turnover_rate": summary.turnover_rate,
                    }
                )
        return pd.DataFrame(rows)

    @classmethod
    def _load(cls, path: str | PathLike[str]) -> PlayTree:
        base = Path(path)
        if base.is_dir():
            tree_json_path = base / "playtree.json"
            if not tree_json_path.exists():
                raise FileNotFoundError(f"'playtree.json' not found in directory: {base}")
        else:
            raise ValueError("Please provide a directory, not a file.")

        manifest = orjson.loads(tree_json_path.read_bytes())

        params = manifest["params"]
        inst = cls(
            min_gain_ratio=params["min_gain_ratio"],
            significance_ratio=params["significance_ratio"],
            low_count_threshold=params["low_count_threshold"],
            noise_fraction=params["noise_fraction"],
            save_path=base,
            name=manifest["tree_name"],
        )
        inst._pruned = bool(manifest["pruned"])
        if (root := manifest["root"]) is not None:
            inst._root = node_from_dict(root)

        # load plays if present
        data_parquet_path = base / "data.parquet"
        if data_parquet_path.exists():
            df = pd.read_parquet(data_parquet_path)  # type: ignore
            inst._store = collect_from_frame(df).finalize()

        logger.info(f"Loaded tree {inst.name} from {base}")
        return inst

    @classmethod
    def load(cls, path: str | PathLike[str]) -> PlayTree:
        """Load a PlayTree from saved state.

        Args:
            path: Directory containing "playtree.json".

        Returns:
            Reconstructed PlayTree instance.

        Raises:
            CorruptionError: If the saved tree is missing expected values.
        """
        try:
            return cls._load(path)
        except KeyError as e:
            raise CorruptionError(
                f"Failed to load PlayTree. Tree json is probably corrupted: {e}"
            ) from e

    def save(
        self,
        dir_path: str | PathLike[str] | None = None,
        for_production: bool = False,
    ) -> Path:
        """Save the tree to JSON and its plays to parquet in a directory.

        If dir_path is None, uses ``self.save_path``.
        If for_production is True, does not save the plays.

        Args:
            dir_path: The directory to save the tree to.
            for_production: Whether to save the tree for production.

        Returns:
            The directory the tree was saved to.
        """
        base = Path(dir_path) if dir_path is not None else self.save_path
        if base.is_file():
            raise ValueError("Please provide a directory, not a file.")
        base.mkdir(parents=True, exist_ok=True)

        payload: Dict[str, object] = {
            "tree_name": self.name,
            "created_at": datetime.datetime.now().isoformat(),
            "save_path": str(self.save_path) if not for_production else None,
            "params": {
                "min_gain_ratio": self.min_gain_ratio,
                "significance_ratio": self.significance_ratio,
                "low_count_threshold": self.low_count_threshold,
                "noise_fraction": self.noise_fraction,
            },
            "pruned": self._pruned,
            "root": self._root.to_dict() if self._root is not None else None,
        }
        payload_json = orjson.dumps(payload, option=orjson.OPT_SERIALIZE_NUMPY)

        with (base / "playtree.json").open("w", encoding="utf-8") as f:
            f.write(payload_json.decode("utf-8"))

        if not for_production and self._store is not None:
            data_parquet_path = base / "data.parquet"
            self._store.to_frame().to_parquet(str(data_parquet_path), index=False)  # type: ignore

        logger.info(f"Saved tree {self.name} to {base}")
        return base

    def __repr__(self) -> str:
        return f"PlayTree(name={self.name})"

    def __str__(self) -> str:
        return f"PlayTree(name={self.name})"
