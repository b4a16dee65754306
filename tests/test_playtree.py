"""Tests for PlayTree."""

import orjson
import pytest

from nfl_decision_tree.core import CorruptionError, DataError, InfiniteSplitRiskError
from nfl_decision_tree.playtree import DecisionNode, LeafNode, PlayIndexSet
from nfl_decision_tree.playtree import PlayTree, PlayType, Situation


FIRST_AND_FIVE = {
    "down": 1,
    "distance_needed": 5,
    "yard_line": 50,
    "minutes": 40,
    "own_score": 0,
    "opp_score": 0,
}


def test_fit(separable_store):
    tree = PlayTree(name="separable").fit(separable_store)
    assert isinstance(tree.root, DecisionNode)
    assert tree.node_count == 3
    assert tree.depth == 1
    assert tree.store is separable_store
    assert repr(tree) == "PlayTree(name=separable)"


def test_find_plays(separable_store):
    tree = PlayTree().fit(separable_store)
    plays = tree.find_plays(FIRST_AND_FIVE)
    assert list(plays) == [PlayType.RUN_LEFT]
    assert plays[PlayType.RUN_LEFT].average_distance == pytest.approx(4.0)

    fourth = Situation(**{**FIRST_AND_FIVE, "down": 4})
    assert list(tree.find_plays(fourth)) == [PlayType.PUNT]

    assert len(tree.find_plays({**FIRST_AND_FIVE, "down": 2})) == 0


def test_find_plays_rejects_invalid_situation(separable_store):
    tree = PlayTree().fit(separable_store)
    with pytest.raises(DataError):
        tree.find_plays({**FIRST_AND_FIVE, "down": 5})
    with pytest.raises(DataError):
        tree.find_plays({"down": 1})


def test_unfitted_tree():
    tree = PlayTree()
    assert tree.root is None
    assert tree.node_count == 0
    assert tree.get_play_data() is None
    with pytest.raises(ValueError):
        tree.render()
    with pytest.raises(ValueError):
        tree.prune()
    with pytest.raises(ValueError):
        tree.find_plays(FIRST_AND_FIVE)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_gain_ratio": 0},
        {"min_gain_ratio": 1.5},
        {"significance_ratio": 0},
        {"low_count_threshold": -1},
        {"noise_fraction": 2},
        {"name": "not a valid name"},
    ],
)
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        PlayTree(**kwargs)


def test_failed_fit_leaves_tree_unfitted(separable_store, monkeypatch):
    tree = PlayTree().fit(separable_store)
    monkeypatch.setattr(PlayIndexSet, "split_by_characteristic", lambda self, c: [])
    with pytest.raises(InfiniteSplitRiskError):
        tree.fit(separable_store)
    assert tree.root is None


def test_render(separable_store):
    text = PlayTree().fit(separable_store).render()
    assert text.splitlines()[0] == "Split: down_number"
    assert "|-Value: fourth down" in text
    assert "| Punt: pct of category:1000" in text


def test_get_leaves(separable_store):
    leaves = PlayTree().fit(separable_store).get_leaves()
    assert len(leaves) == 2
    assert leaves["down"].tolist() == ["first down", "fourth down"]
    assert leaves["distance_needed"].isna().all()
    assert leaves["play_type"].tolist() == ["Run Left", "Punt"]
    assert leaves["play_count"].tolist() == [50, 50]
    assert leaves["average_distance"].tolist() == pytest.approx([4.0, 40.0])


def test_prune(separable_store, mixed_store):
    tree = PlayTree().fit(separable_store).prune()
    assert tree.pruned
    assert tree.node_count == 3

    tree = PlayTree().fit(mixed_store)
    node_count = tree.node_count
    tree.prune()
    assert tree.node_count <= node_count


def test_save_and_load(tmp_path, mixed_store):
    tree = PlayTree(name="mixed", noise_fraction=0.4).fit(mixed_store).prune()
    base = tree.save(tmp_path / "mixed")
    assert (base / "playtree.json").exists()
    assert (base / "data.parquet").exists()

    loaded = PlayTree.load(base)
    assert loaded.name == "mixed"
    assert loaded.noise_fraction == pytest.approx(0.4)
    assert loaded.pruned
    assert loaded.render() == tree.render()
    assert loaded.store is not None
    assert len(loaded.store) == len(mixed_store)
    assert loaded.find_plays(FIRST_AND_FIVE).keys() == tree.find_plays(FIRST_AND_FIVE).keys()


def test_save_for_production(tmp_path, separable_store):
    tree = PlayTree(name="production").fit(separable_store)
    base = tree.save(tmp_path / "production", for_production=True)
    assert not (base / "data.parquet").exists()

    loaded = PlayTree.load(base)
    assert loaded.store is None
    assert isinstance(loaded.root, DecisionNode)
    assert all(isinstance(child, LeafNode) for child in loaded.root.children)


def test_load_corrupted(tmp_path, separable_store):
    base = PlayTree(name="corrupt").fit(separable_store).save(tmp_path / "corrupt")
    manifest = orjson.loads((base / "playtree.json").read_bytes())
    del manifest["params"]
    (base / "playtree.json").write_bytes(orjson.dumps(manifest))
    with pytest.raises(CorruptionError):
        PlayTree.load(base)


def test_load_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        PlayTree.load(tmp_path)
