import json
import logging

import pytest

from bktreex import BKTree, BKTreeNode, Integer, Word, export_tree, write_export
from bktreex.core.persistence import export_node


def _scenario_tree() -> BKTree:
    return BKTree.from_elements([Word(""), Word("ab"), Word("ac")])


def test_empty_tree_exports_none():
    tree = BKTree()

    assert export_tree(tree) is None
    assert tree.to_json() == "null"


def test_single_node_export():
    tree = BKTree.from_elements([Word("solo")])

    assert tree.export() == ["solo", {}]
    assert tree.to_json() == '["solo", {}]'


def test_nested_export_shape():
    tree = _scenario_tree()

    assert export_tree(tree) == ["", {2: ["ab", {1: ["ac", {}]}]}]
    assert json.loads(tree.to_json()) == ["", {"2": ["ab", {"1": ["ac", {}]}]}]


def test_children_exported_in_key_order():
    tree = BKTree.from_elements([Integer(10), Integer(13), Integer(9), Integer(11)])

    exported = export_tree(tree)

    assert list(exported[1]) == [1, 3]
    assert exported[1][1] == ["9", {2: ["11", {}]}]
    assert tree.to_json() == '["10", {"1": ["9", {"2": ["11", {}]}], "3": ["13", {}]}]'


def test_export_subtree():
    tree = _scenario_tree()

    assert export_node(tree.root.children[2]) == ["ab", {1: ["ac", {}]}]


def test_export_handles_deep_chains():
    tree = BKTree()
    tree.add(Integer(0))
    node = tree.root
    for value in range(1, 3_000):
        node.children[1] = BKTreeNode(Integer(value))
        node = node.children[1]

    exported = export_tree(tree)
    depth = 0
    while exported[1]:
        exported = exported[1][1]
        depth += 1
    assert depth == 2_999
    assert exported == ["2999", {}]


def test_write_export_creates_parent_directories(tmp_path):
    tree = _scenario_tree()
    target = tmp_path / "nested" / "tree.json"

    written = write_export(tree, target, indent=2)

    assert written == target
    assert json.loads(target.read_text(encoding="utf-8")) == json.loads(tree.to_json())


def test_export_emits_operation_log(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger="bktreex.core.persistence")

    _scenario_tree().to_json()

    records = [record for record in caplog.records if "op=export" in record.message]
    assert records, "expected export operation log"
    message = records[-1].message
    assert "nodes=3" in message
    assert "wall_ms=" in message
