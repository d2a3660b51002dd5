from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from bktreex.core.tree import BKTree, BKTreeNode
from bktreex.diagnostics import log_operation
from bktreex.logging import get_logger

LOGGER = get_logger("core.persistence")

ExportedNode = List[Any]


def _export_node(node: BKTreeNode) -> ExportedNode:
    return [node.element.describe(), {}]


def export_node(node: BKTreeNode) -> ExportedNode:
    """Return ``[description, {distance: child_export, ...}]`` for a subtree.

    Children are emitted in ascending distance order. The walk is iterative so
    chain-shaped subtrees do not hit the recursion limit.
    """

    exported = _export_node(node)
    stack: List[Tuple[BKTreeNode, Dict[int, ExportedNode]]] = [(node, exported[1])]
    while stack:
        current, slot = stack.pop()
        for distance in sorted(current.children):
            child = current.children[distance]
            child_export = _export_node(child)
            slot[distance] = child_export
            stack.append((child, child_export[1]))
    return exported


def export_tree(tree: BKTree) -> Optional[ExportedNode]:
    """Snapshot ``tree`` as nested two-element lists; ``None`` when empty."""

    if tree.root is None:
        return None
    return export_node(tree.root)


def tree_to_json(tree: BKTree, *, indent: int | None = None) -> str:
    """Serialise the export; distance keys become JSON object keys (strings)."""

    with log_operation(LOGGER, "export") as op_log:
        payload = json.dumps(export_tree(tree), indent=indent, ensure_ascii=False)
        op_log.add_metadata(nodes=tree.size, bytes=len(payload))
        return payload


def write_export(tree: BKTree, path: str | Path, *, indent: int | None = None) -> Path:
    target = Path(path).expanduser()
    if target.parent:
        target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(tree_to_json(tree, indent=indent), encoding="utf-8")
    return target


__all__ = ["export_node", "export_tree", "tree_to_json", "write_export"]
