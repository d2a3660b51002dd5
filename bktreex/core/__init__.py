"""Core data structures and export primitives for the BK-tree."""

from .metrics import (
    ElementMetric,
    HammingCode,
    Integer,
    MetricElement,
    MetricRegistry,
    Word,
    available_metrics,
    get_metric,
    register_metric,
)
from .persistence import export_node, export_tree, tree_to_json, write_export
from .tree import BKTree, BKTreeNode

__all__ = [
    "BKTree",
    "BKTreeNode",
    "ElementMetric",
    "HammingCode",
    "Integer",
    "MetricElement",
    "MetricRegistry",
    "Word",
    "available_metrics",
    "export_node",
    "export_tree",
    "get_metric",
    "register_metric",
    "tree_to_json",
    "write_export",
]
