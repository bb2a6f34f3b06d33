"""
Data models for the lineage graph engine.

This package contains the record types read from a record store, the derived
graph types produced by the graph builder, the filter specification, and the
configuration dataclasses.
"""

from lineage_graph.models.config import (
    ErrorMode,
    ForceLayoutConfig,
    GraphConfig,
    HierarchicalLayoutConfig,
)
from lineage_graph.models.filters import FilterSpec
from lineage_graph.models.graph import (
    DashboardNode,
    GraphLink,
    GraphNode,
    GraphView,
    Point,
    TableNode,
)
from lineage_graph.models.records import (
    Dashboard,
    DashboardTableEdge,
    Layer,
    RecordSet,
    Table,
    TableLineageEdge,
    TableType,
)

__all__ = [
    "Dashboard",
    "DashboardNode",
    "DashboardTableEdge",
    "ErrorMode",
    "FilterSpec",
    "ForceLayoutConfig",
    "GraphConfig",
    "GraphLink",
    "GraphNode",
    "GraphView",
    "HierarchicalLayoutConfig",
    "Layer",
    "Point",
    "RecordSet",
    "Table",
    "TableLineageEdge",
    "TableNode",
    "TableType",
]
