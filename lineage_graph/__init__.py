"""
Lineage Graph Engine v1.0

Turns flat lineage records (tables, table-to-table edges, dashboards and
dashboard-to-table edges) into a navigable graph, answers upstream and
downstream reachability queries, and lays the graph out either with a
settle-then-freeze force layout or a hierarchical left-to-right layout.

Example:
    >>> from lineage_graph import GraphBuilder, RecordSet, FilterSpec
    >>> records = RecordSet.from_dict(document)
    >>> view = GraphBuilder().build(records, FilterSpec(focused_table_id="t1"))
    >>> [node.id for node in view.nodes]
"""

from lineage_graph.version import __version__, __version_info__

__author__ = "Lineage Graph Contributors"

from lineage_graph.exceptions import (
    FilterConflictError,
    FocusConflictWarning,
    LayoutError,
    LineageGraphError,
    RecordLoadError,
    RecordStoreError,
)
from lineage_graph.graph.builder import GraphBuilder, build_graph_view
from lineage_graph.graph.reachability import ConnectionSummary, ReachabilityEngine
from lineage_graph.layout.force import ForceLayoutController, LayoutPhase
from lineage_graph.layout.hierarchical import (
    HierarchicalLayout,
    HierarchicalLayoutEngine,
    LayoutNode,
    PositionedNode,
    graph_view_to_layout_input,
    layout_graph_view,
)
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
from lineage_graph.store.dict_store import DictRecordStore
from lineage_graph.store.loader import load_record_file, record_set_from_dict
from lineage_graph.store.provider import RecordStore
from lineage_graph.utils.warnings import GraphWarning, WarningCollector

__all__ = [
    # Version info
    "__version__",
    "__version_info__",
    # Graph engine
    "GraphBuilder",
    "build_graph_view",
    "ReachabilityEngine",
    "ConnectionSummary",
    # Layouts
    "ForceLayoutController",
    "LayoutPhase",
    "HierarchicalLayoutEngine",
    "HierarchicalLayout",
    "LayoutNode",
    "PositionedNode",
    "graph_view_to_layout_input",
    "layout_graph_view",
    # Configuration
    "ErrorMode",
    "GraphConfig",
    "ForceLayoutConfig",
    "HierarchicalLayoutConfig",
    "FilterSpec",
    # Records
    "Table",
    "TableLineageEdge",
    "Dashboard",
    "DashboardTableEdge",
    "Layer",
    "TableType",
    "RecordSet",
    # Graph models
    "GraphView",
    "GraphNode",
    "TableNode",
    "DashboardNode",
    "GraphLink",
    "Point",
    # Stores
    "RecordStore",
    "DictRecordStore",
    "load_record_file",
    "record_set_from_dict",
    # Diagnostics
    "GraphWarning",
    "WarningCollector",
    # Exceptions
    "LineageGraphError",
    "FilterConflictError",
    "LayoutError",
    "RecordStoreError",
    "RecordLoadError",
    "FocusConflictWarning",
]
