"""
Layout engines.

This package contains the force layout controller with its settle-then-freeze
lifecycle, and the hierarchical left-to-right layout engine.
"""

from lineage_graph.layout.force import ForceLayoutController, LayoutPhase
from lineage_graph.layout.hierarchical import (
    HierarchicalLayout,
    HierarchicalLayoutEngine,
    LayoutNode,
    PositionedNode,
    graph_view_to_layout_input,
    layout_graph_view,
)
from lineage_graph.layout.simulation import ForceSimulation, SimNode
from lineage_graph.layout.sizing import node_box, node_radius

__all__ = [
    "ForceLayoutController",
    "ForceSimulation",
    "HierarchicalLayout",
    "HierarchicalLayoutEngine",
    "LayoutNode",
    "LayoutPhase",
    "PositionedNode",
    "SimNode",
    "graph_view_to_layout_input",
    "layout_graph_view",
    "node_box",
    "node_radius",
]
