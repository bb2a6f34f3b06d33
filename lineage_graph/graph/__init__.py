"""
Graph building and reachability.

This package contains the GraphBuilder, which turns a RecordSet and a
FilterSpec into a GraphView, and the ReachabilityEngine, which answers
upstream, downstream and dashboard membership queries.
"""

from lineage_graph.graph.builder import GraphBuilder, build_graph_view
from lineage_graph.graph.reachability import ConnectionSummary, ReachabilityEngine

__all__ = [
    "ConnectionSummary",
    "GraphBuilder",
    "ReachabilityEngine",
    "build_graph_view",
]
