"""
Graph builder.

This module defines the GraphBuilder class, which turns a RecordSet and a
FilterSpec into a GraphView: the node set is resolved first, the edge set is
derived strictly from it, and each node is annotated with the number of kept
edges touching it.
"""

from __future__ import annotations

import warnings
from typing import Optional

from lineage_graph.exceptions import FilterConflictError, FocusConflictWarning
from lineage_graph.graph.reachability import ReachabilityEngine
from lineage_graph.models.config import ErrorMode, GraphConfig
from lineage_graph.models.filters import FilterSpec
from lineage_graph.models.graph import (
    DashboardNode,
    GraphLink,
    GraphNode,
    GraphView,
    TableNode,
)
from lineage_graph.models.records import RecordSet


class GraphBuilder:
    """Build GraphViews from records and filters.

    The builder keeps no state between calls; ``build`` is a pure function
    of its arguments.

    Node set resolution, in order of precedence:

    1. ``focused_table_id``: the table plus its full upstream and downstream
       lineage (plus linked dashboards if ``include_linked_dashboards``).
    2. ``focused_dashboard_id``: the dashboard plus every table reachable
       from it.
    3. Otherwise every table passing the attribute filters and every
       dashboard passing the search term, narrowed by
       ``selected_dashboard_id`` when set.

    Usage:
        builder = GraphBuilder()
        view = builder.build(records, FilterSpec(layers=["Raw"]))
        for node in view.nodes:
            print(node.id, node.connection_count)
    """

    def __init__(self, config: Optional[GraphConfig] = None) -> None:
        """Initialize a GraphBuilder.

        Args:
            config: Builder configuration. Defaults to GraphConfig().
        """
        self.config = config or GraphConfig()

    def build(
        self,
        records: RecordSet,
        filter_spec: Optional[FilterSpec] = None,
        reachability: Optional[ReachabilityEngine] = None,
    ) -> GraphView:
        """Build a GraphView.

        Args:
            records: Complete record set of the project.
            filter_spec: Filters to apply. None shows everything.
            reachability: Optional prebuilt engine for ``records``, reused
                to avoid indexing the lineage again.

        Returns:
            GraphView whose links all connect nodes of the same view.

        Raises:
            FilterConflictError: If more than one focus is set and
                ``config.on_focus_conflict`` is FAIL.
        """
        return self._build(records, filter_spec, reachability)

    def _build(
        self,
        records: RecordSet,
        filter_spec: Optional[FilterSpec],
        reachability: Optional[ReachabilityEngine],
    ) -> GraphView:
        # Called one frame below a public entry point; warnings point past it.
        spec = self._resolve_focus(filter_spec or FilterSpec(), stacklevel=4)
        engine = reachability or ReachabilityEngine(records)

        table_ids, dashboard_ids = self._resolve_node_ids(records, spec, engine)
        links = self._resolve_links(records, table_ids, dashboard_ids)

        counts: dict[str, int] = {}
        for link in links:
            counts[link.source_id] = counts.get(link.source_id, 0) + 1
            counts[link.target_id] = counts.get(link.target_id, 0) + 1

        nodes: list[GraphNode] = []
        for table in records.tables:
            if table.id in table_ids:
                nodes.append(TableNode(table, counts.get(table.id, 0)))
        for dashboard in records.dashboards:
            if dashboard.id in dashboard_ids:
                nodes.append(DashboardNode(dashboard, counts.get(dashboard.id, 0)))

        return GraphView(nodes, links)

    def _resolve_focus(self, spec: FilterSpec, stacklevel: int) -> FilterSpec:
        fields = spec.focus_fields()
        if len(fields) <= 1:
            return spec

        message = (
            f"Focus filters are mutually exclusive but {', '.join(fields)} "
            f"are all set. Applying '{fields[0]}'."
        )
        mode = self.config.on_focus_conflict
        if mode == ErrorMode.FAIL:
            raise FilterConflictError(message, fields)
        if mode == ErrorMode.WARN:
            warnings.warn(message, FocusConflictWarning, stacklevel=stacklevel)
        return spec.with_single_focus()

    def _resolve_node_ids(
        self, records: RecordSet, spec: FilterSpec, engine: ReachabilityEngine
    ) -> tuple[set[str], set[str]]:
        if spec.focused_table_id:
            table_ids = {
                table_id
                for table_id in engine.lineage_of(spec.focused_table_id)
                if records.has_table(table_id)
            }
            dashboard_ids: set[str] = set()
            if spec.include_linked_dashboards:
                for table_id in table_ids:
                    dashboard_ids.update(
                        d
                        for d in engine.dashboards_for_table(table_id)
                        if records.has_dashboard(d)
                    )
            return table_ids, dashboard_ids

        if spec.focused_dashboard_id:
            if not records.has_dashboard(spec.focused_dashboard_id):
                return set(), set()
            table_ids = {
                table_id
                for table_id in engine.tables_reachable_from_dashboard(
                    spec.focused_dashboard_id
                )
                if records.has_table(table_id)
            }
            return table_ids, {spec.focused_dashboard_id}

        table_ids = {t.id for t in records.tables if spec.matches_table(t)}
        dashboard_ids = {d.id for d in records.dashboards if spec.matches_dashboard(d)}

        if spec.selected_dashboard_id:
            table_ids &= engine.tables_reachable_from_dashboard(
                spec.selected_dashboard_id
            )
            dashboard_ids &= {spec.selected_dashboard_id}

        return table_ids, dashboard_ids

    @staticmethod
    def _resolve_links(
        records: RecordSet, table_ids: set[str], dashboard_ids: set[str]
    ) -> list[GraphLink]:
        links = [
            GraphLink(edge.source_table_id, edge.target_table_id, "lineage")
            for edge in records.lineage_edges
            if edge.source_table_id in table_ids and edge.target_table_id in table_ids
        ]
        links.extend(
            GraphLink(edge.table_id, edge.dashboard_id, "dashboard")
            for edge in records.dashboard_edges
            if edge.table_id in table_ids and edge.dashboard_id in dashboard_ids
        )
        return links


def build_graph_view(
    records: RecordSet,
    filter_spec: Optional[FilterSpec] = None,
    config: Optional[GraphConfig] = None,
) -> GraphView:
    """Build a GraphView with a one-off GraphBuilder."""
    return GraphBuilder(config)._build(records, filter_spec, None)
