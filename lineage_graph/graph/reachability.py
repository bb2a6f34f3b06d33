"""
Reachability queries over table lineage.

This module defines the ReachabilityEngine class, which uses networkx to
answer upstream / downstream lineage questions and dashboard membership
questions over the complete (unfiltered) record set.
"""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from lineage_graph.models.records import RecordSet


@dataclass(frozen=True)
class ConnectionSummary:
    """Direct connections of a table, as shown before deleting it.

    Attributes:
        table_id: Table the summary is for.
        upstream_count: Lineage edges feeding the table.
        downstream_count: Lineage edges the table feeds.
        dashboard_count: Dashboards the table feeds.
    """

    table_id: str
    upstream_count: int = 0
    downstream_count: int = 0
    dashboard_count: int = 0

    @property
    def total(self) -> int:
        return self.upstream_count + self.downstream_count + self.dashboard_count

    def to_dict(self) -> dict[str, object]:
        return {
            "table_id": self.table_id,
            "upstream": self.upstream_count,
            "downstream": self.downstream_count,
            "dashboards": self.dashboard_count,
            "total": self.total,
        }


class ReachabilityEngine:
    """Lineage reachability over a RecordSet.

    The lineage edges are loaded into a networkx DiGraph once, at
    construction. The engine is not modified afterwards, so one instance can
    serve any number of callers. Every query walks the graph iteratively
    with its own visited set, so cyclic lineage terminates, and every query
    on an unknown id returns an empty result instead of raising.

    Attributes:
        graph: networkx DiGraph of table ids; an edge u -> v means u feeds v.

    Example:
        >>> records = RecordSet(
        ...     tables=[Table("a", "A"), Table("b", "B"), Table("c", "C")],
        ...     lineage_edges=[
        ...         TableLineageEdge("a", "b"),
        ...         TableLineageEdge("b", "c"),
        ...     ],
        ... )
        >>> engine = ReachabilityEngine(records)
        >>> sorted(engine.upstream("c"))
        ['a', 'b']
        >>> engine.upstream_with_distance("c")
        {'b': 1, 'a': 2}
    """

    def __init__(self, records: RecordSet) -> None:
        """Build the lineage graph from a RecordSet.

        Args:
            records: Records to index. Edges are taken as they are, even when
                an endpoint has no table record; the graph builder drops
                such endpoints when it builds a view.
        """
        self.graph = nx.DiGraph()
        self.graph.add_nodes_from(table.id for table in records.tables)
        self.graph.add_edges_from(edge.key for edge in records.lineage_edges)

        self._dashboard_tables: dict[str, list[str]] = {}
        self._table_dashboards: dict[str, list[str]] = {}
        for edge in records.dashboard_edges:
            self._dashboard_tables.setdefault(edge.dashboard_id, []).append(
                edge.table_id
            )
            self._table_dashboards.setdefault(edge.table_id, []).append(
                edge.dashboard_id
            )

    def upstream(self, table_id: str) -> set[str]:
        """Get every table that transitively feeds ``table_id``.

        The table itself is never part of the result, even when it sits on
        a cycle.

        Args:
            table_id: Table to start from.

        Returns:
            Set of upstream table ids (empty for unknown ids).
        """
        if table_id not in self.graph:
            return set()
        return nx.ancestors(self.graph, table_id)

    def downstream(self, table_id: str) -> set[str]:
        """Get every table that ``table_id`` transitively feeds.

        Args:
            table_id: Table to start from.

        Returns:
            Set of downstream table ids (empty for unknown ids).
        """
        if table_id not in self.graph:
            return set()
        return nx.descendants(self.graph, table_id)

    def upstream_with_distance(self, table_id: str) -> dict[str, int]:
        """Get upstream tables with their minimum hop count from ``table_id``.

        Breadth-first, so when a table is reachable along several paths the
        shortest one wins. Keys are ordered by discovery.

        Args:
            table_id: Table to start from.

        Returns:
            Mapping of upstream table id to distance (1 = direct source).
        """
        if table_id not in self.graph:
            return {}
        return self._distances(self.graph.reverse(copy=False), table_id)

    def downstream_with_distance(self, table_id: str) -> dict[str, int]:
        """Get downstream tables with their minimum hop count from ``table_id``.

        Args:
            table_id: Table to start from.

        Returns:
            Mapping of downstream table id to distance (1 = direct target).
        """
        if table_id not in self.graph:
            return {}
        return self._distances(self.graph, table_id)

    def lineage_of(self, table_id: str) -> set[str]:
        """Get a table together with its full upstream and downstream lineage.

        Returns:
            ``{table_id} | upstream | downstream``, or an empty set for
            unknown ids.
        """
        if table_id not in self.graph:
            return set()
        return {table_id} | self.upstream(table_id) | self.downstream(table_id)

    def direct_tables_for_dashboard(self, dashboard_id: str) -> list[str]:
        """Get the tables linked to a dashboard by a dashboard-table edge."""
        return list(self._dashboard_tables.get(dashboard_id, []))

    def dashboards_for_table(self, table_id: str) -> list[str]:
        """Get the dashboards a table feeds directly."""
        return list(self._table_dashboards.get(table_id, []))

    def tables_reachable_from_dashboard(self, dashboard_id: str) -> set[str]:
        """Get every table connected to a dashboard through lineage.

        This is broader than direct membership: it is the union of the
        dashboard's direct tables and, for each of them, its full upstream
        and downstream lineage. A table can be in the result without any
        dashboard-table edge to this dashboard.

        Args:
            dashboard_id: Dashboard to start from.

        Returns:
            Set of table ids (empty for unknown dashboards).
        """
        reachable: set[str] = set()
        for table_id in self._dashboard_tables.get(dashboard_id, []):
            reachable.add(table_id)
            reachable |= self.upstream(table_id)
            reachable |= self.downstream(table_id)
        return reachable

    def connection_summary(self, table_id: str) -> ConnectionSummary:
        """Count the edges that deleting ``table_id`` would remove."""
        if table_id not in self.graph:
            return ConnectionSummary(
                table_id=table_id,
                dashboard_count=len(self._table_dashboards.get(table_id, [])),
            )
        return ConnectionSummary(
            table_id=table_id,
            upstream_count=sum(
                1 for source in self.graph.predecessors(table_id) if source != table_id
            ),
            downstream_count=sum(
                1 for target in self.graph.successors(table_id) if target != table_id
            ),
            dashboard_count=len(self._table_dashboards.get(table_id, [])),
        )

    @staticmethod
    def _distances(graph: nx.DiGraph, origin: str) -> dict[str, int]:
        lengths = nx.single_source_shortest_path_length(graph, origin)
        return {node: hops for node, hops in lengths.items() if node != origin}


def upstream(records: RecordSet, table_id: str) -> set[str]:
    """Shortcut for ``ReachabilityEngine(records).upstream(table_id)``."""
    return ReachabilityEngine(records).upstream(table_id)


def downstream(records: RecordSet, table_id: str) -> set[str]:
    """Shortcut for ``ReachabilityEngine(records).downstream(table_id)``."""
    return ReachabilityEngine(records).downstream(table_id)


def upstream_with_distance(records: RecordSet, table_id: str) -> dict[str, int]:
    """Shortcut for ``ReachabilityEngine(records).upstream_with_distance(table_id)``."""
    return ReachabilityEngine(records).upstream_with_distance(table_id)


def downstream_with_distance(records: RecordSet, table_id: str) -> dict[str, int]:
    """Shortcut for ``ReachabilityEngine(records).downstream_with_distance(table_id)``."""
    return ReachabilityEngine(records).downstream_with_distance(table_id)


def tables_reachable_from_dashboard(records: RecordSet, dashboard_id: str) -> set[str]:
    """Shortcut for ``ReachabilityEngine(records).tables_reachable_from_dashboard(...)``."""
    return ReachabilityEngine(records).tables_reachable_from_dashboard(dashboard_id)
