"""
In-memory record store.

This module defines DictRecordStore, a RecordStore backed by dictionaries.
It is used by the command-line tool and by tests, and mirrors the behavior
expected from a persistent store: records are upserted by id, edges are
unique on their endpoints, and deleting a table or dashboard removes the
edges that reference it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from lineage_graph.exceptions import RecordStoreError
from lineage_graph.models.records import (
    Dashboard,
    DashboardTableEdge,
    RecordSet,
    Table,
    TableLineageEdge,
)
from lineage_graph.store.provider import RecordStore


@dataclass
class _Project:
    tables: dict[str, Table] = field(default_factory=dict)
    lineage_edges: dict[tuple[str, str], TableLineageEdge] = field(default_factory=dict)
    dashboards: dict[str, Dashboard] = field(default_factory=dict)
    dashboard_edges: dict[tuple[str, str], DashboardTableEdge] = field(
        default_factory=dict
    )


class DictRecordStore(RecordStore):
    """Record store that keeps every project in memory.

    Projects are created on first write or with ``create_project``. Reading
    a project that does not exist raises RecordStoreError.

    Example:
        >>> store = DictRecordStore()
        >>> store.put_table("p1", Table("orders", "Orders"))
        >>> store.put_table("p1", Table("daily", "Daily"))
        >>> store.put_lineage_edge("p1", TableLineageEdge("orders", "daily"))
        >>> store.delete_table("p1", "orders")
        True
        >>> store.get_lineage_edges("p1")
        []
    """

    def __init__(self, projects: Optional[dict[str, RecordSet]] = None) -> None:
        self._projects: dict[str, _Project] = {}
        for project_id, records in (projects or {}).items():
            self.add_record_set(project_id, records)

    def project_ids(self) -> list[str]:
        return list(self._projects)

    def has_project(self, project_id: str) -> bool:
        return project_id in self._projects

    def create_project(self, project_id: str) -> None:
        """Create an empty project. Existing projects are left untouched."""
        if not project_id:
            raise ValueError("project_id must be a non-empty string")
        self._projects.setdefault(project_id, _Project())

    def delete_project(self, project_id: str) -> None:
        self._project(project_id)
        del self._projects[project_id]

    def add_record_set(self, project_id: str, records: RecordSet) -> None:
        """Upsert every record of a RecordSet into a project."""
        self.create_project(project_id)
        for table in records.tables:
            self.put_table(project_id, table)
        for edge in records.lineage_edges:
            self.put_lineage_edge(project_id, edge)
        for dashboard in records.dashboards:
            self.put_dashboard(project_id, dashboard)
        for edge in records.dashboard_edges:
            self.put_dashboard_table_edge(project_id, edge)

    # Reads

    def get_tables(self, project_id: str) -> list[Table]:
        return list(self._project(project_id).tables.values())

    def get_lineage_edges(self, project_id: str) -> list[TableLineageEdge]:
        return list(self._project(project_id).lineage_edges.values())

    def get_dashboards(self, project_id: str) -> list[Dashboard]:
        return list(self._project(project_id).dashboards.values())

    def get_dashboard_table_edges(self, project_id: str) -> list[DashboardTableEdge]:
        return list(self._project(project_id).dashboard_edges.values())

    # Writes

    def put_table(self, project_id: str, table: Table) -> None:
        self.create_project(project_id)
        self._projects[project_id].tables[table.id] = table

    def put_lineage_edge(self, project_id: str, edge: TableLineageEdge) -> None:
        self.create_project(project_id)
        self._projects[project_id].lineage_edges[edge.key] = edge

    def put_dashboard(self, project_id: str, dashboard: Dashboard) -> None:
        self.create_project(project_id)
        self._projects[project_id].dashboards[dashboard.id] = dashboard

    def put_dashboard_table_edge(
        self, project_id: str, edge: DashboardTableEdge
    ) -> None:
        self.create_project(project_id)
        self._projects[project_id].dashboard_edges[edge.key] = edge

    def delete_table(self, project_id: str, table_id: str) -> bool:
        """Delete a table and every lineage and dashboard edge touching it.

        Returns:
            True if the table existed.
        """
        project = self._project(project_id)
        existed = project.tables.pop(table_id, None) is not None
        project.lineage_edges = {
            key: edge
            for key, edge in project.lineage_edges.items()
            if table_id not in key
        }
        project.dashboard_edges = {
            key: edge
            for key, edge in project.dashboard_edges.items()
            if edge.table_id != table_id
        }
        return existed

    def delete_dashboard(self, project_id: str, dashboard_id: str) -> bool:
        """Delete a dashboard and its dashboard-table edges."""
        project = self._project(project_id)
        existed = project.dashboards.pop(dashboard_id, None) is not None
        project.dashboard_edges = {
            key: edge
            for key, edge in project.dashboard_edges.items()
            if edge.dashboard_id != dashboard_id
        }
        return existed

    def delete_lineage_edge(
        self, project_id: str, source_table_id: str, target_table_id: str
    ) -> bool:
        project = self._project(project_id)
        return project.lineage_edges.pop((source_table_id, target_table_id), None) is not None

    def delete_dashboard_table_edge(
        self, project_id: str, dashboard_id: str, table_id: str
    ) -> bool:
        project = self._project(project_id)
        return project.dashboard_edges.pop((dashboard_id, table_id), None) is not None

    def _project(self, project_id: str) -> _Project:
        try:
            return self._projects[project_id]
        except KeyError:
            raise RecordStoreError(
                f"Unknown project: '{project_id}'", project_id=project_id
            ) from None
