"""
Abstract record store interface.

This module defines the RecordStore abstract base class. A record store
serves the four record collections of a project (tables, table lineage
edges, dashboards and dashboard-table edges). The engine only reads from it;
writes go through the concrete store's own API.
"""

from abc import ABC, abstractmethod

from lineage_graph.models.records import (
    Dashboard,
    DashboardTableEdge,
    RecordSet,
    Table,
    TableLineageEdge,
)


class RecordStore(ABC):
    """Abstract interface for project-keyed record stores.

    Implementations may read from a database, an API or a file. The graph
    builder only needs a RecordSet, which ``load_record_set`` assembles from
    the four getters.

    Example:
        >>> class MyStore(RecordStore):
        ...     def get_tables(self, project_id): return []
        ...     def get_lineage_edges(self, project_id): return []
        ...     def get_dashboards(self, project_id): return []
        ...     def get_dashboard_table_edges(self, project_id): return []
        >>> len(MyStore().load_record_set("p1"))
        0
    """

    @abstractmethod
    def get_tables(self, project_id: str) -> list[Table]:
        """Return all tables of a project in insertion order.

        Args:
            project_id: Project to read.

        Raises:
            RecordStoreError: If the project cannot be read.
        """

    @abstractmethod
    def get_lineage_edges(self, project_id: str) -> list[TableLineageEdge]:
        """Return all table-to-table edges of a project."""

    @abstractmethod
    def get_dashboards(self, project_id: str) -> list[Dashboard]:
        """Return all dashboards of a project."""

    @abstractmethod
    def get_dashboard_table_edges(self, project_id: str) -> list[DashboardTableEdge]:
        """Return all dashboard-to-table edges of a project."""

    def load_record_set(self, project_id: str) -> RecordSet:
        """Read the four collections of a project into a RecordSet.

        Args:
            project_id: Project to read.

        Returns:
            RecordSet holding the project's records.

        Raises:
            RecordStoreError: If the project cannot be read.
        """
        return RecordSet(
            tables=self.get_tables(project_id),
            lineage_edges=self.get_lineage_edges(project_id),
            dashboards=self.get_dashboards(project_id),
            dashboard_edges=self.get_dashboard_table_edges(project_id),
        )
