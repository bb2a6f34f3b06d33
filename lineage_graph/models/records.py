"""
Record models for lineage data.

This module defines the flat records the engine consumes (tables, lineage
edges, dashboards and dashboard-table edges) and the RecordSet bundle that
groups the four collections for one project.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional


class Layer(str, Enum):
    """Ordered processing stage a table belongs to.

    The declaration order is the processing order: Raw feeds Inter, Inter
    feeds Target, Target feeds Reporting. ``rank`` exposes that order as a
    column index for the hierarchical layout.

    Example:
        >>> Layer.RAW.rank
        0
        >>> Layer.parse("reporting")
        <Layer.REPORTING: 'Reporting'>
    """

    RAW = "Raw"
    INTER = "Inter"
    TARGET = "Target"
    REPORTING = "Reporting"

    @property
    def rank(self) -> int:
        """Column index of this layer (Raw=0 ... Reporting=3)."""
        return list(Layer).index(self)

    @classmethod
    def parse(cls, value: Any) -> Optional["Layer"]:
        """Match a layer name case-insensitively, or return None."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None

    @classmethod
    def values(cls) -> list[str]:
        """Return all layer names in processing order."""
        return [member.value for member in cls]


class TableType(str, Enum):
    """Kind of object a table record describes."""

    TABLE = "Table"
    VIEW = "View"
    QUERY = "Query"
    SHEET = "Sheet"

    @classmethod
    def parse(cls, value: Any) -> Optional["TableType"]:
        """Match a table type name case-insensitively, or return None."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None

    @classmethod
    def values(cls) -> list[str]:
        """Return all table type names."""
        return [member.value for member in cls]


@dataclass(frozen=True)
class Table:
    """A table, view, scheduled query or sheet in the lineage.

    Attributes:
        id: Unique, stable identifier, used as the graph node key.
        name: Display name.
        dataset: Grouping label (dataset or custom query name).
        layer: Processing stage.
        table_type: Kind of object.
        is_scheduled_query: Whether the table is produced by a scheduled query.
        link: Optional URL to the table.
        description: Optional free text.
    """

    id: str
    name: str
    dataset: str = ""
    layer: Layer = Layer.RAW
    table_type: TableType = TableType.TABLE
    is_scheduled_query: bool = False
    link: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dataset": self.dataset,
            "layer": self.layer.value,
            "table_type": self.table_type.value,
            "is_scheduled_query": self.is_scheduled_query,
            "link": self.link,
            "description": self.description,
        }


@dataclass(frozen=True)
class TableLineageEdge:
    """Directed table-to-table edge: the source table feeds the target table."""

    source_table_id: str
    target_table_id: str
    source_table_name: str = ""
    target_table_name: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_table_id, self.target_table_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_table_id": self.source_table_id,
            "target_table_id": self.target_table_id,
            "source_table_name": self.source_table_name,
            "target_table_name": self.target_table_name,
        }


@dataclass(frozen=True)
class Dashboard:
    """A dashboard fed by one or more tables."""

    id: str
    name: str
    owner: Optional[str] = None
    business_area: Optional[str] = None
    link: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "business_area": self.business_area,
            "link": self.link,
        }


@dataclass(frozen=True)
class DashboardTableEdge:
    """A table feeding a dashboard. Dashboards never feed tables."""

    dashboard_id: str
    table_id: str
    dashboard_name: str = ""
    table_name: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.dashboard_id, self.table_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dashboard_id": self.dashboard_id,
            "table_id": self.table_id,
            "dashboard_name": self.dashboard_name,
            "table_name": self.table_name,
        }


class RecordSet:
    """The four record collections of one project.

    Collections keep insertion order so that graphs built from the same
    records are stable between calls. Duplicates are dropped on
    construction: the first table or dashboard with a given id wins, and
    edges are unique on their endpoint pair.

    A RecordSet is not modified after construction; build a new one when
    the underlying records change.

    Example:
        >>> records = RecordSet(
        ...     tables=[Table("a", "A"), Table("b", "B")],
        ...     lineage_edges=[TableLineageEdge("a", "b")],
        ... )
        >>> records.get_table("a").name
        'A'
    """

    def __init__(
        self,
        tables: Iterable[Table] = (),
        lineage_edges: Iterable[TableLineageEdge] = (),
        dashboards: Iterable[Dashboard] = (),
        dashboard_edges: Iterable[DashboardTableEdge] = (),
    ) -> None:
        self._tables: dict[str, Table] = {}
        for table in tables:
            self._tables.setdefault(table.id, table)

        self._dashboards: dict[str, Dashboard] = {}
        for dashboard in dashboards:
            self._dashboards.setdefault(dashboard.id, dashboard)

        self.lineage_edges: tuple[TableLineageEdge, ...] = tuple(
            _unique_by_key(lineage_edges)
        )
        self.dashboard_edges: tuple[DashboardTableEdge, ...] = tuple(
            _unique_by_key(dashboard_edges)
        )

    @classmethod
    def from_dict(cls, document: dict[str, Any], collector=None) -> "RecordSet":
        """Build a RecordSet from a JSON-style document.

        Records missing required fields are skipped; see
        ``lineage_graph.store.loader.record_set_from_dict``.
        """
        from lineage_graph.store.loader import record_set_from_dict

        return record_set_from_dict(document, collector)

    @property
    def tables(self) -> tuple[Table, ...]:
        return tuple(self._tables.values())

    @property
    def dashboards(self) -> tuple[Dashboard, ...]:
        return tuple(self._dashboards.values())

    def get_table(self, table_id: str) -> Optional[Table]:
        return self._tables.get(table_id)

    def get_dashboard(self, dashboard_id: str) -> Optional[Dashboard]:
        return self._dashboards.get(dashboard_id)

    def has_table(self, table_id: str) -> bool:
        return table_id in self._tables

    def has_dashboard(self, dashboard_id: str) -> bool:
        return dashboard_id in self._dashboards

    def datasets(self) -> list[str]:
        """Distinct dataset labels, sorted, for filter pickers."""
        return sorted({t.dataset for t in self._tables.values() if t.dataset})

    def __len__(self) -> int:
        return len(self._tables) + len(self._dashboards)

    def __repr__(self) -> str:
        return (
            f"RecordSet(tables={len(self._tables)}, "
            f"lineage_edges={len(self.lineage_edges)}, "
            f"dashboards={len(self._dashboards)}, "
            f"dashboard_edges={len(self.dashboard_edges)})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Export to dictionary (for serialization)."""
        return {
            "tables": [t.to_dict() for t in self.tables],
            "lineage_edges": [e.to_dict() for e in self.lineage_edges],
            "dashboards": [d.to_dict() for d in self.dashboards],
            "dashboard_table_edges": [e.to_dict() for e in self.dashboard_edges],
        }


def _unique_by_key(edges):
    seen = set()
    for edge in edges:
        if edge.key in seen:
            continue
        seen.add(edge.key)
        yield edge
