"""
Filter specification for graph building.

This module defines FilterSpec, the caller-supplied description of which
tables and dashboards a GraphView should contain.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from lineage_graph.models.records import Dashboard, Layer, Table, TableType

# Highest precedence first. When more than one focus is set, the first one
# present in this order is applied.
FOCUS_PRECEDENCE: tuple[str, ...] = (
    "focused_table_id",
    "focused_dashboard_id",
    "selected_dashboard_id",
)


@dataclass(frozen=True)
class FilterSpec:
    """Filters applied when building a GraphView.

    Attribute filters (datasets, layers, table_types, scheduled_only,
    search_term) narrow the regular view; an empty allow-list allows
    everything. At most one focus may be set:

    * ``selected_dashboard_id`` keeps only tables reachable from that
      dashboard (attribute filters still apply) and only that dashboard.
    * ``focused_table_id`` shows the table plus its full upstream and
      downstream lineage.
    * ``focused_dashboard_id`` shows the dashboard plus every table
      reachable from it.

    Focused table and focused dashboard ignore the attribute filters.

    Attributes:
        datasets: Dataset allow-list.
        layers: Layer allow-list (names or Layer members).
        table_types: Table type allow-list (names or TableType members).
        scheduled_only: Keep only scheduled-query tables.
        search_term: Case-insensitive substring matched against table
            name/id/dataset and dashboard name/id/owner/business area.
        selected_dashboard_id: Dashboard whose tables to show.
        focused_table_id: Table whose lineage to show.
        focused_dashboard_id: Dashboard whose lineage to show.
        include_linked_dashboards: With a focused table, also show the
            dashboards fed by any table of the focused lineage.

    Example:
        >>> spec = FilterSpec(layers=["Raw"])
        >>> spec.layers
        (<Layer.RAW: 'Raw'>,)
        >>> spec.focus_fields()
        []
    """

    datasets: tuple[str, ...] = ()
    layers: tuple[Layer, ...] = ()
    table_types: tuple[TableType, ...] = ()
    scheduled_only: bool = False
    search_term: str = ""
    selected_dashboard_id: Optional[str] = None
    focused_table_id: Optional[str] = None
    focused_dashboard_id: Optional[str] = None
    include_linked_dashboards: bool = False

    def __post_init__(self) -> None:
        """Normalize allow-lists and validate filter values."""
        object.__setattr__(self, "datasets", tuple(self.datasets))
        object.__setattr__(
            self, "layers", tuple(_parse_all(self.layers, Layer, "layer"))
        )
        object.__setattr__(
            self,
            "table_types",
            tuple(_parse_all(self.table_types, TableType, "table type")),
        )
        if not isinstance(self.scheduled_only, bool):
            raise TypeError("scheduled_only must be a boolean")
        if not isinstance(self.include_linked_dashboards, bool):
            raise TypeError("include_linked_dashboards must be a boolean")
        object.__setattr__(self, "search_term", (self.search_term or "").strip())

    def focus_fields(self) -> list[str]:
        """Names of the focus fields that are set, highest precedence first."""
        return [name for name in FOCUS_PRECEDENCE if getattr(self, name)]

    def with_single_focus(self) -> "FilterSpec":
        """Return a copy keeping only the highest-precedence focus."""
        fields = self.focus_fields()
        if len(fields) <= 1:
            return self
        return replace(self, **{name: None for name in fields[1:]})

    def matches_table(self, table: Table) -> bool:
        """Check a table against the attribute filters."""
        if self.datasets and table.dataset not in self.datasets:
            return False
        if self.layers and table.layer not in self.layers:
            return False
        if self.table_types and table.table_type not in self.table_types:
            return False
        if self.scheduled_only and not table.is_scheduled_query:
            return False
        if self.search_term:
            needle = self.search_term.lower()
            haystack = (table.name, table.id, table.dataset)
            if not any(needle in value.lower() for value in haystack):
                return False
        return True

    def matches_dashboard(self, dashboard: Dashboard) -> bool:
        """Check a dashboard against the search term (its only attribute filter)."""
        if not self.search_term:
            return True
        needle = self.search_term.lower()
        haystack = (
            dashboard.name,
            dashboard.id,
            dashboard.owner or "",
            dashboard.business_area or "",
        )
        return any(needle in value.lower() for value in haystack)


def _parse_all(values: Iterable, enum_cls, label: str) -> list:
    if isinstance(values, str):
        values = [values]
    parsed = []
    for value in values:
        member = enum_cls.parse(value)
        if member is None:
            raise ValueError(
                f"Invalid {label}: {value!r}. Must be one of {enum_cls.values()}"
            )
        parsed.append(member)
    return parsed
