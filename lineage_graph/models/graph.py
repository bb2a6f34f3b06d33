"""
Graph view models.

This module defines the derived, non-persisted graph structures handed to
layout engines and renderers: the TableNode / DashboardNode tagged union,
GraphLink, GraphView and Point.

Nodes are immutable. Positions are never stored on a node; layout engines
keep them in a separate table keyed by node id, so the same logical node can
appear in several views without aliasing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Optional, Union

from lineage_graph.models.records import Dashboard, Layer, Table


@dataclass(frozen=True)
class TableNode:
    """Graph node wrapping a Table record.

    Attributes:
        table: Underlying table record.
        connection_count: Number of edges touching this node in the view it
            was built for.
        kind: Discriminator, always ``"table"``.
    """

    table: Table
    connection_count: int = 0
    kind: Literal["table"] = field(default="table", init=False)

    @property
    def id(self) -> str:
        return self.table.id

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def layer(self) -> Layer:
        return self.table.layer

    @property
    def is_scheduled_query(self) -> bool:
        return self.table.is_scheduled_query

    def to_dict(self) -> dict[str, Any]:
        data = self.table.to_dict()
        data.update(node_type=self.kind, connection_count=self.connection_count)
        return data


@dataclass(frozen=True)
class DashboardNode:
    """Graph node wrapping a Dashboard record.

    Attributes:
        dashboard: Underlying dashboard record.
        connection_count: Number of edges touching this node in the view.
        kind: Discriminator, always ``"dashboard"``.
    """

    dashboard: Dashboard
    connection_count: int = 0
    kind: Literal["dashboard"] = field(default="dashboard", init=False)

    @property
    def id(self) -> str:
        return self.dashboard.id

    @property
    def name(self) -> str:
        return self.dashboard.name

    def to_dict(self) -> dict[str, Any]:
        data = self.dashboard.to_dict()
        data.update(node_type=self.kind, connection_count=self.connection_count)
        return data


GraphNode = Union[TableNode, DashboardNode]


@dataclass(frozen=True)
class GraphLink:
    """An edge of a GraphView.

    Each endpoint is either a node id or a resolved GraphNode. Layout code
    may hand back links with resolved endpoints; ``source_id`` and
    ``target_id`` read either form.

    Attributes:
        source: Source node id or node.
        target: Target node id or node.
        kind: ``"lineage"`` for table->table, ``"dashboard"`` for
            table->dashboard.
    """

    source: Union[str, GraphNode]
    target: Union[str, GraphNode]
    kind: Literal["lineage", "dashboard"] = "lineage"

    @property
    def source_id(self) -> str:
        return self.source if isinstance(self.source, str) else self.source.id

    @property
    def target_id(self) -> str:
        return self.target if isinstance(self.target, str) else self.target.id

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_id, self.target_id)

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source_id, "target": self.target_id, "kind": self.kind}


@dataclass(frozen=True)
class Point:
    """A 2-D position."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


class GraphView:
    """Filtered snapshot of nodes and links consumed by the layout engines.

    Node order is the order the builder produced (tables, then dashboards,
    each in record order), and link order likewise.

    Example:
        >>> view = GraphView([TableNode(Table("a", "A"))], [])
        >>> view.get_node("a").name
        'A'
        >>> view.has_node("b")
        False
    """

    def __init__(
        self, nodes: Iterable[GraphNode] = (), links: Iterable[GraphLink] = ()
    ) -> None:
        self.nodes: tuple[GraphNode, ...] = tuple(nodes)
        self.links: tuple[GraphLink, ...] = tuple(links)
        self._index: dict[str, GraphNode] = {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._index.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def table_nodes(self) -> list[TableNode]:
        return [node for node in self.nodes if isinstance(node, TableNode)]

    def dashboard_nodes(self) -> list[DashboardNode]:
        return [node for node in self.nodes if isinstance(node, DashboardNode)]

    def neighbors(self, node_id: str) -> list[str]:
        """Ids of nodes linked to ``node_id`` in either direction, in link order."""
        result: list[str] = []
        for link in self.links:
            if link.source_id == node_id and link.target_id not in result:
                result.append(link.target_id)
            elif link.target_id == node_id and link.source_id not in result:
                result.append(link.source_id)
        return result

    def max_table_connection_count(self) -> int:
        return max((node.connection_count for node in self.table_nodes()), default=0)

    def resolved_links(self) -> list[GraphLink]:
        """Links with both endpoints replaced by the node objects of this view."""
        return [
            GraphLink(
                source=self._index[link.source_id],
                target=self._index[link.target_id],
                kind=link.kind,
            )
            for link in self.links
        ]

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"GraphView(nodes={len(self.nodes)}, links={len(self.links)})"

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Export the view in a JSON-ready nodes/links format."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }
