"""
Hierarchical left-to-right layout.

This module defines HierarchicalLayoutEngine, a layered (Sugiyama-style)
layout for lineage views. Columns come from the processing layer of each
table (Raw, Inter, Target, Reporting), dashboards always form the rightmost
column, and nodes within a column are ordered by barycenter sweeps to reduce
edge crossings.

Layout pipeline:
    1. Resolve node dimensions (measured, then declared, then default)
    2. Assign ranks from layers and compress empty ranks into columns
    3. Order nodes within columns (barycenter sweeps over a networkx graph)
    4. Assign center coordinates with spacing derived from average node size
    5. Convert centers to top-left coordinates

If any step fails, a deterministic grouped layout is returned instead and a
WARNING is recorded on the result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import networkx as nx

from lineage_graph.exceptions import LayoutError
from lineage_graph.layout.sizing import node_box
from lineage_graph.models.config import HierarchicalLayoutConfig
from lineage_graph.models.graph import DashboardNode, GraphNode, GraphView, TableNode
from lineage_graph.models.records import Layer
from lineage_graph.utils.warnings import WarningCollector

# Dashboards sit above every layer rank.
DASHBOARD_RANK = 10
# Tables without a layer are ranked with intermediate tables.
UNKNOWN_LAYER_RANK = Layer.INTER.rank
FALLBACK_COLUMNS: tuple[Optional[Layer], ...] = (
    Layer.RAW,
    Layer.INTER,
    Layer.TARGET,
    Layer.REPORTING,
    None,
)


@dataclass
class LayoutNode:
    """A node to be placed by the hierarchical layout.

    Attributes:
        id: Node id.
        layer: Processing layer, or None when unknown.
        is_dashboard: Whether the node is a dashboard.
        width: Declared width.
        height: Declared height.
        measured_width: Width measured by the rendering surface; preferred
            over the declared width when set.
        measured_height: Height measured by the rendering surface.
        data: The GraphNode this layout node was made from, if any.
    """

    id: str
    layer: Optional[Layer] = None
    is_dashboard: bool = False
    width: Optional[float] = None
    height: Optional[float] = None
    measured_width: Optional[float] = None
    measured_height: Optional[float] = None
    data: Optional[GraphNode] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Layer names from a rendering surface arrive as strings.
        if self.layer is not None:
            self.layer = Layer.parse(self.layer)

    def resolve_size(
        self, default_width: float, default_height: float
    ) -> tuple[float, float]:
        """Return (width, height): measured, else declared, else the default.

        The first finite positive number wins. The default only applies when
        neither a measured nor a declared value is set.

        Raises:
            LayoutError: If a dimension is set but never a finite positive number.
        """
        return (
            self._resolve("width", self.measured_width, self.width, default_width),
            self._resolve("height", self.measured_height, self.height, default_height),
        )

    def _resolve(
        self,
        name: str,
        measured: Optional[float],
        declared: Optional[float],
        default: float,
    ) -> float:
        for value in (measured, declared):
            if _usable(value):
                return value
        if measured is None and declared is None:
            return default
        raise LayoutError(f"Node '{self.id}' has no positive {name}", node_id=self.id)


@dataclass(frozen=True)
class PositionedNode:
    """A laid out node.

    Attributes:
        id: Node id.
        x: Left edge.
        y: Top edge.
        width: Width used for the layout.
        height: Height used for the layout.
        column: Zero-based column index, left to right.
        order: Zero-based position within the column, top to bottom.
    """

    id: str
    x: float
    y: float
    width: float
    height: float
    column: int
    order: int

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "column": self.column,
            "order": self.order,
        }


@dataclass
class HierarchicalLayout:
    """Result of a hierarchical layout.

    Attributes:
        nodes: Positioned nodes in input order.
        edges: (source, target) pairs whose endpoints were both laid out.
        ranks: Rank assigned to each node id (empty for the fallback).
        used_fallback: True if the grouped fallback layout was used.
        warnings: Diagnostics recorded during the layout.
    """

    nodes: list[PositionedNode]
    edges: list[tuple[str, str]]
    ranks: dict[str, int] = field(default_factory=dict)
    used_fallback: bool = False
    warnings: WarningCollector = field(default_factory=WarningCollector)

    def get(self, node_id: str) -> Optional[PositionedNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def columns(self) -> list[list[str]]:
        """Node ids per column, each column top to bottom."""
        columns: dict[int, list[PositionedNode]] = {}
        for node in self.nodes:
            columns.setdefault(node.column, []).append(node)
        return [
            [node.id for node in sorted(columns[index], key=lambda n: n.order)]
            for index in sorted(columns)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [{"source": s, "target": t} for s, t in self.edges],
            "used_fallback": self.used_fallback,
        }


class HierarchicalLayoutEngine:
    """Layered left-to-right layout with a never-failing fallback.

    Attributes:
        config: Spacing and fallback settings.

    Example:
        >>> engine = HierarchicalLayoutEngine()
        >>> nodes = [
        ...     LayoutNode("raw", Layer.RAW, width=80, height=60),
        ...     LayoutNode("dash", is_dashboard=True, width=120, height=120),
        ... ]
        >>> result = engine.layout(nodes, [("raw", "dash")])
        >>> result.columns()
        [['raw'], ['dash']]
    """

    def __init__(self, config: Optional[HierarchicalLayoutConfig] = None) -> None:
        self.config = config or HierarchicalLayoutConfig()

    def layout(
        self,
        nodes: Iterable[LayoutNode],
        edges: Iterable[tuple[str, str]],
    ) -> HierarchicalLayout:
        """Lay out nodes in columns by layer.

        Edges whose endpoints are not both among ``nodes`` are dropped.
        This method never raises for data problems: any failure of the
        layered layout falls back to ``fallback_layout``.

        Args:
            nodes: Nodes to place. Duplicate ids keep the first node.
            edges: (source id, target id) pairs.

        Returns:
            HierarchicalLayout with top-left coordinates for every node.
        """
        unique: dict[str, LayoutNode] = {}
        for node in nodes:
            unique.setdefault(node.id, node)
        node_list = list(unique.values())
        edge_list = list(
            dict.fromkeys(
                (source, target)
                for source, target in edges
                if source in unique and target in unique
            )
        )

        try:
            return self._layered_layout(node_list, edge_list)
        except LayoutError as e:
            reason, node_id = e.message, e.node_id
        except (nx.NetworkXException, ValueError, ArithmeticError) as e:
            reason, node_id = str(e) or type(e).__name__, None

        result = self.fallback_layout(node_list, edge_list)
        result.warnings.add_layout_fallback_warning(reason, node_id)
        return result

    # ------------------------------------------------------------------
    # Layered layout
    # ------------------------------------------------------------------

    def _layered_layout(
        self, nodes: list[LayoutNode], edges: list[tuple[str, str]]
    ) -> HierarchicalLayout:
        sizes = {
            node.id: node.resolve_size(
                self.config.default_width, self.config.default_height
            )
            for node in nodes
        }
        if not nodes:
            return HierarchicalLayout(nodes=[], edges=edges)

        ranks = {node.id: self.rank_of(node) for node in nodes}
        column_of = {
            rank: index for index, rank in enumerate(sorted(set(ranks.values())))
        }

        graph = nx.DiGraph()
        graph.add_nodes_from(node.id for node in nodes)
        graph.add_edges_from(edges)

        ordering: list[list[str]] = [[] for _ in column_of]
        for node in nodes:
            ordering[column_of[ranks[node.id]]].append(node.id)
        ordering = self._minimise_crossings(ordering, graph.to_undirected(as_view=True))

        centers = self._assign_centers(ordering, sizes)

        positioned = {}
        for column, column_ids in enumerate(ordering):
            for order, node_id in enumerate(column_ids):
                width, height = sizes[node_id]
                cx, cy = centers[node_id]
                positioned[node_id] = PositionedNode(
                    id=node_id,
                    x=round(cx - width / 2),
                    y=round(cy - height / 2),
                    width=width,
                    height=height,
                    column=column,
                    order=order,
                )

        return HierarchicalLayout(
            nodes=[positioned[node.id] for node in nodes],
            edges=edges,
            ranks=ranks,
        )

    @staticmethod
    def rank_of(node: LayoutNode) -> int:
        """Rank of a node: its layer rank, or DASHBOARD_RANK for dashboards."""
        if node.is_dashboard:
            return DASHBOARD_RANK
        if node.layer is None:
            return UNKNOWN_LAYER_RANK
        return node.layer.rank

    def _minimise_crossings(
        self, ordering: list[list[str]], graph: nx.Graph
    ) -> list[list[str]]:
        """Reorder columns with alternating barycenter sweeps.

        Sweeps stop once a pass no longer reduces the crossing count or
        ``crossing_passes`` is reached. Ties keep their current order, so the
        result only depends on the input order.
        """
        best = [list(column) for column in ordering]
        best_crossings = count_crossings(best, graph)
        current = [list(column) for column in best]

        for _ in range(self.config.crossing_passes):
            if best_crossings == 0:
                break
            for index in range(1, len(current)):
                _sort_by_barycenter(current, index, graph, range(index))
            for index in range(len(current) - 2, -1, -1):
                _sort_by_barycenter(
                    current, index, graph, range(index + 1, len(current))
                )
            crossings = count_crossings(current, graph)
            if crossings >= best_crossings:
                break
            best = [list(column) for column in current]
            best_crossings = crossings
        return best

    def _assign_centers(
        self, ordering: list[list[str]], sizes: dict[str, tuple[float, float]]
    ) -> dict[str, tuple[float, float]]:
        widths = [width for width, _ in sizes.values()]
        heights = [height for _, height in sizes.values()]
        avg_width = sum(widths) / len(widths)
        avg_height = sum(heights) / len(heights)

        config = self.config
        rank_sep = max(avg_width * config.rank_spacing_factor, config.min_rank_spacing)
        node_sep = max(avg_height * config.node_spacing_factor, config.min_node_spacing)
        margin_x = max(avg_width * config.margin_x_factor, config.min_margin_x)
        margin_y = max(avg_height * config.margin_y_factor, config.min_margin_y)

        extents = [
            sum(sizes[node_id][1] for node_id in column)
            + node_sep * max(len(column) - 1, 0)
            for column in ordering
        ]
        tallest = max(extents, default=0.0)

        centers: dict[str, tuple[float, float]] = {}
        left = margin_x
        for column, extent in zip(ordering, extents):
            column_width = max((sizes[node_id][0] for node_id in column), default=0.0)
            cx = left + column_width / 2
            top = margin_y + (tallest - extent) / 2
            for node_id in column:
                height = sizes[node_id][1]
                centers[node_id] = (cx, top + height / 2)
                top += height + node_sep
            left += column_width + rank_sep
        return centers

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------

    def fallback_layout(
        self, nodes: list[LayoutNode], edges: list[tuple[str, str]]
    ) -> HierarchicalLayout:
        """Grouped layout: one column per layer, dashboards on the far right.

        Columns are Raw, Inter, Target, Reporting and Unknown at a fixed
        horizontal spacing of ``fallback_column_factor`` times the widest
        node; dashboards get a column beyond those. Nodes stack top to
        bottom with a vertical spacing of the tallest node plus
        ``fallback_row_gap``. Sizes that are missing or not positive are
        replaced by the defaults, so this never raises.
        """
        sizes = {node.id: self._safe_size(node) for node in nodes}
        max_width = max((w for w, _ in sizes.values()), default=self.config.default_width)
        max_height = max((h for _, h in sizes.values()), default=self.config.default_height)
        column_spacing = max_width * self.config.fallback_column_factor
        row_spacing = max_height + self.config.fallback_row_gap
        origin = self.config.fallback_origin
        dashboard_column = len(FALLBACK_COLUMNS)

        rows: dict[int, int] = {}
        positioned = []
        for node in nodes:
            if node.is_dashboard:
                column = dashboard_column
                x = dashboard_column * column_spacing + 2 * origin
            else:
                column = FALLBACK_COLUMNS.index(node.layer)
                x = column * column_spacing + origin
            order = rows.get(column, 0)
            rows[column] = order + 1
            width, height = sizes[node.id]
            positioned.append(
                PositionedNode(
                    id=node.id,
                    x=x,
                    y=origin + order * row_spacing,
                    width=width,
                    height=height,
                    column=column,
                    order=order,
                )
            )
        return HierarchicalLayout(nodes=positioned, edges=edges, used_fallback=True)

    def _safe_size(self, node: LayoutNode) -> tuple[float, float]:
        width = _positive_or(
            self.config.default_width, node.measured_width, node.width
        )
        height = _positive_or(
            self.config.default_height, node.measured_height, node.height
        )
        return width, height


def _positive_or(default: float, *values: Optional[float]) -> float:
    for value in values:
        if _usable(value):
            return value
    return default


def _usable(value: Any) -> bool:
    """True for a finite, positive int or float (bools excluded)."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


def _sort_by_barycenter(
    ordering: list[list[str]],
    index: int,
    graph: nx.Graph,
    reference_columns: Iterable[int],
) -> None:
    """Sort one column by the mean position of its neighbors in other columns.

    Nodes without neighbors in the reference columns keep their current
    position as their sort key.
    """
    positions: dict[str, float] = {}
    for column in reference_columns:
        for position, node_id in enumerate(ordering[column]):
            positions[node_id] = float(position)

    def key(item: tuple[int, str]) -> float:
        current, node_id = item
        neighbor_positions = [
            positions[neighbor]
            for neighbor in graph.neighbors(node_id)
            if neighbor in positions
        ]
        if not neighbor_positions:
            return float(current)
        return sum(neighbor_positions) / len(neighbor_positions)

    ordering[index] = [
        node_id for _, node_id in sorted(enumerate(ordering[index]), key=key)
    ]


def count_crossings(ordering: list[list[str]], graph: nx.Graph) -> int:
    """Count edge crossings between consecutive columns."""
    total = 0
    for index in range(len(ordering) - 1):
        right = {node_id: i for i, node_id in enumerate(ordering[index + 1])}
        segments: list[tuple[int, int]] = []
        for left_position, node_id in enumerate(ordering[index]):
            for neighbor in graph.neighbors(node_id):
                if neighbor in right:
                    segments.append((left_position, right[neighbor]))
        for i in range(len(segments)):
            for j in range(i + 1, len(segments)):
                (a1, b1), (a2, b2) = segments[i], segments[j]
                if (a1 - a2) * (b1 - b2) < 0:
                    total += 1
    return total


def layout_node_from_graph_node(node: GraphNode) -> LayoutNode:
    """Build a LayoutNode with the declared box size of a GraphNode."""
    width, height = node_box(node)
    match node:
        case DashboardNode():
            return LayoutNode(
                node.id, is_dashboard=True, width=width, height=height, data=node
            )
        case TableNode():
            return LayoutNode(
                node.id, layer=node.layer, width=width, height=height, data=node
            )
        case _:
            raise TypeError(f"Unsupported node type: {type(node).__name__}")


def graph_view_to_layout_input(
    view: GraphView,
) -> tuple[list[LayoutNode], list[tuple[str, str]]]:
    """Convert a GraphView into layout nodes and edges.

    Example:
        >>> nodes, edges = graph_view_to_layout_input(view)
        >>> result = HierarchicalLayoutEngine().layout(nodes, edges)
    """
    nodes = [layout_node_from_graph_node(node) for node in view.nodes]
    edges = [link.key for link in view.links]
    return nodes, edges


def layout_graph_view(
    view: GraphView, config: Optional[HierarchicalLayoutConfig] = None
) -> HierarchicalLayout:
    """Convenience wrapper: lay out a GraphView hierarchically."""
    nodes, edges = graph_view_to_layout_input(view)
    return HierarchicalLayoutEngine(config).layout(nodes, edges)
