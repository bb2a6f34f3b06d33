"""
Node sizing for the layout engines.

Force layout nodes are circles whose radius depends on how connected a table
is relative to the other tables of the same view. Hierarchical layout nodes
are boxes with a declared width and height.
"""

from __future__ import annotations

from lineage_graph.models.config import ForceLayoutConfig
from lineage_graph.models.graph import DashboardNode, GraphNode, TableNode

DASHBOARD_BOX_SIZE = 120
TABLE_BOX_MIN_WIDTH = 80
TABLE_BOX_MAX_WIDTH = 140
TABLE_BOX_HEIGHT = 60
# Connection count at which a table box reaches its maximum width.
TABLE_BOX_FULL_SCALE = 10


def node_radius(
    node: GraphNode, max_table_connections: int, config: ForceLayoutConfig
) -> float:
    """Radius of a node in the force layout.

    Dashboards get a fixed radius. Tables are interpolated linearly between
    ``min_radius`` and ``max_radius`` by their connection count over the
    largest table connection count of the view, get ``scheduled_bonus``
    when they are scheduled queries, and are clamped to the bounds.

    Args:
        node: Node to size.
        max_table_connections: Largest ``connection_count`` among the table
            nodes of the current view.
        config: Force layout configuration holding the bounds.

    Returns:
        Radius in canvas units.
    """
    match node:
        case DashboardNode():
            return config.dashboard_radius
        case TableNode():
            if max_table_connections <= 0:
                radius = config.base_radius
            else:
                scale = node.connection_count / max_table_connections
                radius = config.min_radius + scale * (
                    config.max_radius - config.min_radius
                )
            if node.is_scheduled_query:
                radius += config.scheduled_bonus
            return max(config.min_radius, min(config.max_radius, radius))
        case _:
            raise TypeError(f"Unsupported node type: {type(node).__name__}")


def node_box(node: GraphNode) -> tuple[int, int]:
    """Declared (width, height) of a node in the hierarchical layout."""
    match node:
        case DashboardNode():
            return DASHBOARD_BOX_SIZE, DASHBOARD_BOX_SIZE
        case TableNode():
            scale = min(node.connection_count / TABLE_BOX_FULL_SCALE, 1)
            width = round(
                TABLE_BOX_MIN_WIDTH + scale * (TABLE_BOX_MAX_WIDTH - TABLE_BOX_MIN_WIDTH)
            )
            return width, TABLE_BOX_HEIGHT
        case _:
            raise TypeError(f"Unsupported node type: {type(node).__name__}")
