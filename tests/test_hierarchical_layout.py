"""
Tests for HierarchicalLayoutEngine.

This module contains tests for layer ranking, column ordering, spacing,
size resolution and the grouped fallback layout.
"""

import math

import networkx as nx
import pytest

from lineage_graph import (
    Dashboard,
    DashboardNode,
    GraphLink,
    GraphView,
    HierarchicalLayoutConfig,
    HierarchicalLayoutEngine,
    Layer,
    LayoutError,
    LayoutNode,
    Table,
    TableNode,
    graph_view_to_layout_input,
    layout_graph_view,
)
from lineage_graph.layout.hierarchical import DASHBOARD_RANK, count_crossings


def table(node_id, layer, width=80, height=60):
    """Build a table LayoutNode."""
    return LayoutNode(node_id, layer, width=width, height=height)


def dashboard(node_id):
    """Build a dashboard LayoutNode."""
    return LayoutNode(node_id, is_dashboard=True, width=120, height=120)


class TestLayeredLayout:
    """Tests for the layered layout."""

    def setup_method(self):
        """Create a Raw -> Inter -> Reporting -> dashboard chain."""
        self.engine = HierarchicalLayoutEngine()
        self.nodes = [
            table("raw", Layer.RAW),
            table("inter", Layer.INTER),
            table("rpt", Layer.REPORTING),
            dashboard("dash"),
        ]
        self.edges = [("raw", "inter"), ("inter", "rpt"), ("rpt", "dash")]

    def test_columns_follow_layers(self):
        """Test columns are ordered by layer with empty ranks compressed."""
        result = self.engine.layout(self.nodes, self.edges)

        assert not result.used_fallback
        assert result.columns() == [["raw"], ["inter"], ["rpt"], ["dash"]]
        assert result.ranks == {"raw": 0, "inter": 1, "rpt": 3, "dash": DASHBOARD_RANK}

    def test_dashboards_rightmost(self):
        """Test dashboards are to the right of every table."""
        result = self.engine.layout(self.nodes, self.edges)
        dash = result.get("dash")

        for node in result.nodes:
            if node.id != "dash":
                assert node.x + node.width < dash.x

    def test_coordinates(self):
        """Test top-left coordinates derived from average node size."""
        result = self.engine.layout(self.nodes, self.edges)

        assert (result.get("raw").x, result.get("raw").y) == (180, 105)
        assert result.get("inter").x == 665
        assert result.get("rpt").x == 1150
        assert (result.get("dash").x, result.get("dash").y) == (1635, 75)

    def test_columns_centered_vertically(self):
        """Test single-node columns share a vertical center."""
        result = self.engine.layout(self.nodes, self.edges)

        assert {node.center[1] for node in result.nodes} == {135}

    def test_spacing_floor(self):
        """Test small nodes are still separated by the minimum rank spacing."""
        result = self.engine.layout(
            [table("a", Layer.RAW, 10, 10), table("b", Layer.INTER, 10, 10)],
            [("a", "b")],
        )
        a, b = result.get("a"), result.get("b")

        assert a.x == 120
        assert b.x - (a.x + a.width) == 350

    def test_idempotent(self):
        """Test the same input gives the same layout."""
        first = self.engine.layout(self.nodes, self.edges)
        second = self.engine.layout(self.nodes, self.edges)

        assert first.to_dict() == second.to_dict()

    def test_crossings_reduced(self):
        """Test barycenter ordering removes a removable crossing."""
        edges = [("r1", "i2"), ("r2", "i1")]
        nodes = [
            table("r1", Layer.RAW),
            table("r2", Layer.RAW),
            table("i1", Layer.INTER),
            table("i2", Layer.INTER),
        ]
        graph = nx.Graph(edges)

        assert count_crossings([["r1", "r2"], ["i1", "i2"]], graph) == 1

        result = self.engine.layout(nodes, edges)

        assert result.columns() == [["r1", "r2"], ["i2", "i1"]]
        assert count_crossings(result.columns(), graph) == 0

    def test_unknown_layer_ranks_with_inter(self):
        """Test a table without a layer shares the Inter column."""
        result = self.engine.layout(
            [table("r", Layer.RAW), table("i", "inter"), LayoutNode("x")], []
        )

        assert result.columns() == [["r"], ["i", "x"]]

    def test_input_cleanup(self):
        """Test duplicate nodes and dangling edges are dropped."""
        result = self.engine.layout(
            [table("a", Layer.RAW), table("a", Layer.TARGET), table("b", Layer.INTER)],
            [("a", "b"), ("a", "b"), ("a", "ghost")],
        )

        assert [node.id for node in result.nodes] == ["a", "b"]
        assert result.get("a").column == 0
        assert result.edges == [("a", "b")]

    def test_empty(self):
        """Test an empty input gives an empty layout."""
        result = self.engine.layout([], [])

        assert result.nodes == []
        assert not result.used_fallback


class TestSizeResolution:
    """Tests for LayoutNode.resolve_size."""

    def test_measured_preferred(self):
        """Test measured dimensions win over declared ones."""
        node = LayoutNode("a", width=80, height=60, measured_width=200, measured_height=90)

        assert node.resolve_size(10, 10) == (200, 90)

    def test_declared_when_measured_not_positive(self):
        """Test a non-positive measurement falls through to the declared size."""
        node = LayoutNode("a", width=80, height=60, measured_width=0)

        assert node.resolve_size(10, 10) == (80, 60)

    def test_default_when_missing(self):
        """Test the default applies only when nothing is set."""
        assert LayoutNode("a").resolve_size(80, 60) == (80, 60)

    def test_zero_size_raises(self):
        """Test a dimension set but never positive raises LayoutError."""
        with pytest.raises(LayoutError) as exc_info:
            LayoutNode("a", width=0, height=60).resolve_size(80, 60)

        assert exc_info.value.node_id == "a"

    @pytest.mark.parametrize("width", ["80", float("inf"), float("nan"), True])
    def test_unusable_size_raises(self, width):
        """Test non-numeric and non-finite dimensions raise LayoutError."""
        with pytest.raises(LayoutError) as exc_info:
            LayoutNode("a", width=width, height=60).resolve_size(80, 60)

        assert exc_info.value.node_id == "a"

    def test_unusable_measurement_falls_through(self):
        """Test an infinite measurement falls through to the declared size."""
        node = LayoutNode("a", width=80, height=60, measured_width=float("inf"))

        assert node.resolve_size(10, 10) == (80, 60)


class TestFallback:
    """Tests for the grouped fallback layout."""

    def setup_method(self):
        """Lay out nodes where one has zero width."""
        self.result = HierarchicalLayoutEngine().layout(
            [
                table("a", Layer.RAW),
                table("b", Layer.INTER, width=0),
                dashboard("d"),
                LayoutNode("u", width=80, height=60),
            ],
            [("a", "b"), ("b", "d")],
        )

    def test_falls_back_with_warning(self):
        """Test the fallback is used and reported."""
        warnings = self.result.warnings.get_by_level("WARNING")

        assert self.result.used_fallback
        assert self.result.ranks == {}
        assert len(warnings) == 1
        assert warnings[0].context == "node: b"

    def test_every_node_positioned(self):
        """Test every node gets a position."""
        assert [node.id for node in self.result.nodes] == ["a", "b", "d", "u"]
        assert self.result.get("b").width == 80

    def test_grouped_columns(self):
        """Test layer columns and the dashboard column positions."""
        positions = {node.id: (node.x, node.y) for node in self.result.nodes}

        assert positions == {
            "a": (50, 50),
            "b": (530, 50),
            "u": (1970, 50),
            "d": (2500, 50),
        }

    def test_rows_stack(self):
        """Test nodes of one column stack by the tallest node plus a gap."""
        result = HierarchicalLayoutEngine().fallback_layout(
            [table("a", Layer.RAW), table("b", Layer.RAW, height=100)], []
        )

        assert result.get("b").y - result.get("a").y == 120

    def test_configurable(self):
        """Test the fallback grid follows the configuration."""
        config = HierarchicalLayoutConfig(fallback_origin=0, fallback_column_factor=1)
        result = HierarchicalLayoutEngine(config).fallback_layout(
            [table("a", Layer.RAW), table("b", Layer.TARGET)], []
        )

        assert result.get("b").x == 160

    @pytest.mark.parametrize("width", ["80", float("inf")])
    def test_unusable_width_falls_back(self, width):
        """Test a string or infinite width falls back with finite positions."""
        result = HierarchicalLayoutEngine().layout(
            [table("a", Layer.RAW), table("b", Layer.INTER, width=width)],
            [("a", "b")],
        )
        warnings = result.warnings.get_by_level("WARNING")

        assert result.used_fallback
        assert len(warnings) == 1
        assert warnings[0].context == "node: b"
        assert result.get("b").width == 80
        for node in result.nodes:
            assert math.isfinite(node.x) and math.isfinite(node.y)


class TestGraphViewInput:
    """Tests for converting a GraphView into layout input."""

    def setup_method(self):
        """Create a view with one table feeding one dashboard."""
        self.view = GraphView(
            [
                TableNode(Table("t", "T", layer=Layer.TARGET), connection_count=5),
                DashboardNode(Dashboard("d", "D"), connection_count=1),
            ],
            [GraphLink("t", "d", "dashboard")],
        )

    def test_declared_sizes(self):
        """Test tables and dashboards get their declared box sizes."""
        nodes, edges = graph_view_to_layout_input(self.view)

        assert (nodes[0].width, nodes[0].height, nodes[0].layer) == (110, 60, Layer.TARGET)
        assert nodes[1].is_dashboard
        assert (nodes[1].width, nodes[1].height) == (120, 120)
        assert edges == [("t", "d")]

    def test_layout_graph_view(self):
        """Test the convenience wrapper."""
        result = layout_graph_view(self.view)

        assert result.columns() == [["t"], ["d"]]
