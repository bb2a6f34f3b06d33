"""
Tests for ForceLayoutController.

This module contains tests for the settle-then-freeze lifecycle, incremental
node seeding, reorganize, dragging and stopping.
"""

import math

import pytest

from lineage_graph import (
    ForceLayoutConfig,
    ForceLayoutController,
    GraphLink,
    GraphView,
    LayoutError,
    LayoutPhase,
    Point,
    Table,
    TableNode,
)


def chain_view(node_ids):
    """Build a view linking the given ids in a chain."""
    nodes = [TableNode(Table(node_id, node_id.upper()), 1) for node_id in node_ids]
    links = [GraphLink(s, t) for s, t in zip(node_ids, node_ids[1:])]
    return GraphView(nodes, links)


class TestSettleAndFreeze:
    """Tests for the SETTLING -> FROZEN -> FREEZING -> FROZEN lifecycle."""

    def setup_method(self):
        """Settle a five node chain."""
        self.controller = ForceLayoutController(ForceLayoutConfig(seed=3))
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e"]))

    def test_starts_settling(self):
        """Test the first view starts in SETTLING with free nodes."""
        assert self.controller.phase is LayoutPhase.SETTLING
        assert self.controller.pinned_positions() == {}
        assert not self.controller.positions_ready

    def test_freezes_after_settle_time(self):
        """Test the layout freezes after four seconds with every node pinned."""
        ticks = self.controller.run(4.0)

        assert ticks == 240
        assert self.controller.phase is LayoutPhase.FROZEN
        assert self.controller.positions_ready
        assert set(self.controller.pinned_positions()) == {"a", "b", "c", "d", "e"}
        assert all(self.controller.is_pinned(node_id) for node_id in "abcde")

    def test_still_settling_before_settle_time(self):
        """Test the layout keeps settling before the settle window ends."""
        self.controller.run(3.9)

        assert self.controller.phase is LayoutPhase.SETTLING

    def test_frozen_positions_do_not_change(self):
        """Test ticking a frozen layout leaves positions untouched."""
        self.controller.run(4.0)
        before = self.controller.positions()
        self.controller.run(2.0)

        assert self.controller.positions() == before

    def test_new_node_enters_freezing(self):
        """Test adding a node while frozen moves only the new node."""
        self.controller.run(4.0)
        before = self.controller.positions()

        added = self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f"]))
        seeded = self.controller.position("f")

        assert added == {"f"}
        assert self.controller.phase is LayoutPhase.FREEZING
        assert self.controller.new_node_ids() == {"f"}

        self.controller.run(0.5)

        for node_id, point in before.items():
            assert self.controller.position(node_id) == point
        assert self.controller.position("f") != seeded
        assert not self.controller.is_pinned("f")

    def test_new_node_seeded_near_neighbor(self):
        """Test a new node starts 40 to 80 units from its neighbor."""
        self.controller.run(4.0)
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f"]))

        e, f = self.controller.position("e"), self.controller.position("f")
        distance = math.hypot(f.x - e.x, f.y - e.y)
        assert 40 - 1e-9 <= distance <= 80 + 1e-9

    def test_freezes_after_grace_time(self):
        """Test the grace window ends in FROZEN with every node pinned."""
        self.controller.run(4.0)
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f"]))

        assert self.controller.run(1.5) == 90
        assert self.controller.phase is LayoutPhase.FROZEN
        assert self.controller.is_pinned("f")
        assert self.controller.new_node_ids() == set()

    def test_removed_nodes_dropped(self):
        """Test nodes leaving the view leave every cache."""
        self.controller.run(4.0)
        added = self.controller.set_view(chain_view(["a", "b", "c"]))

        assert added == set()
        assert self.controller.phase is LayoutPhase.FROZEN
        assert set(self.controller.positions()) == {"a", "b", "c"}
        assert set(self.controller.pinned_positions()) == {"a", "b", "c"}
        assert self.controller.position("e") is None
        assert self.controller.radius("e") is None

    def test_existing_nodes_keep_position_across_views(self):
        """Test a node present in both views keeps its position."""
        self.controller.run(1.0)
        before = self.controller.position("c")
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e"]))

        assert self.controller.position("c") == before

    def test_to_dict(self):
        """Test the export contains the phase and every node."""
        self.controller.run(4.0)
        data = self.controller.to_dict()

        assert data["phase"] == "frozen"
        assert [node["id"] for node in data["nodes"]] == ["a", "b", "c", "d", "e"]
        assert data["nodes"][0]["fx"] == data["nodes"][0]["x"]


class TestForceMode:
    """Tests for the repulsion / centering switch."""

    def test_strong_repulsion_while_free(self):
        """Test nothing pinned means strong repulsion and centering."""
        controller = ForceLayoutController(ForceLayoutConfig(seed=1))
        controller.set_view(chain_view(["a", "b"]))

        assert controller.simulation.charge_strength == -300.0
        assert controller.simulation.centering

    def test_weak_repulsion_while_pinned(self):
        """Test a pinned layout uses weak repulsion and no centering."""
        controller = ForceLayoutController(ForceLayoutConfig(seed=1))
        controller.set_view(chain_view(["a", "b"]))
        controller.freeze()

        assert controller.simulation.charge_strength == -100.0
        assert not controller.simulation.centering


class TestReorganize:
    """Tests for reorganize."""

    def test_clears_pins_and_new_nodes(self):
        """Test reorganize clears pinned and new-node sets together."""
        controller = ForceLayoutController(ForceLayoutConfig(seed=5))
        controller.set_view(chain_view(["a", "b", "c"]))
        controller.run(4.0)
        controller.set_view(chain_view(["a", "b", "c", "d"]))
        assert controller.new_node_ids() == {"d"}

        controller.reorganize()

        assert controller.phase is LayoutPhase.SETTLING
        assert controller.pinned_positions() == {}
        assert controller.new_node_ids() == set()
        assert not any(controller.is_pinned(node_id) for node_id in "abcd")
        assert controller.simulation.alpha == 1.0
        assert controller.simulation.centering

    def test_settles_again(self):
        """Test a reorganized layout freezes again after the settle time."""
        controller = ForceLayoutController(ForceLayoutConfig(seed=5))
        controller.set_view(chain_view(["a", "b", "c"]))
        controller.run(4.0)
        controller.reorganize()

        controller.run(4.0)

        assert controller.phase is LayoutPhase.FROZEN


class TestDrag:
    """Tests for dragging nodes."""

    def setup_method(self):
        """Create a controller over a three node chain."""
        self.controller = ForceLayoutController(ForceLayoutConfig(seed=9))
        self.controller.set_view(chain_view(["a", "b", "c"]))

    def test_drag_in_frozen_repins_at_drop(self):
        """Test a node dragged in a frozen layout stays where it is dropped."""
        self.controller.run(4.0)

        self.controller.drag_start("a")
        self.controller.drag_move("a", 500.0, 400.0)
        self.controller.drag_end("a")
        self.controller.run(1.0)

        assert self.controller.position("a") == Point(500.0, 400.0)
        assert self.controller.pinned_positions()["a"] == Point(500.0, 400.0)

    def test_drag_in_settling_releases(self):
        """Test a node dragged while settling is released on drop."""
        self.controller.drag_start("a")

        assert self.controller.is_pinned("a")
        assert self.controller.simulation.alpha_target == 0.3
        assert not self.controller.simulation.centering

        self.controller.drag_move("a", 100.0, 100.0)
        self.controller.drag_end("a")

        assert not self.controller.is_pinned("a")
        assert self.controller.simulation.alpha_target == 0.0
        assert self.controller.simulation.centering

    def test_drag_new_node_in_freezing_releases(self):
        """Test a new node dragged during the grace window keeps settling."""
        self.controller.run(4.0)
        self.controller.set_view(chain_view(["a", "b", "c", "d"]))

        self.controller.drag_start("d")
        self.controller.drag_move("d", 10.0, 10.0)
        self.controller.drag_end("d")

        assert not self.controller.is_pinned("d")

    def test_drag_unknown_node(self):
        """Test dragging a node outside the view raises LayoutError."""
        with pytest.raises(LayoutError) as exc_info:
            self.controller.drag_start("missing")

        assert exc_info.value.node_id == "missing"


class TestFreezingWindow:
    """Tests for a second data change inside the FREEZING grace window."""

    def setup_method(self):
        """Settle a five node chain, then add f partway into a grace window."""
        self.controller = ForceLayoutController(ForceLayoutConfig(seed=5))
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e"]))
        self.controller.run(4.0)
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f"]))
        self.controller.run(0.5)

    def test_first_addition_settles_freely(self):
        """Test f is new and free while the original nodes are pinned."""
        assert self.controller.phase is LayoutPhase.FREEZING
        assert self.controller.new_node_ids() == {"f"}
        assert not self.controller.is_pinned("f")
        assert all(self.controller.is_pinned(node_id) for node_id in "abcde")

    def test_second_addition_keeps_earlier_node_new(self):
        """Test a second addition leaves f new and unpinned next to g."""
        added = self.controller.set_view(
            chain_view(["a", "b", "c", "d", "e", "f", "g"])
        )

        assert added == {"g"}
        assert self.controller.phase is LayoutPhase.FREEZING
        assert self.controller.new_node_ids() == {"f", "g"}
        assert not self.controller.is_pinned("f")
        assert not self.controller.is_pinned("g")
        assert all(self.controller.is_pinned(node_id) for node_id in "abcde")
        assert not set(self.controller.pinned_positions()) & {"f", "g"}

    def test_drag_earlier_new_node_releases(self):
        """Test f dragged after the second addition is released on drop."""
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f", "g"]))

        self.controller.drag_start("f")
        self.controller.drag_move("f", 10.0, 10.0)
        self.controller.drag_end("f")

        assert not self.controller.is_pinned("f")
        assert "f" in self.controller.new_node_ids()

    def test_drag_existing_node_repins_at_drop(self):
        """Test an original node dragged in the window stays at the drop."""
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f", "g"]))

        self.controller.drag_start("a")
        self.controller.drag_move("a", 500.0, 400.0)
        self.controller.drag_end("a")
        self.controller.run(0.3)

        assert self.controller.position("a") == Point(500.0, 400.0)
        assert self.controller.pinned_positions()["a"] == Point(500.0, 400.0)

    def test_window_restarts_then_freezes(self):
        """Test the grace window restarts on the second addition."""
        self.controller.set_view(chain_view(["a", "b", "c", "d", "e", "f", "g"]))

        self.controller.run(1.4)
        assert self.controller.phase is LayoutPhase.FREEZING

        self.controller.run(0.1)
        assert self.controller.phase is LayoutPhase.FROZEN
        assert self.controller.new_node_ids() == set()
        assert all(self.controller.is_pinned(node_id) for node_id in "abcdefg")


class TestStop:
    """Tests for stop and start."""

    def test_stop_is_idempotent(self):
        """Test stop can be called repeatedly and halts ticking."""
        controller = ForceLayoutController(ForceLayoutConfig(seed=2))
        controller.set_view(chain_view(["a", "b"]))
        before = controller.positions()

        controller.stop()
        controller.stop()

        assert controller.stopped
        assert controller.tick() is False
        assert controller.run(1.0) == 0
        assert controller.positions() == before

    def test_stop_before_data(self):
        """Test stop works on a controller that never got a view."""
        controller = ForceLayoutController()
        controller.stop()

        assert controller.positions() == {}

    def test_start_resumes(self):
        """Test start resumes ticking."""
        controller = ForceLayoutController(ForceLayoutConfig(seed=2))
        controller.set_view(chain_view(["a", "b"]))
        controller.stop()
        controller.start()

        assert controller.tick() is True
        assert controller.elapsed_seconds == pytest.approx(1 / 60)
