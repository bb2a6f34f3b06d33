"""
Force layout controller.

This module defines ForceLayoutController, which owns a ForceSimulation over
the current GraphView and drives the settle-then-freeze lifecycle:

    SETTLING  --settle_seconds-->  FROZEN
    FROZEN    --set_view(new nodes)-->  FREEZING
    FREEZING  --freeze_grace_seconds-->  FROZEN
    any       --reorganize()-->  SETTLING

Time is logical: each ``tick()`` advances the controller clock by
``config.tick_seconds``. The host drives ticks from its animation loop.
"""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import Optional

from lineage_graph.exceptions import LayoutError
from lineage_graph.layout.simulation import ForceSimulation, SimNode
from lineage_graph.layout.sizing import node_radius
from lineage_graph.models.config import ForceLayoutConfig
from lineage_graph.models.graph import GraphView, Point


class LayoutPhase(str, Enum):
    """Lifecycle phase of the force layout.

    Attributes:
        SETTLING: Every node is free; strong repulsion and centering.
        FREEZING: Only newly introduced nodes move; the rest are pinned.
        FROZEN: Every node is pinned; only a drag moves a node.
    """

    SETTLING = "settling"
    FREEZING = "freezing"
    FROZEN = "frozen"


class ForceLayoutController:
    """Settle-then-freeze force layout over a GraphView.

    The controller keeps two caches besides the simulation state: the
    pinned-position map and the set of nodes introduced since the last
    freeze. Both are replaced together by ``reorganize()``.

    Attributes:
        config: Force layout configuration.
        phase: Current lifecycle phase.
        view: GraphView currently laid out.

    Example:
        >>> controller = ForceLayoutController(ForceLayoutConfig(seed=7))
        >>> added = controller.set_view(view)
        >>> ticks = controller.run(4.0)
        >>> controller.phase
        <LayoutPhase.FROZEN: 'frozen'>
        >>> positions = controller.positions()
    """

    def __init__(self, config: Optional[ForceLayoutConfig] = None) -> None:
        self.config = config or ForceLayoutConfig()
        self.phase = LayoutPhase.SETTLING
        self.view = GraphView()
        self._rng = random.Random(self.config.seed)
        self._nodes: dict[str, SimNode] = {}
        self._pinned: dict[str, Point] = {}
        self._new_nodes: set[str] = set()
        self._dragging: Optional[str] = None
        self._ticks = 0
        self._phase_started_at = 0
        self._ticks_since_change = 0
        self._stopped = False
        self.simulation = ForceSimulation(
            alpha_min=self.config.alpha_min,
            alpha_decay=self.config.effective_alpha_decay,
            velocity_decay=self.config.velocity_decay,
            charge_strength=self.config.charge_strength,
            link_distance=self.config.link_distance,
            collision_radius=self.config.collision_radius,
            center=(self.config.width / 2, self.config.height / 2),
            rng=self._rng,
        )
        self.simulation.alpha = self.config.reheat_alpha

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def set_view(self, view: GraphView) -> set[str]:
        """Lay out a new or changed view.

        Nodes already in the position cache keep their position, velocity
        and pin. Nodes absent from it are new: each is seeded at a random
        angle and a distance between ``seed_min_distance`` and
        ``seed_max_distance`` from its first already-positioned neighbor,
        or left to the simulation's default placement when it has none.
        Nodes no longer in the view are dropped from every cache.

        While FROZEN or FREEZING, new nodes start a FREEZING grace window
        during which every pre-existing node stays pinned. Nodes added
        earlier in the same window stay new and keep settling; the window
        restarts.

        Args:
            view: The GraphView to lay out.

        Returns:
            Ids of the nodes introduced by this view.
        """
        previous = self._nodes
        max_connections = view.max_table_connection_count()

        nodes: dict[str, SimNode] = {}
        added: list[str] = []
        for graph_node in view.nodes:
            state = previous.get(graph_node.id)
            if state is None:
                state = SimNode(graph_node.id)
                added.append(graph_node.id)
            state.radius = node_radius(graph_node, max_connections, self.config)
            nodes[graph_node.id] = state

        for node_id in added:
            self._seed_near_neighbor(nodes[node_id], view, previous)

        self._nodes = nodes
        self._pinned = {
            node_id: point for node_id, point in self._pinned.items() if node_id in nodes
        }
        self._new_nodes = {node_id for node_id in self._new_nodes if node_id in nodes}
        if self._dragging is not None and self._dragging not in nodes:
            self._dragging = None
        self.view = view

        self.simulation.set_graph(
            nodes.values(), [link.key for link in view.links]
        )

        if not previous and self.phase is LayoutPhase.SETTLING:
            # The settle window starts with the first data.
            self._enter(LayoutPhase.SETTLING)

        if added and self.phase in (LayoutPhase.FROZEN, LayoutPhase.FREEZING):
            # Nodes still settling from an earlier addition stay new and free.
            for node_id, state in nodes.items():
                if node_id in self._new_nodes or node_id in added:
                    continue
                if not state.pinned:
                    self._pin(node_id, state.x, state.y)
            self._new_nodes.update(added)
            self._enter(LayoutPhase.FREEZING)
            self._reheat(self.config.incremental_alpha)
        elif added:
            self._reheat(self.config.incremental_alpha)

        self._apply_force_mode()
        self._ticks_since_change = 0
        return set(added)

    def _seed_near_neighbor(
        self, node: SimNode, view: GraphView, positioned: dict[str, SimNode]
    ) -> None:
        for neighbor_id in view.neighbors(node.id):
            neighbor = positioned.get(neighbor_id)
            if neighbor is None or neighbor.x is None or neighbor.y is None:
                continue
            angle = self._rng.uniform(0, 2 * math.pi)
            distance = self._rng.uniform(
                self.config.seed_min_distance, self.config.seed_max_distance
            )
            node.x = neighbor.x + math.cos(angle) * distance
            node.y = neighbor.y + math.sin(angle) * distance
            return

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Advance the layout by one tick.

        Returns:
            True if the tick ran, False after ``stop()``.
        """
        if self._stopped:
            return False

        self._ticks += 1
        self._ticks_since_change += 1
        if self.phase is not LayoutPhase.FROZEN:
            self.simulation.tick()

        elapsed = self._ticks - self._phase_started_at
        if self.phase is LayoutPhase.SETTLING and elapsed >= self._ticks_for(
            self.config.settle_seconds
        ):
            self.freeze()
        elif self.phase is LayoutPhase.FREEZING and elapsed >= self._ticks_for(
            self.config.freeze_grace_seconds
        ):
            self.freeze()
        return True

    def run(self, seconds: float) -> int:
        """Tick for ``seconds`` of logical time.

        Returns:
            Number of ticks that ran.
        """
        ran = 0
        for _ in range(self._ticks_for(seconds)):
            if not self.tick():
                break
            ran += 1
        return ran

    def _ticks_for(self, seconds: float) -> int:
        return math.ceil(seconds / self.config.tick_seconds - 1e-9)

    @property
    def elapsed_seconds(self) -> float:
        """Logical time spent in the current phase."""
        return (self._ticks - self._phase_started_at) * self.config.tick_seconds

    @property
    def positions_ready(self) -> bool:
        """True once a tick has run since the last topology change."""
        return self._ticks_since_change > 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def freeze(self) -> None:
        """Pin every node at its current position and enter FROZEN.

        A node being dragged keeps following the pointer; it is pinned at the
        drop position on ``drag_end``.
        """
        for node_id, state in self._nodes.items():
            if node_id == self._dragging:
                continue
            self._pin(node_id, state.x, state.y)
        self._new_nodes = set()
        self._enter(LayoutPhase.FROZEN)
        self.simulation.alpha_target = 0.0
        self.simulation.stop()
        self._apply_force_mode()

    def reorganize(self) -> None:
        """Unpin every node and settle again from the current positions."""
        self._pinned, self._new_nodes = {}, set()
        self._dragging = None
        for state in self._nodes.values():
            state.unpin()
        self._stopped = False
        self._enter(LayoutPhase.SETTLING)
        self.simulation.alpha_target = 0.0
        self._reheat(self.config.reheat_alpha)
        self._apply_force_mode()

    def stop(self) -> None:
        """Stop the layout. Safe to call at any time, any number of times."""
        if self._stopped:
            return
        self._stopped = True
        self.simulation.stop()

    def start(self) -> None:
        """Resume ticking after ``stop()``."""
        self._stopped = False
        if self.phase is not LayoutPhase.FROZEN:
            self.simulation.restart()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def _enter(self, phase: LayoutPhase) -> None:
        self.phase = phase
        self._phase_started_at = self._ticks

    def _reheat(self, alpha: float) -> None:
        self.simulation.restart(max(self.simulation.alpha, alpha))

    def _apply_force_mode(self) -> None:
        any_pinned = any(state.pinned for state in self._nodes.values())
        self.simulation.charge_strength = (
            self.config.pinned_charge_strength
            if any_pinned
            else self.config.charge_strength
        )
        self.simulation.centering = not any_pinned

    def _pin(self, node_id: str, x: float, y: float) -> None:
        self._nodes[node_id].pin(x, y)
        self._pinned[node_id] = Point(x, y)

    def _unpin(self, node_id: str) -> None:
        self._nodes[node_id].unpin()
        self._pinned.pop(node_id, None)

    # ------------------------------------------------------------------
    # Drag
    # ------------------------------------------------------------------

    def drag_start(self, node_id: str) -> None:
        """Fix a node at its current position for the duration of a drag.

        Raises:
            LayoutError: If the node is not in the current view.
        """
        state = self._require(node_id)
        self._dragging = node_id
        state.fx, state.fy = state.x, state.y
        if self.phase is not LayoutPhase.FROZEN:
            self.simulation.alpha_target = self.config.drag_alpha_target
            self.simulation.restart()
        self._apply_force_mode()

    def drag_move(self, node_id: str, x: float, y: float) -> None:
        """Move the dragged node's fix to (x, y)."""
        state = self._require(node_id)
        state.pin(x, y)

    def drag_end(self, node_id: str) -> None:
        """Release a dragged node.

        In FROZEN, and for pre-existing nodes in FREEZING, the node is
        re-pinned at the drop position. Otherwise its fix is released.
        """
        state = self._require(node_id)
        if self._dragging == node_id:
            self._dragging = None
        if self.phase is LayoutPhase.FROZEN or (
            self.phase is LayoutPhase.FREEZING and node_id not in self._new_nodes
        ):
            self._pin(node_id, state.x, state.y)
        else:
            self._unpin(node_id)
        self.simulation.alpha_target = 0.0
        self._apply_force_mode()

    def _require(self, node_id: str) -> SimNode:
        state = self._nodes.get(node_id)
        if state is None:
            raise LayoutError("Node is not in the current view", node_id=node_id)
        return state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def positions(self) -> dict[str, Point]:
        """Current position of every node, keyed by node id."""
        return {
            node_id: Point(state.x, state.y)
            for node_id, state in self._nodes.items()
            if state.x is not None and state.y is not None
        }

    def position(self, node_id: str) -> Optional[Point]:
        state = self._nodes.get(node_id)
        if state is None or state.x is None or state.y is None:
            return None
        return Point(state.x, state.y)

    def radius(self, node_id: str) -> Optional[float]:
        state = self._nodes.get(node_id)
        return state.radius if state is not None else None

    def is_pinned(self, node_id: str) -> bool:
        state = self._nodes.get(node_id)
        return state is not None and state.pinned

    def pinned_positions(self) -> dict[str, Point]:
        """Copy of the pinned-position map."""
        return dict(self._pinned)

    def new_node_ids(self) -> set[str]:
        """Nodes introduced since the last freeze."""
        return set(self._new_nodes)

    def to_dict(self) -> dict[str, object]:
        """Export phase and node positions for a rendering surface."""
        return {
            "phase": self.phase.value,
            "nodes": [
                {
                    "id": node_id,
                    "x": state.x,
                    "y": state.y,
                    "fx": state.fx,
                    "fy": state.fy,
                    "radius": state.radius,
                }
                for node_id, state in self._nodes.items()
            ],
        }
