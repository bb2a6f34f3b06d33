"""
Tick-driven force simulation.

This module defines ForceSimulation, a velocity-Verlet style particle
simulation with the four forces the force layout needs: pairwise repulsion,
link attraction, centering and collision. Nodes carry their own position,
velocity and optional pin (``fx`` / ``fy``); a pinned node is placed at its
pin on every tick and never moved by a force.

The simulation never schedules itself. The owner calls ``tick()`` from its
animation loop, and each call is one synchronous step.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, Optional

# Phyllotaxis arrangement used for nodes that start without a position.
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
# Squared distance below which repulsion stops growing.
MIN_DISTANCE_SQUARED = 1.0


@dataclass
class SimNode:
    """Mutable simulation state of one node.

    Attributes:
        id: Graph node id.
        x: Horizontal position (None until placed).
        y: Vertical position (None until placed).
        vx: Horizontal velocity.
        vy: Vertical velocity.
        fx: Pinned horizontal position, or None when free.
        fy: Pinned vertical position, or None when free.
        radius: Collision radius.
    """

    id: str
    x: Optional[float] = None
    y: Optional[float] = None
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None
    radius: float = 0.0

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None

    def pin(self, x: float, y: float) -> None:
        self.fx, self.fy = x, y
        self.x, self.y = x, y
        self.vx = self.vy = 0.0

    def unpin(self) -> None:
        self.fx = self.fy = None


class ForceSimulation:
    """Particle simulation over a set of nodes and links.

    Alpha is the simulation "temperature": every tick moves it toward
    ``alpha_target`` by ``alpha_decay`` and scales every force. The
    simulation stops on its own once alpha drops below ``alpha_min`` while
    the target is below it too; ``restart()`` resumes it.

    Attributes:
        nodes: Simulation nodes in insertion order.
        links: (source id, target id) pairs.
        alpha: Current temperature.
        alpha_target: Temperature alpha converges to.
        alpha_min: Rest threshold.
        alpha_decay: Per-tick convergence rate of alpha.
        velocity_decay: Fraction of velocity lost per tick.
        charge_strength: Pairwise repulsion (negative repels).
        link_distance: Target link length.
        collision_radius: Minimum radius used for collision; a node's own
            ``radius`` is used when larger.
        centering: Whether the centering force is active.
        center: (x, y) the centering force targets.

    Example:
        >>> sim = ForceSimulation([SimNode("a"), SimNode("b")], [("a", "b")])
        >>> for _ in range(100):
        ...     sim.tick()
        >>> sim.nodes[0].x is not None
        True
    """

    def __init__(
        self,
        nodes: Iterable[SimNode] = (),
        links: Iterable[tuple[str, str]] = (),
        *,
        alpha_min: float = 0.001,
        alpha_decay: float = 1 - 0.001 ** (1 / 300),
        velocity_decay: float = 0.4,
        charge_strength: float = -300.0,
        link_distance: float = 100.0,
        collision_radius: float = 30.0,
        center: tuple[float, float] = (0.0, 0.0),
        rng: Optional[random.Random] = None,
    ) -> None:
        self.alpha = 1.0
        self.alpha_target = 0.0
        self.alpha_min = alpha_min
        self.alpha_decay = alpha_decay
        self.velocity_decay = velocity_decay
        self.charge_strength = charge_strength
        self.link_distance = link_distance
        self.collision_radius = collision_radius
        self.centering = True
        self.center = center
        self.rng = rng or random.Random()
        self.running = True
        self.nodes: list[SimNode] = []
        self.links: list[tuple[str, str]] = []
        self._index: dict[str, SimNode] = {}
        self.set_graph(nodes, links)

    def set_graph(
        self, nodes: Iterable[SimNode], links: Iterable[tuple[str, str]]
    ) -> None:
        """Replace nodes and links, placing any node that has no position yet.

        Links whose endpoints are not among ``nodes`` are ignored.
        """
        self.nodes = list(nodes)
        self._index = {node.id: node for node in self.nodes}
        self.links = [
            (source, target)
            for source, target in links
            if source in self._index and target in self._index
        ]
        self._place_unpositioned()

    def get_node(self, node_id: str) -> Optional[SimNode]:
        return self._index.get(node_id)

    def tick(self) -> bool:
        """Advance the simulation by one step.

        Returns:
            True if a step was taken, False if the simulation is stopped.
        """
        if not self.running:
            return False

        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_collision()

        for node in self.nodes:
            if node.fx is None:
                node.vx *= 1 - self.velocity_decay
                node.x += node.vx
            else:
                node.x = node.fx
                node.vx = 0.0
            if node.fy is None:
                node.vy *= 1 - self.velocity_decay
                node.y += node.vy
            else:
                node.y = node.fy
                node.vy = 0.0

        # Centering shifts positions directly, so it runs after integration.
        if self.centering:
            self._apply_center()

        if self.alpha < self.alpha_min and self.alpha_target < self.alpha_min:
            self.running = False
        return True

    def restart(self, alpha: Optional[float] = None) -> None:
        """Resume ticking, optionally reheating to ``alpha``."""
        if alpha is not None:
            self.alpha = alpha
        self.running = True

    def stop(self) -> None:
        """Stop ticking. Safe to call at any time, any number of times."""
        self.running = False

    def _place_unpositioned(self) -> None:
        cx, cy = self.center
        for index, node in enumerate(self.nodes):
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if node.x is None or node.y is None:
                radius = INITIAL_RADIUS * math.sqrt(0.5 + index)
                angle = index * INITIAL_ANGLE
                node.x = cx + radius * math.cos(angle)
                node.y = cy + radius * math.sin(angle)

    def _jiggle(self) -> float:
        return (self.rng.random() - 0.5) * 1e-6

    def _apply_links(self) -> None:
        if not self.links:
            return
        degree: dict[str, int] = {}
        for source, target in self.links:
            degree[source] = degree.get(source, 0) + 1
            degree[target] = degree.get(target, 0) + 1

        for source_id, target_id in self.links:
            if source_id == target_id:
                continue
            source = self._index[source_id]
            target = self._index[target_id]
            dx = target.x + target.vx - source.x - source.vx or self._jiggle()
            dy = target.y + target.vy - source.y - source.vy or self._jiggle()
            length = math.hypot(dx, dy)
            strength = 1 / min(degree[source_id], degree[target_id])
            scale = (length - self.link_distance) / length * self.alpha * strength
            dx *= scale
            dy *= scale
            bias = degree[source_id] / (degree[source_id] + degree[target_id])
            target.vx -= dx * bias
            target.vy -= dy * bias
            source.vx += dx * (1 - bias)
            source.vy += dy * (1 - bias)

    def _apply_charge(self) -> None:
        if not self.charge_strength:
            return
        weight = self.charge_strength * self.alpha
        for node in self.nodes:
            for other in self.nodes:
                if other is node:
                    continue
                dx = other.x - node.x
                dy = other.y - node.y
                if dx == 0:
                    dx = self._jiggle()
                if dy == 0:
                    dy = self._jiggle()
                distance_squared = dx * dx + dy * dy
                if distance_squared < MIN_DISTANCE_SQUARED:
                    distance_squared = math.sqrt(MIN_DISTANCE_SQUARED * distance_squared)
                node.vx += dx * weight / distance_squared
                node.vy += dy * weight / distance_squared

    def _apply_collision(self) -> None:
        count = len(self.nodes)
        for i in range(count):
            node = self.nodes[i]
            node_radius = max(node.radius, self.collision_radius)
            for j in range(i + 1, count):
                other = self.nodes[j]
                other_radius = max(other.radius, self.collision_radius)
                reach = node_radius + other_radius
                dx = node.x + node.vx - other.x - other.vx
                dy = node.y + node.vy - other.y - other.vy
                distance_squared = dx * dx + dy * dy
                if distance_squared >= reach * reach:
                    continue
                if dx == 0:
                    dx = self._jiggle()
                    distance_squared += dx * dx
                if dy == 0:
                    dy = self._jiggle()
                    distance_squared += dy * dy
                distance = math.sqrt(distance_squared)
                overlap = (reach - distance) / distance
                dx *= overlap
                dy *= overlap
                share = other_radius**2 / (node_radius**2 + other_radius**2)
                node.vx += dx * share
                node.vy += dy * share
                other.vx -= dx * (1 - share)
                other.vy -= dy * (1 - share)

    def _apply_center(self) -> None:
        if not self.nodes:
            return
        cx, cy = self.center
        shift_x = sum(node.x for node in self.nodes) / len(self.nodes) - cx
        shift_y = sum(node.y for node in self.nodes) / len(self.nodes) - cy
        for node in self.nodes:
            node.x = node.fx if node.fx is not None else node.x - shift_x
            node.y = node.fy if node.fy is not None else node.y - shift_y
