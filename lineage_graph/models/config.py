"""
Configuration models for the lineage graph engine.

This module defines the ErrorMode enum and the configuration dataclasses that
control graph building and the two layout engines. Every setting has a
default, so ``ForceLayoutConfig()`` and friends work out of the box.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorMode(str, Enum):
    """Enumeration of error handling modes.

    Attributes:
        FAIL: Raise an exception immediately.
        WARN: Emit a warning and continue with the documented fallback.
        IGNORE: Continue with the documented fallback silently.

    Example:
        >>> ErrorMode.values()
        ['fail', 'warn', 'ignore']
    """

    FAIL = "fail"
    WARN = "warn"
    IGNORE = "ignore"

    @classmethod
    def values(cls) -> list[str]:
        """Return a list of all possible error mode values."""
        return [member.value for member in cls]


@dataclass
class GraphConfig:
    """Configuration for the graph builder.

    Attributes:
        on_focus_conflict: What to do when a FilterSpec sets more than one
            focus. FAIL raises FilterConflictError; WARN emits a
            FocusConflictWarning and applies precedence (focused table, then
            focused dashboard, then selected dashboard); IGNORE applies
            precedence silently. Defaults to ErrorMode.WARN.
    """

    on_focus_conflict: ErrorMode = ErrorMode.WARN

    def __post_init__(self) -> None:
        """Validate configuration settings."""
        if not isinstance(self.on_focus_conflict, ErrorMode):
            raise TypeError("on_focus_conflict must be an ErrorMode instance")


@dataclass
class ForceLayoutConfig:
    """Configuration for the force layout controller.

    Times are logical seconds: each tick advances the controller clock by
    ``tick_seconds``.

    Attributes:
        width: Canvas width; the centering force targets ``width / 2``.
        height: Canvas height; the centering force targets ``height / 2``.
        settle_seconds: Time spent settling before the layout freezes.
        freeze_grace_seconds: Time new nodes get to settle while the rest
            stay pinned.
        tick_seconds: Logical time per tick.
        charge_strength: Pairwise repulsion while nothing is pinned.
        pinned_charge_strength: Weaker repulsion used while any node is
            pinned.
        link_distance: Target link length, independent of node count.
        collision_radius: Minimum separation radius per node.
        alpha_min: Simulation cools to rest below this alpha.
        alpha_decay: Per-tick alpha decay. None derives it from alpha_min
            so cooling takes about 300 ticks.
        velocity_decay: Fraction of velocity lost per tick.
        reheat_alpha: Alpha set on start and reorganize.
        incremental_alpha: Alpha floor applied when the view changes after
            the first layout.
        drag_alpha_target: Alpha target held while a node is dragged in an
            unfrozen layout.
        dashboard_radius: Fixed radius of dashboard nodes.
        min_radius: Smallest table radius.
        max_radius: Largest table radius.
        base_radius: Table radius when no table in the view has connections.
        scheduled_bonus: Added to the radius of scheduled-query tables.
        seed_min_distance: Minimum distance from a neighbor when seeding a
            new node.
        seed_max_distance: Maximum distance from a neighbor when seeding a
            new node.
        seed: Seed for the random source (jiggle and seeding angles).
    """

    width: float = 960.0
    height: float = 600.0
    settle_seconds: float = 4.0
    freeze_grace_seconds: float = 1.5
    tick_seconds: float = 1 / 60
    charge_strength: float = -300.0
    pinned_charge_strength: float = -100.0
    link_distance: float = 100.0
    collision_radius: float = 30.0
    alpha_min: float = 0.001
    alpha_decay: Optional[float] = None
    velocity_decay: float = 0.4
    reheat_alpha: float = 1.0
    incremental_alpha: float = 0.3
    drag_alpha_target: float = 0.3
    dashboard_radius: float = 14.0
    min_radius: float = 6.0
    max_radius: float = 20.0
    base_radius: float = 8.0
    scheduled_bonus: float = 2.0
    seed_min_distance: float = 40.0
    seed_max_distance: float = 80.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration settings."""
        for name in ("width", "height", "tick_seconds", "link_distance"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("settle_seconds", "freeze_grace_seconds", "collision_radius"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if not 0 < self.alpha_min < 1:
            raise ValueError("alpha_min must be between 0 and 1")
        if self.alpha_decay is not None and not 0 <= self.alpha_decay < 1:
            raise ValueError("alpha_decay must be between 0 and 1")
        if not 0 <= self.velocity_decay <= 1:
            raise ValueError("velocity_decay must be between 0 and 1")
        if self.min_radius > self.max_radius:
            raise ValueError("min_radius must not exceed max_radius")
        if self.seed_min_distance > self.seed_max_distance:
            raise ValueError("seed_min_distance must not exceed seed_max_distance")

    @property
    def effective_alpha_decay(self) -> float:
        if self.alpha_decay is not None:
            return self.alpha_decay
        return 1 - self.alpha_min ** (1 / 300)


@dataclass
class HierarchicalLayoutConfig:
    """Configuration for the hierarchical layout engine.

    Spacing is derived from the average node size of the current view and
    never drops below the floors.

    Attributes:
        default_width: Width used when a node has neither a measured nor a
            declared width.
        default_height: Height used likewise.
        rank_spacing_factor: Rank separation as a multiple of average width.
        min_rank_spacing: Floor for rank separation.
        node_spacing_factor: Node separation as a multiple of average height.
        min_node_spacing: Floor for node separation.
        margin_x_factor: Horizontal margin as a multiple of average width.
        min_margin_x: Floor for the horizontal margin.
        margin_y_factor: Vertical margin as a multiple of average height.
        min_margin_y: Floor for the vertical margin.
        crossing_passes: Maximum barycenter sweep passes.
        fallback_column_factor: Fallback column spacing as a multiple of the
            widest node.
        fallback_row_gap: Gap added to the tallest node height between
            fallback rows.
        fallback_origin: Top-left offset of the fallback grid.
    """

    default_width: float = 80.0
    default_height: float = 60.0
    rank_spacing_factor: float = 4.5
    min_rank_spacing: float = 350.0
    node_spacing_factor: float = 3.0
    min_node_spacing: float = 150.0
    margin_x_factor: float = 2.0
    min_margin_x: float = 120.0
    margin_y_factor: float = 1.0
    min_margin_y: float = 50.0
    crossing_passes: int = 24
    fallback_column_factor: float = 4.0
    fallback_row_gap: float = 20.0
    fallback_origin: float = 50.0

    def __post_init__(self) -> None:
        """Validate configuration settings."""
        if self.default_width <= 0 or self.default_height <= 0:
            raise ValueError("default dimensions must be positive")
        if self.crossing_passes < 0:
            raise ValueError("crossing_passes must not be negative")
