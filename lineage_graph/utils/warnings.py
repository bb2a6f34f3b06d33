"""
Diagnostic collection for lineage graph ingestion and layout.

Record loading and the hierarchical layout engine degrade instead of failing:
a malformed record is skipped, a failing layered layout falls back to the
grouped layout. Each such event is recorded in a WarningCollector so callers
(and the CLI) can report what happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

LEVELS = ("INFO", "WARNING", "ERROR")


@dataclass
class GraphWarning:
    """A diagnostic message.

    Attributes:
        level: Severity level ("INFO", "WARNING", "ERROR").
        message: Message text.
        context: Optional context, such as the offending record or node id.

    Example:
        >>> warning = GraphWarning("WARNING", "Skipped table record")
        >>> warning.level
        'WARNING'
    """

    level: str
    message: str
    context: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate warning level."""
        if self.level not in LEVELS:
            raise ValueError(
                f"Invalid warning level: {self.level}. "
                f"Must be one of {list(LEVELS)}"
            )

    def __str__(self) -> str:
        if self.context:
            return f"[{self.level}] {self.message} ({self.context})"
        return f"[{self.level}] {self.message}"


class WarningCollector:
    """Collects diagnostics in the order they occur.

    Attributes:
        warnings: Collected GraphWarning objects.

    Example:
        >>> collector = WarningCollector()
        >>> collector.add("WARNING", "Skipped dashboard record")
        >>> collector.has_errors()
        False
        >>> collector.get_summary()
        {'INFO': 0, 'WARNING': 1, 'ERROR': 0}
    """

    def __init__(self) -> None:
        """Initialize an empty WarningCollector."""
        self.warnings: list[GraphWarning] = []

    def add(self, level: str, message: str, context: Optional[str] = None) -> None:
        """Add a diagnostic.

        Args:
            level: Severity level ("INFO", "WARNING", "ERROR").
            message: Message text.
            context: Optional context information.

        Raises:
            ValueError: If level is not a known severity.
        """
        self.warnings.append(GraphWarning(level=level, message=message, context=context))

    def has_errors(self) -> bool:
        """Return True if any ERROR-level diagnostic was collected."""
        return any(warning.level == "ERROR" for warning in self.warnings)

    def get_all(self) -> list[GraphWarning]:
        """Return a copy of all diagnostics in insertion order."""
        return self.warnings.copy()

    def get_by_level(self, level: str) -> list[GraphWarning]:
        return [warning for warning in self.warnings if warning.level == level]

    def clear(self) -> None:
        self.warnings.clear()

    def __len__(self) -> int:
        return len(self.warnings)

    def add_skipped_record_warning(
        self, kind: str, reason: str, context: Optional[str] = None
    ) -> None:
        """Record that an input record was skipped during loading.

        Args:
            kind: Record kind, such as "table" or "lineage edge".
            reason: Why the record was skipped.
            context: Optional representation of the record.

        Example:
            >>> collector = WarningCollector()
            >>> collector.add_skipped_record_warning("table", "missing 'id'")
            >>> collector.get_all()[0].message
            "Skipped table record: missing 'id'"
        """
        self.add("WARNING", f"Skipped {kind} record: {reason}", context)

    def add_duplicate_record_warning(self, kind: str, record_id: str) -> None:
        """Record that a later record with an existing id was ignored."""
        self.add(
            "INFO",
            f"Duplicate {kind} '{record_id}' ignored; the first record is kept",
        )

    def add_layout_fallback_warning(
        self, reason: str, node_id: Optional[str] = None
    ) -> None:
        """Record that the layered layout failed and the grouped layout was used.

        Args:
            reason: Description of the failure.
            node_id: Offending node, when the failure is tied to one.
        """
        self.add(
            "WARNING",
            f"Layered layout failed, using grouped layout: {reason}",
            f"node: {node_id}" if node_id else None,
        )

    def get_summary(self) -> dict[str, int]:
        """Return counts of diagnostics by level.

        Example:
            >>> collector = WarningCollector()
            >>> collector.add("INFO", "Info 1")
            >>> collector.add("ERROR", "Error 1")
            >>> collector.get_summary() == {"INFO": 1, "WARNING": 0, "ERROR": 1}
            True
        """
        summary: dict[str, int] = {level: 0 for level in LEVELS}
        for warning in self.warnings:
            summary[warning.level] += 1
        return summary
