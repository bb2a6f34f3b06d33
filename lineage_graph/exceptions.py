"""
Custom exception and warning classes for the lineage graph engine.

This module defines all custom exceptions used throughout the lineage_graph
package. Most engine operations degrade gracefully (unknown ids yield empty
results, dangling edges are dropped), so these exceptions mark caller
contract violations and collaborator failures rather than data problems.
"""

from typing import Optional, Sequence


class LineageGraphError(Exception):
    """Base exception class for all lineage graph errors.

    Attributes:
        message: Human-readable error message describing the error.
    """

    def __init__(self, message: str) -> None:
        """Initialize a LineageGraphError with a message.

        Args:
            message: Error message describing what went wrong.
        """
        self.message = message
        super().__init__(self.message)


class FilterConflictError(LineageGraphError):
    """Exception raised when a filter sets more than one focus.

    Focus filters (selected dashboard, focused table, focused dashboard) are
    mutually exclusive. Setting two of them at once is a programming error in
    the caller. Whether it raises depends on ``GraphConfig.on_focus_conflict``.

    Attributes:
        message: Error message describing the conflict.
        focus_fields: Names of the focus fields that were set together.
    """

    def __init__(self, message: str, focus_fields: Sequence[str]) -> None:
        self.focus_fields = list(focus_fields)
        super().__init__(message)


class LayoutError(LineageGraphError):
    """Exception raised when the layered layout cannot place a node.

    The hierarchical layout engine raises this internally on degenerate input
    (for example a node with no positive width or height) and catches it to
    switch to the grouped fallback layout.

    Attributes:
        message: Error message describing the failure.
        node_id: Id of the offending node, if known.
    """

    def __init__(self, message: str, node_id: Optional[str] = None) -> None:
        self.node_id = node_id
        super().__init__(message)


class RecordStoreError(LineageGraphError):
    """Exception raised when a record store cannot serve a project.

    Attributes:
        message: Error message describing the failure.
        project_id: Project that was requested.
    """

    def __init__(self, message: str, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(message)


class RecordLoadError(LineageGraphError):
    """Exception raised when a record document cannot be read at all.

    Individual malformed records are skipped, not raised. This is only for
    documents that are not usable as a whole (unreadable file, invalid JSON,
    wrong top-level shape).

    Attributes:
        message: Error message describing the failure.
        source: File path or description of the document.
    """

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        if source:
            message = f"{message} (source: {source})"
        super().__init__(message)


class FocusConflictWarning(UserWarning):
    """Warning emitted when conflicting focus filters are resolved by precedence."""
