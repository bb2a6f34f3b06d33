"""
Utility modules for the lineage graph engine.
"""

from lineage_graph.utils.warnings import GraphWarning, WarningCollector

__all__ = ["GraphWarning", "WarningCollector"]
