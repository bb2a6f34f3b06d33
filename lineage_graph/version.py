"""Version information."""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)

# Version history
CHANGELOG = """
# Changelog

## v1.0.0

**Graph engine**

- Graph builder with attribute, dashboard and focus filters
- Upstream / downstream reachability (cycle safe, with distances)
- Dashboard reachability (direct tables plus their full lineage)

**Layouts**

- Force layout controller with settle / freeze / reorganize lifecycle
- Hierarchical layer-ranked layout with grouped fallback

**CLI**

- Reachability queries
- Graph summary and layout export (JSON / table / pretty)
"""
