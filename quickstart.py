#!/usr/bin/env python3
"""
Quick Start Script - Demonstrates lineage-graph core features

This script builds a small lineage, answers reachability questions and
runs both layouts.
"""

from lineage_graph import (
    FilterSpec,
    ForceLayoutController,
    ForceLayoutConfig,
    GraphBuilder,
    ReachabilityEngine,
    RecordSet,
    layout_graph_view,
)


def main():
    print("=" * 60)
    print("Lineage Graph v1.0 - Quick Start Demo")
    print("=" * 60)
    print()

    records = RecordSet.from_dict(
        {
            "tables": [
                {"id": "orders", "name": "Orders", "dataset": "shop", "layer": "Raw"},
                {"id": "users", "name": "Users", "dataset": "crm", "layer": "Raw"},
                {"id": "user_orders", "name": "User Orders", "layer": "Inter"},
                {
                    "id": "user_totals",
                    "name": "User Totals",
                    "layer": "Target",
                    "table_type": "Query",
                    "is_scheduled_query": True,
                },
                {"id": "user_report", "name": "User Report", "layer": "Reporting"},
            ],
            "lineage_edges": [
                {"source_table_id": "orders", "target_table_id": "user_orders"},
                {"source_table_id": "users", "target_table_id": "user_orders"},
                {"source_table_id": "user_orders", "target_table_id": "user_totals"},
                {"source_table_id": "user_totals", "target_table_id": "user_report"},
            ],
            "dashboards": [{"id": "sales", "name": "Sales", "owner": "finance"}],
            "dashboard_table_edges": [
                {"dashboard_id": "sales", "table_id": "user_report"}
            ],
        }
    )
    print(f"[OK] Loaded {len(records.tables)} tables and {len(records.dashboards)} dashboards.\n")

    engine = ReachabilityEngine(records)

    # Demo 1: Upstream with distances
    print("=" * 60)
    print("Demo 1: Everything feeding user_report")
    print("=" * 60)
    for table_id, distance in engine.upstream_with_distance("user_report").items():
        print(f"  {table_id}  (distance {distance})")
    print()

    # Demo 2: Dashboard reachability
    print("=" * 60)
    print("Demo 2: Tables behind the Sales dashboard")
    print("=" * 60)
    print(f"  Direct:    {engine.direct_tables_for_dashboard('sales')}")
    print(f"  Reachable: {sorted(engine.tables_reachable_from_dashboard('sales'))}")
    print()

    # Demo 3: Focused view with a hierarchical layout
    print("=" * 60)
    print("Demo 3: Hierarchical layout of the user_orders lineage")
    print("=" * 60)
    view = GraphBuilder().build(
        records,
        FilterSpec(focused_table_id="user_orders", include_linked_dashboards=True),
    )
    layout = layout_graph_view(view)
    for column, node_ids in enumerate(layout.columns()):
        print(f"  Column {column}: {', '.join(node_ids)}")
    print()

    # Demo 4: Force layout settles, then freezes
    print("=" * 60)
    print("Demo 4: Force layout")
    print("=" * 60)
    controller = ForceLayoutController(ForceLayoutConfig(seed=42))
    controller.set_view(GraphBuilder().build(records))
    ticks = controller.run(4.0)
    print(f"  Phase after {ticks} ticks: {controller.phase.value}")
    for node_id, point in controller.positions().items():
        print(f"  {node_id:<12} ({point.x:7.1f}, {point.y:7.1f})")
    controller.stop()
    print()

    print("=" * 60)
    print("[OK] Quick start demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
