"""
Command-line interface for lineage graph v1.0.

This module provides a command-line interface for the lineage graph engine,
allowing users to load a JSON record document, answer upstream / downstream
and dashboard reachability queries, and print or export a filtered graph
with force or hierarchical layout positions.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from colorama import Fore, Style, init
from tabulate import tabulate

from lineage_graph import (
    FilterSpec,
    ForceLayoutConfig,
    ForceLayoutController,
    GraphBuilder,
    ReachabilityEngine,
    RecordSet,
    WarningCollector,
    layout_graph_view,
)
from lineage_graph.exceptions import LineageGraphError
from lineage_graph.store.loader import load_record_file

init(autoreset=True)
USE_COLOR = True


def _color(text: str, color: str) -> str:
    if USE_COLOR:
        return f"{color}{text}{Style.RESET_ALL}"
    return text


def print_success(msg: str) -> None:
    """Print success message."""
    try:
        print(_color(f"✓ {msg}", Fore.GREEN) if USE_COLOR else f"[OK] {msg}")
    except UnicodeEncodeError:
        # Fallback for Windows console encoding issues
        print(_color(f"[OK] {msg}", Fore.GREEN))


def print_error(msg: str) -> None:
    """Print error message."""
    try:
        print(
            _color(f"✗ {msg}", Fore.RED) if USE_COLOR else f"[ERROR] {msg}",
            file=sys.stderr,
        )
    except UnicodeEncodeError:
        print(_color(f"[ERROR] {msg}", Fore.RED), file=sys.stderr)


def print_warning(msg: str) -> None:
    """Print warning message."""
    try:
        print(_color(f"⚠ {msg}", Fore.YELLOW) if USE_COLOR else f"[WARN] {msg}")
    except UnicodeEncodeError:
        print(_color(f"[WARN] {msg}", Fore.YELLOW))


def print_info(msg: str) -> None:
    """Print info message."""
    print(_color(msg, Fore.CYAN))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lineage-graph",
        description="Lineage Graph Engine - v1.0",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summarize the graph of a record document
  %(prog)s records.json

  # Everything upstream of a table, with distances
  %(prog)s records.json --upstream t_orders_daily

  # Tables feeding a dashboard
  %(prog)s records.json --dashboard d_sales

  # Focus on one table's lineage and lay it out left to right
  %(prog)s records.json --focus-table t_orders --layout hierarchical

  # Export a filtered, force-laid-out graph
  %(prog)s records.json --layer Raw Inter --layout force --export graph.json
        """,
    )

    # === Input parameters ===
    input_group = parser.add_argument_group("Input Options")
    input_group.add_argument("records_file", help="Record document (JSON format)")
    input_group.add_argument(
        "--project", "-p", help="Project id (default: the first project)"
    )

    # === Query parameters ===
    query_group = parser.add_argument_group("Query Options")
    query_group.add_argument(
        "--upstream", "-u", metavar="TABLE", help="List every table feeding TABLE"
    )
    query_group.add_argument(
        "--downstream", "-d", metavar="TABLE", help="List every table fed by TABLE"
    )
    query_group.add_argument(
        "--dashboard",
        metavar="DASHBOARD",
        help="List every table reachable from DASHBOARD",
    )
    query_group.add_argument(
        "--connections",
        metavar="TABLE",
        help="Count upstream, downstream and dashboard connections of TABLE",
    )

    # === Filter parameters ===
    filter_group = parser.add_argument_group("Filter Options")
    focus = filter_group.add_mutually_exclusive_group()
    focus.add_argument("--focus-table", metavar="TABLE", help="Show TABLE's lineage")
    focus.add_argument(
        "--focus-dashboard",
        metavar="DASHBOARD",
        help="Show DASHBOARD and every table reachable from it",
    )
    focus.add_argument(
        "--select-dashboard",
        metavar="DASHBOARD",
        help="Restrict attribute-filtered tables to those reachable from DASHBOARD",
    )
    filter_group.add_argument(
        "--with-dashboards",
        action="store_true",
        help="With --focus-table, also show dashboards fed by the lineage",
    )
    filter_group.add_argument("--layer", nargs="+", metavar="LAYER", default=[])
    filter_group.add_argument("--dataset", nargs="+", metavar="DATASET", default=[])
    filter_group.add_argument("--type", nargs="+", metavar="TYPE", default=[])
    filter_group.add_argument(
        "--scheduled-only", action="store_true", help="Only scheduled-query tables"
    )
    filter_group.add_argument("--search", metavar="TEXT", default="")

    # === Layout parameters ===
    layout_group = parser.add_argument_group("Layout Options")
    layout_group.add_argument(
        "--layout", choices=["force", "hierarchical"], help="Compute node positions"
    )
    layout_group.add_argument(
        "--settle-seconds",
        type=float,
        default=4.0,
        help="Force layout settle time in simulated seconds (default: 4.0)",
    )
    layout_group.add_argument(
        "--seed", type=int, default=None, help="Random seed for the force layout"
    )

    # === Output parameters ===
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--format",
        "-f",
        choices=["json", "table", "pretty"],
        default="pretty",
        help="Output format (default: pretty)",
    )
    output_group.add_argument(
        "--export", "-o", metavar="FILE", help="Export the graph (and layout) to FILE"
    )
    output_group.add_argument(
        "--no-color", action="store_true", help="Disable colored output"
    )
    output_group.add_argument(
        "--no-warnings", action="store_true", help="Suppress warnings"
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI main entry point.

    Supported commands:
        # Graph summary
        lineage-graph records.json

        # Reachability
        lineage-graph records.json --upstream TABLE
        lineage-graph records.json --downstream TABLE
        lineage-graph records.json --dashboard DASHBOARD

        # Filtered graph with layout, exported
        lineage-graph records.json --focus-table TABLE --layout force --export out.json
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Disable color
    if args.no_color:
        global USE_COLOR
        USE_COLOR = False

    collector = WarningCollector()
    try:
        # 1. Load records
        print_info(f"Reading records from: {args.records_file}")
        store = load_record_file(args.records_file, collector)

        project_ids = store.project_ids()
        project_id = args.project or (project_ids[0] if project_ids else None)
        if project_id is None:
            print_error("Record document contains no projects")
            sys.exit(1)
        records = store.load_record_set(project_id)
        print_success(
            f"Loaded project '{project_id}': {len(records.tables)} tables, "
            f"{len(records.dashboards)} dashboards."
        )

        # 2. Handle query commands
        engine = ReachabilityEngine(records)
        if args.upstream:
            handle_distances(
                records, engine.upstream_with_distance(args.upstream), "upstream", args
            )
        elif args.downstream:
            handle_distances(
                records,
                engine.downstream_with_distance(args.downstream),
                "downstream",
                args,
            )
        elif args.dashboard:
            handle_dashboard(records, engine, args.dashboard, args.format)
        elif args.connections:
            handle_connections(engine, args.connections, args.format)
        else:
            handle_graph(records, engine, args)

        # 3. Show warnings (if any)
        if not args.no_warnings:
            show_warnings(collector)

    except LineageGraphError as e:
        print_error(f"Lineage graph failed: {e}")
        sys.exit(1)
    except ValueError as e:
        print_error(f"Invalid option: {e}")
        sys.exit(1)


def handle_distances(
    records: RecordSet, distances: dict[str, int], direction: str, args
) -> None:
    """Handle --upstream and --downstream."""
    table_id = args.upstream or args.downstream
    print_info(f"\nTables {direction} of {table_id}:\n")
    if not distances:
        print_warning(f"No {direction} tables found for {table_id}")
        return

    rows = [
        {"id": node_id, "name": _table_name(records, node_id), "distance": distance}
        for node_id, distance in sorted(distances.items(), key=lambda kv: (kv[1], kv[0]))
    ]
    emit_rows(rows, args.format)


def handle_dashboard(
    records: RecordSet, engine: ReachabilityEngine, dashboard_id: str, format: str
) -> None:
    """Handle --dashboard."""
    print_info(f"\nTables reachable from dashboard {dashboard_id}:\n")
    direct = engine.direct_tables_for_dashboard(dashboard_id)
    reachable = engine.tables_reachable_from_dashboard(dashboard_id)
    if not reachable:
        print_warning(f"No tables found for dashboard {dashboard_id}")
        return

    rows = [
        {
            "id": table_id,
            "name": _table_name(records, table_id),
            "direct": table_id in direct,
        }
        for table_id in sorted(reachable)
    ]
    emit_rows(rows, format)


def handle_connections(engine: ReachabilityEngine, table_id: str, format: str) -> None:
    """Handle --connections."""
    summary = engine.connection_summary(table_id)
    emit_rows([summary.to_dict()], format)


def handle_graph(records: RecordSet, engine: ReachabilityEngine, args) -> None:
    """Build the filtered graph, optionally lay it out, print and export it."""
    filter_spec = FilterSpec(
        datasets=args.dataset,
        layers=args.layer,
        table_types=args.type,
        scheduled_only=args.scheduled_only,
        search_term=args.search,
        selected_dashboard_id=args.select_dashboard,
        focused_table_id=args.focus_table,
        focused_dashboard_id=args.focus_dashboard,
        include_linked_dashboards=args.with_dashboards,
    )
    view = GraphBuilder().build(records, filter_spec, reachability=engine)

    positions: dict[str, dict[str, Any]] = {}
    layout_info: Optional[dict[str, Any]] = None
    if args.layout == "force":
        controller = ForceLayoutController(
            ForceLayoutConfig(settle_seconds=args.settle_seconds, seed=args.seed)
        )
        controller.set_view(view)
        controller.run(args.settle_seconds)
        controller.stop()
        positions = {
            node_id: point.to_dict() for node_id, point in controller.positions().items()
        }
        layout_info = controller.to_dict()
    elif args.layout == "hierarchical":
        result = layout_graph_view(view)
        positions = {node.id: {"x": node.x, "y": node.y} for node in result.nodes}
        layout_info = result.to_dict()
        if not args.no_warnings:
            show_warnings(result.warnings)

    print_info("\n" + "=" * 60)
    print_info("Graph Summary")
    print_info("=" * 60 + "\n")
    print(f"Nodes: {len(view.nodes)}")
    print(f"  Tables: {len(view.table_nodes())}")
    print(f"  Dashboards: {len(view.dashboard_nodes())}")
    print(f"Links: {len(view.links)}")
    print()

    if args.format == "json":
        print(json.dumps(_graph_document(view, args.layout, layout_info), indent=2))
    else:
        rows = []
        for node in view.nodes:
            row = {
                "id": node.id,
                "name": node.name,
                "kind": node.kind,
                "connections": node.connection_count,
            }
            if node.id in positions:
                row["x"] = round(positions[node.id]["x"], 1)
                row["y"] = round(positions[node.id]["y"], 1)
            rows.append(row)
        emit_rows(rows, args.format)

    if args.export:
        handle_export(_graph_document(view, args.layout, layout_info), args.export)


def emit_rows(rows: list[dict[str, Any]], format: str) -> None:
    """Print rows as JSON, a table, or an indented listing."""
    if format == "json":
        print(json.dumps(rows, indent=2))
    elif format == "table":
        print(tabulate(rows, headers="keys", tablefmt="github"))
    else:
        for row in rows:
            values = list(row.items())
            _, head = values[0]
            details = ", ".join(f"{key}: {value}" for key, value in values[1:])
            print(f"  - {_color(str(head), Fore.CYAN)}  {details}")


def handle_export(document: dict[str, Any], output_file: str) -> None:
    """Write the graph document to a JSON file."""
    output_path = Path(output_file)
    print_info(f"\nExporting graph to: {output_path}")
    output_path.write_text(
        json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    print_success(f"Exported to {output_path}")


def show_warnings(collector: WarningCollector) -> None:
    """Show collected warning messages."""
    warnings = collector.get_all()
    if warnings:
        print_warning(f"\n{len(warnings)} warning(s):")
        for i, warning in enumerate(warnings, 1):
            print(f"  {i}. {warning}")


def _graph_document(view, layout: Optional[str], layout_info) -> dict[str, Any]:
    document: dict[str, Any] = {"graph": view.to_dict()}
    if layout:
        document["layout"] = {"engine": layout, **layout_info}
    return document


def _table_name(records: RecordSet, table_id: str) -> str:
    table = records.get_table(table_id)
    return table.name if table is not None else ""


if __name__ == "__main__":
    main()
