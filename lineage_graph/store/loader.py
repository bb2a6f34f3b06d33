"""
JSON record document loader.

This module turns a JSON record document into a RecordSet (or, for
multi-project documents, a DictRecordStore). A document looks like::

    {
        "tables": [{"id": "t1", "name": "orders", "layer": "Raw"}],
        "lineage_edges": [{"source_table_id": "t1", "target_table_id": "t2"}],
        "dashboards": [{"id": "d1", "name": "Sales"}],
        "dashboard_table_edges": [{"dashboard_id": "d1", "table_id": "t2"}]
    }

or ``{"projects": {"<project id>": <document>, ...}}``. Field names are
accepted in snake_case, camelCase and the column headings of the spreadsheet
export (``Table_ID``, ``Dataset/CustomQuery``, ``Scheduled Query`` ...).

Malformed records are skipped with a WARNING in the collector; only a
document that cannot be read at all raises RecordLoadError.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from lineage_graph.exceptions import RecordLoadError
from lineage_graph.models.records import (
    Dashboard,
    DashboardTableEdge,
    Layer,
    RecordSet,
    Table,
    TableLineageEdge,
    TableType,
)
from lineage_graph.store.dict_store import DictRecordStore
from lineage_graph.utils.warnings import WarningCollector

DEFAULT_PROJECT_ID = "default"

COLLECTION_KEYS = {
    "tables": ("tables",),
    "lineage_edges": ("lineage_edges", "lineageEdges", "lineage", "table_lineage"),
    "dashboards": ("dashboards",),
    "dashboard_edges": (
        "dashboard_table_edges",
        "dashboardTableEdges",
        "dashboard_edges",
        "dashboard_tables",
    ),
}

FIELD_ALIASES = {
    "table_id": ("id", "table_id", "tableId", "Table_ID"),
    "table_name": ("name", "table_name", "tableName", "Table_Name"),
    "dataset": ("dataset", "Dataset", "Dataset/CustomQuery"),
    "layer": ("layer", "Layer"),
    "table_type": ("table_type", "tableType", "Table_Type", "Type", "type"),
    "scheduled": (
        "is_scheduled_query",
        "isScheduledQuery",
        "scheduled_query",
        "Scheduled Query",
    ),
    "link": ("link", "Link"),
    "description": ("description", "Description"),
    "source_id": ("source_table_id", "sourceTableId", "Source_Table_ID", "source"),
    "target_id": ("target_table_id", "targetTableId", "Target_Table_ID", "target"),
    "source_name": ("source_table_name", "sourceTableName", "Source_Table_Name"),
    "target_name": ("target_table_name", "targetTableName", "Target_Table_Name"),
    "dashboard_id": ("id", "dashboard_id", "dashboardId", "Dashboard_ID"),
    "dashboard_name": ("name", "dashboard_name", "dashboardName", "Dashboard_Name"),
    "owner": ("owner", "Owner"),
    "business_area": ("business_area", "businessArea", "Business_Area", "BusinessArea"),
    "edge_dashboard_id": ("dashboard_id", "dashboardId", "Dashboard_ID"),
    "edge_table_id": ("table_id", "tableId", "Table_ID"),
    "edge_dashboard_name": ("dashboard_name", "dashboardName", "Dashboard_Name"),
    "edge_table_name": ("table_name", "tableName", "Table_Name"),
}

TRUE_STRINGS = {"yes", "y", "true", "1"}
FALSE_STRINGS = {"no", "n", "false", "0", ""}


def record_set_from_dict(
    document: Mapping[str, Any], collector: Optional[WarningCollector] = None
) -> RecordSet:
    """Build a RecordSet from a single-project document.

    Args:
        document: Mapping with up to four record collections. Missing
            collections are treated as empty.
        collector: Receives a WARNING per skipped record and an INFO per
            duplicate id. A throwaway collector is used when omitted.

    Returns:
        RecordSet with every well-formed record.

    Raises:
        RecordLoadError: If the document or a collection has the wrong shape.

    Example:
        >>> records = record_set_from_dict(
        ...     {"tables": [{"id": "t1", "name": "orders"}, {"name": "no id"}]}
        ... )
        >>> [t.id for t in records.tables]
        ['t1']
    """
    if not isinstance(document, Mapping):
        raise RecordLoadError(
            f"Record document must be an object, got {type(document).__name__}"
        )
    collector = collector if collector is not None else WarningCollector()

    tables = _parse_all(document, "tables", "table", _parse_table, collector)
    lineage_edges = _parse_all(
        document, "lineage_edges", "lineage edge", _parse_lineage_edge, collector
    )
    dashboards = _parse_all(
        document, "dashboards", "dashboard", _parse_dashboard, collector
    )
    dashboard_edges = _parse_all(
        document, "dashboard_edges", "dashboard edge", _parse_dashboard_edge, collector
    )

    _report_duplicates(tables, "table", collector)
    _report_duplicates(dashboards, "dashboard", collector)

    return RecordSet(
        tables=tables,
        lineage_edges=lineage_edges,
        dashboards=dashboards,
        dashboard_edges=dashboard_edges,
    )


def record_store_from_dict(
    document: Mapping[str, Any], collector: Optional[WarningCollector] = None
) -> DictRecordStore:
    """Build a DictRecordStore from a document.

    A document with a ``projects`` mapping yields one project per entry;
    any other document becomes the single project ``DEFAULT_PROJECT_ID``.

    Raises:
        RecordLoadError: If the document has the wrong shape.
    """
    if not isinstance(document, Mapping):
        raise RecordLoadError(
            f"Record document must be an object, got {type(document).__name__}"
        )
    store = DictRecordStore()
    projects = document.get("projects")
    if projects is None:
        store.add_record_set(
            DEFAULT_PROJECT_ID, record_set_from_dict(document, collector)
        )
        return store
    if not isinstance(projects, Mapping):
        raise RecordLoadError("'projects' must map project ids to documents")
    for project_id, project_document in projects.items():
        store.add_record_set(
            str(project_id), record_set_from_dict(project_document, collector)
        )
    return store


def load_record_file(
    path: Union[str, Path], collector: Optional[WarningCollector] = None
) -> DictRecordStore:
    """Read a JSON record document from disk into a DictRecordStore.

    Args:
        path: Path of the JSON file.
        collector: Receives diagnostics for skipped records.

    Raises:
        RecordLoadError: If the file cannot be read or is not valid JSON.
    """
    source = str(path)
    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
    except OSError as e:
        raise RecordLoadError(f"Cannot read record file: {e.strerror}", source) from e
    except json.JSONDecodeError as e:
        raise RecordLoadError(f"Invalid JSON: {e.msg} at line {e.lineno}", source) from e

    try:
        return record_store_from_dict(document, collector)
    except RecordLoadError as e:
        raise RecordLoadError(e.message, source) from e


def _parse_all(document, collection, kind, parse, collector):
    items = _lookup(document, COLLECTION_KEYS[collection])
    if items is None:
        return []
    if not isinstance(items, list):
        raise RecordLoadError(f"'{collection}' must be a list")

    parsed = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            collector.add_skipped_record_warning(
                kind, f"entry {index} is not an object"
            )
            continue
        try:
            parsed.append(parse(item))
        except ValueError as e:
            collector.add_skipped_record_warning(
                kind, f"entry {index}: {e}", repr(dict(item))
            )
    return parsed


def _parse_table(row: Mapping[str, Any]) -> Table:
    layer_value = _lookup(row, FIELD_ALIASES["layer"])
    layer = Layer.RAW if _blank(layer_value) else Layer.parse(layer_value)
    if layer is None:
        raise ValueError(f"unknown layer '{layer_value}'")

    type_value = _lookup(row, FIELD_ALIASES["table_type"])
    table_type = TableType.TABLE if _blank(type_value) else TableType.parse(type_value)
    if table_type is None:
        raise ValueError(f"unknown table type '{type_value}'")

    return Table(
        id=_required(row, "table_id"),
        name=_required(row, "table_name"),
        dataset=_optional(row, "dataset") or "",
        layer=layer,
        table_type=table_type,
        is_scheduled_query=_flag(_lookup(row, FIELD_ALIASES["scheduled"])),
        link=_optional(row, "link"),
        description=_optional(row, "description"),
    )


def _parse_lineage_edge(row: Mapping[str, Any]) -> TableLineageEdge:
    return TableLineageEdge(
        source_table_id=_required(row, "source_id"),
        target_table_id=_required(row, "target_id"),
        source_table_name=_optional(row, "source_name") or "",
        target_table_name=_optional(row, "target_name") or "",
    )


def _parse_dashboard(row: Mapping[str, Any]) -> Dashboard:
    return Dashboard(
        id=_required(row, "dashboard_id"),
        name=_required(row, "dashboard_name"),
        owner=_optional(row, "owner"),
        business_area=_optional(row, "business_area"),
        link=_optional(row, "link"),
    )


def _parse_dashboard_edge(row: Mapping[str, Any]) -> DashboardTableEdge:
    return DashboardTableEdge(
        dashboard_id=_required(row, "edge_dashboard_id"),
        table_id=_required(row, "edge_table_id"),
        dashboard_name=_optional(row, "edge_dashboard_name") or "",
        table_name=_optional(row, "edge_table_name") or "",
    )


def _lookup(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in row:
            return row[key]
    return None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required(row: Mapping[str, Any], field_name: str) -> str:
    keys = FIELD_ALIASES[field_name]
    value = _lookup(row, keys)
    if _blank(value):
        raise ValueError(f"missing '{keys[0]}'")
    return str(value).strip()


def _optional(row: Mapping[str, Any], field_name: str) -> Optional[str]:
    value = _lookup(row, FIELD_ALIASES[field_name])
    if _blank(value):
        return None
    return str(value).strip()


def _flag(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return bool(value)
    text = str(value).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise ValueError(f"cannot read '{value}' as yes/no")


def _report_duplicates(records, kind: str, collector: WarningCollector) -> None:
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            collector.add_duplicate_record_warning(kind, record.id)
        seen.add(record.id)
