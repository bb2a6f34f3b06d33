"""
Tests for record stores and the JSON loader.

This module contains tests for DictRecordStore, record_set_from_dict,
record_store_from_dict and load_record_file.
"""

import json

import pytest

from lineage_graph import (
    Dashboard,
    DashboardTableEdge,
    DictRecordStore,
    Layer,
    RecordLoadError,
    RecordSet,
    RecordStore,
    RecordStoreError,
    Table,
    TableLineageEdge,
    TableType,
    WarningCollector,
)
from lineage_graph.store.loader import (
    DEFAULT_PROJECT_ID,
    load_record_file,
    record_set_from_dict,
    record_store_from_dict,
)


class TestDictRecordStore:
    """Tests for DictRecordStore."""

    def setup_method(self):
        """Create a store with one small project."""
        self.store = DictRecordStore()
        self.store.put_table("p1", Table("a", "A"))
        self.store.put_table("p1", Table("b", "B"))
        self.store.put_table("p1", Table("c", "C"))
        self.store.put_lineage_edge("p1", TableLineageEdge("a", "b"))
        self.store.put_lineage_edge("p1", TableLineageEdge("b", "c"))
        self.store.put_dashboard("p1", Dashboard("d", "D"))
        self.store.put_dashboard_table_edge("p1", DashboardTableEdge("d", "b"))

    def test_is_record_store(self):
        """Test DictRecordStore implements the RecordStore interface."""
        assert isinstance(self.store, RecordStore)

    def test_load_record_set(self):
        """Test assembling a RecordSet from the four getters."""
        records = self.store.load_record_set("p1")

        assert [t.id for t in records.tables] == ["a", "b", "c"]
        assert len(records.lineage_edges) == 2
        assert records.dashboard_edges[0].key == ("d", "b")

    def test_put_replaces_by_id(self):
        """Test putting a table with an existing id replaces it in place."""
        self.store.put_table("p1", Table("a", "Renamed"))

        tables = self.store.get_tables("p1")
        assert [t.id for t in tables] == ["a", "b", "c"]
        assert tables[0].name == "Renamed"

    def test_delete_table_cascades(self):
        """Test deleting a table removes every edge touching it."""
        assert self.store.delete_table("p1", "b") is True

        assert [t.id for t in self.store.get_tables("p1")] == ["a", "c"]
        assert self.store.get_lineage_edges("p1") == []
        assert self.store.get_dashboard_table_edges("p1") == []

    def test_delete_dashboard_cascades(self):
        """Test deleting a dashboard removes its edges."""
        assert self.store.delete_dashboard("p1", "d") is True

        assert self.store.get_dashboards("p1") == []
        assert self.store.get_dashboard_table_edges("p1") == []

    def test_delete_edges(self):
        """Test deleting single edges."""
        assert self.store.delete_lineage_edge("p1", "a", "b") is True
        assert self.store.delete_lineage_edge("p1", "a", "b") is False
        assert self.store.delete_dashboard_table_edge("p1", "d", "b") is True

    def test_projects_are_isolated(self):
        """Test projects do not share records."""
        self.store.put_table("p2", Table("x", "X"))

        assert [t.id for t in self.store.get_tables("p2")] == ["x"]
        assert self.store.project_ids() == ["p1", "p2"]

    def test_unknown_project(self):
        """Test reading an unknown project raises RecordStoreError."""
        with pytest.raises(RecordStoreError) as exc_info:
            self.store.get_tables("nope")

        assert exc_info.value.project_id == "nope"

    def test_create_and_delete_project(self):
        """Test project lifecycle."""
        self.store.create_project("empty")
        assert len(self.store.load_record_set("empty")) == 0

        self.store.delete_project("empty")
        assert not self.store.has_project("empty")

    def test_from_record_sets(self):
        """Test seeding a store from RecordSets."""
        store = DictRecordStore({"p": RecordSet(tables=[Table("a", "A")])})

        assert store.get_tables("p")[0].id == "a"


class TestRecordSetFromDict:
    """Tests for record_set_from_dict."""

    def test_snake_case_document(self):
        """Test a document using snake_case keys."""
        records = record_set_from_dict(
            {
                "tables": [
                    {
                        "id": "t1",
                        "name": "orders",
                        "dataset": "shop",
                        "layer": "Inter",
                        "table_type": "View",
                        "is_scheduled_query": True,
                        "link": "https://example.com/t1",
                    }
                ],
                "dashboards": [
                    {"id": "d1", "name": "Sales", "owner": "ann", "business_area": "Fin"}
                ],
                "dashboard_table_edges": [{"dashboard_id": "d1", "table_id": "t1"}],
            }
        )
        table = records.get_table("t1")

        assert table.layer is Layer.INTER
        assert table.table_type is TableType.VIEW
        assert table.is_scheduled_query is True
        assert table.link == "https://example.com/t1"
        assert records.get_dashboard("d1").business_area == "Fin"
        assert records.dashboard_edges[0].key == ("d1", "t1")

    def test_spreadsheet_headings(self):
        """Test a document using spreadsheet export headings."""
        records = record_set_from_dict(
            {
                "tables": [
                    {
                        "Table_ID": " t1 ",
                        "Table_Name": "orders",
                        "Dataset/CustomQuery": "shop",
                        "Layer": "target",
                        "Table_Type": "Query",
                        "Scheduled Query": "Yes",
                    }
                ],
                "lineage": [{"Source_Table_ID": "t0", "Target_Table_ID": "t1"}],
                "dashboards": [{"Dashboard_ID": "d1", "Dashboard_Name": "Sales"}],
                "dashboard_tables": [{"Dashboard_ID": "d1", "Table_ID": "t1"}],
            }
        )
        table = records.get_table("t1")

        assert table.dataset == "shop"
        assert table.layer is Layer.TARGET
        assert table.is_scheduled_query is True
        assert records.lineage_edges[0].key == ("t0", "t1")
        assert records.dashboard_edges[0].key == ("d1", "t1")

    def test_camel_case_keys(self):
        """Test camelCase keys."""
        records = record_set_from_dict(
            {
                "tables": [{"id": "a", "name": "A", "tableType": "Sheet"}],
                "lineageEdges": [{"sourceTableId": "a", "targetTableId": "b"}],
            }
        )

        assert records.get_table("a").table_type is TableType.SHEET
        assert records.lineage_edges[0].key == ("a", "b")

    def test_defaults(self):
        """Test missing layer and type default to Raw and Table."""
        table = record_set_from_dict({"tables": [{"id": "a", "name": "A"}]}).tables[0]

        assert table.layer is Layer.RAW
        assert table.table_type is TableType.TABLE
        assert table.is_scheduled_query is False
        assert table.description is None

    def test_malformed_records_skipped(self):
        """Test records missing required fields are skipped with warnings."""
        collector = WarningCollector()
        records = record_set_from_dict(
            {
                "tables": [
                    {"id": "ok", "name": "OK"},
                    {"name": "no id"},
                    {"id": "no name", "name": "  "},
                    {"id": "bad", "name": "Bad", "layer": "bronze"},
                    "not an object",
                ],
                "lineage_edges": [{"source_table_id": "ok"}],
                "dashboards": [{"id": "d"}],
            },
            collector,
        )

        assert [t.id for t in records.tables] == ["ok"]
        assert records.lineage_edges == ()
        assert records.dashboards == ()
        assert len(collector.get_by_level("WARNING")) == 6

    def test_duplicate_ids_reported(self):
        """Test duplicate ids keep the first record and are reported."""
        collector = WarningCollector()
        records = record_set_from_dict(
            {"tables": [{"id": "a", "name": "First"}, {"id": "a", "name": "Second"}]},
            collector,
        )

        assert records.get_table("a").name == "First"
        assert len(collector.get_by_level("INFO")) == 1

    def test_bad_scheduled_flag(self):
        """Test an unreadable yes/no value skips the record."""
        collector = WarningCollector()
        records = record_set_from_dict(
            {"tables": [{"id": "a", "name": "A", "Scheduled Query": "maybe"}]}, collector
        )

        assert records.tables == ()
        assert "yes/no" in collector.get_all()[0].message

    def test_wrong_shapes(self):
        """Test documents of the wrong shape raise RecordLoadError."""
        with pytest.raises(RecordLoadError):
            record_set_from_dict(["not", "a", "mapping"])
        with pytest.raises(RecordLoadError, match="must be a list"):
            record_set_from_dict({"tables": {"id": "a"}})


class TestRecordStoreFromDict:
    """Tests for record_store_from_dict."""

    def test_single_project_document(self):
        """Test a plain document becomes the default project."""
        store = record_store_from_dict({"tables": [{"id": "a", "name": "A"}]})

        assert store.project_ids() == [DEFAULT_PROJECT_ID]

    def test_multi_project_document(self):
        """Test a projects mapping yields one project each."""
        store = record_store_from_dict(
            {
                "projects": {
                    "alpha": {"tables": [{"id": "a", "name": "A"}]},
                    "beta": {"tables": [{"id": "b", "name": "B"}]},
                }
            }
        )

        assert store.project_ids() == ["alpha", "beta"]
        assert store.get_tables("beta")[0].id == "b"

    def test_bad_projects_value(self):
        """Test a non-mapping projects value raises RecordLoadError."""
        with pytest.raises(RecordLoadError, match="projects"):
            record_store_from_dict({"projects": ["alpha"]})


class TestLoadRecordFile:
    """Tests for load_record_file."""

    def test_load(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"tables": [{"id": "a", "name": "A"}]}))

        store = load_record_file(path)

        assert store.get_tables(DEFAULT_PROJECT_ID)[0].name == "A"

    def test_missing_file(self, tmp_path):
        """Test a missing file raises RecordLoadError with its source."""
        path = tmp_path / "missing.json"

        with pytest.raises(RecordLoadError) as exc_info:
            load_record_file(path)

        assert exc_info.value.source == str(path)

    def test_invalid_json(self, tmp_path):
        """Test invalid JSON raises RecordLoadError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(RecordLoadError, match="Invalid JSON"):
            load_record_file(path)

    def test_wrong_shape_keeps_source(self, tmp_path):
        """Test shape errors carry the file name."""
        path = tmp_path / "list.json"
        path.write_text("[]")

        with pytest.raises(RecordLoadError) as exc_info:
            load_record_file(path)

        assert exc_info.value.source == str(path)
