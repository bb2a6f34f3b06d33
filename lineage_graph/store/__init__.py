"""
Record stores and loaders.

This package contains the RecordStore interface the engine reads records
through, an in-memory implementation, and the JSON document loader.
"""

from lineage_graph.store.dict_store import DictRecordStore
from lineage_graph.store.loader import (
    DEFAULT_PROJECT_ID,
    load_record_file,
    record_set_from_dict,
    record_store_from_dict,
)
from lineage_graph.store.provider import RecordStore

__all__ = [
    "DEFAULT_PROJECT_ID",
    "DictRecordStore",
    "RecordStore",
    "load_record_file",
    "record_set_from_dict",
    "record_store_from_dict",
]
