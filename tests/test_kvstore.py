"""Unit tests for kvstore/backend.py -- the get_item / put_item / query contract.

Covers:
- put_item() then get_item() returns the stored attribute map, nested values included
- put_item() replaces the item under the same key
- query() returns every item in one partition and nothing from others
- logical tables are isolated from each other
- misuse (unknown table, incomplete key, non-partition query) raises StoreError
- backend failures surface as StoreError
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from core.errors import StoreError
from kvstore.backend import SqlKeyValueStore


@pytest.fixture
def tables(kv: SqlKeyValueStore) -> SqlKeyValueStore:
    kv.ensure_table("users", partition_key="email")
    kv.ensure_table("sessions", partition_key="email", sort_key="id")
    return kv


class TestGetPut:
    def test_get_missing_returns_none(self, tables: SqlKeyValueStore) -> None:
        assert tables.get_item("users", {"email": "nobody@x.com"}) is None

    def test_put_then_get(self, tables: SqlKeyValueStore) -> None:
        item = {"email": "a@x.com", "name": "A", "meta": {"is_active": True}}
        tables.put_item("users", item)
        assert tables.get_item("users", {"email": "a@x.com"}) == item

    def test_put_replaces_existing(self, tables: SqlKeyValueStore) -> None:
        tables.put_item("users", {"email": "a@x.com", "name": "first"})
        tables.put_item("users", {"email": "a@x.com", "name": "second"})
        assert tables.get_item("users", {"email": "a@x.com"}) == {"email": "a@x.com", "name": "second"}

    def test_composite_key_requires_both_parts(self, tables: SqlKeyValueStore) -> None:
        tables.put_item("sessions", {"email": "a@x.com", "id": "s1"})
        assert tables.get_item("sessions", {"email": "a@x.com", "id": "s1"}) is not None
        assert tables.get_item("sessions", {"email": "b@x.com", "id": "s1"}) is None
        with pytest.raises(StoreError):
            tables.get_item("sessions", {"email": "a@x.com"})

    def test_tables_are_isolated(self, tables: SqlKeyValueStore) -> None:
        tables.ensure_table("archive", partition_key="email")
        tables.put_item("users", {"email": "a@x.com", "name": "live"})
        assert tables.get_item("archive", {"email": "a@x.com"}) is None


class TestQuery:
    def test_returns_whole_partition(self, tables: SqlKeyValueStore) -> None:
        for sid in ("s1", "s2", "s3"):
            tables.put_item("sessions", {"email": "a@x.com", "id": sid})
        tables.put_item("sessions", {"email": "b@x.com", "id": "s9"})
        ids = sorted(i["id"] for i in tables.query("sessions", {"email": "a@x.com"}))
        assert ids == ["s1", "s2", "s3"]

    def test_empty_partition_is_empty_list(self, tables: SqlKeyValueStore) -> None:
        assert tables.query("sessions", {"email": "nobody@x.com"}) == []

    def test_condition_must_be_partition_key(self, tables: SqlKeyValueStore) -> None:
        with pytest.raises(StoreError):
            tables.query("sessions", {"id": "s1"})


class TestMisuse:
    def test_unknown_table(self, kv: SqlKeyValueStore) -> None:
        with pytest.raises(StoreError):
            kv.get_item("ghost", {"email": "a@x.com"})

    def test_conflicting_schema(self, tables: SqlKeyValueStore) -> None:
        tables.ensure_table("users", partition_key="email")  # same schema is fine
        with pytest.raises(StoreError):
            tables.ensure_table("users", partition_key="id")

    @pytest.mark.parametrize("bad", [{}, {"email": ""}, {"email": 42}])
    def test_put_without_valid_key(self, tables: SqlKeyValueStore, bad: dict) -> None:
        with pytest.raises(StoreError):
            tables.put_item("users", bad)

    def test_unserializable_item(self, tables: SqlKeyValueStore) -> None:
        with pytest.raises(StoreError):
            tables.put_item("users", {"email": "a@x.com", "blob": object()})

    def test_backend_failure_is_store_error(self, tables: SqlKeyValueStore) -> None:
        with patch.object(tables.engine, "connect", side_effect=OperationalError("SELECT", {}, Exception("down"))):
            with pytest.raises(StoreError):
                tables.get_item("users", {"email": "a@x.com"})

    def test_ping(self, tables: SqlKeyValueStore) -> None:
        assert tables.ping() is True
