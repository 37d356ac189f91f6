"""
kvstore/backend.py -- get_item / put_item / query over SQLAlchemy Core.

The domain stores (auth/store.py, sessions/store.py) only ever need three
operations from their backend, so that is all this module exposes:

    get_item(table, key)        -> item dict or None
    put_item(table, item)       -> replace the item stored under its key
    query(table, condition)     -> every item sharing one partition key

Tables are logical: each declares a partition key attribute and an optional
sort key attribute via ensure_table(). Physically, every logical table lives
in a single SQL table, kv_items, keyed by (table_name, partition_key,
sort_key) with the item serialized as JSON text. Swapping SQLite for
PostgreSQL is a connection string change.

Pattern: Repository (same as the domain stores). Callers never touch SQL.

Security:
  All queries use bound parameters. No f-strings in SQL.

Failure policy:
  Every SQLAlchemy error, undecodable row, unknown table or incomplete key is
  raised as core.errors.StoreError. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import Column, MetaData, PrimaryKeyConstraint, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import StoreError

logger = logging.getLogger("sessionvault.kvstore")

# Stored in sort_key for tables that declare no sort key, so the composite
# primary key never contains NULL.
_NO_SORT_KEY = ""

# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class KeyValueStore(Protocol):
    """The narrow CRUD contract the domain stores depend on."""

    def ensure_table(self, table: str, partition_key: str, sort_key: Optional[str] = None) -> None: ...

    def get_item(self, table: str, key: dict[str, str]) -> Optional[dict]: ...

    def put_item(self, table: str, item: dict) -> None: ...

    def query(self, table: str, condition: dict[str, str]) -> list[dict]: ...


@dataclass(frozen=True)
class KeySchema:
    partition_key: str
    sort_key: Optional[str] = None


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_items = Table(
    "kv_items",
    _metadata,
    Column("table_name", String(255), nullable=False),
    Column("partition_key", String(512), nullable=False),
    Column("sort_key", String(512), nullable=False, server_default=_NO_SORT_KEY),
    Column("data", Text, nullable=False),  # JSON object
    PrimaryKeyConstraint("table_name", "partition_key", "sort_key", name="pk_kv_items"),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block behind a writer."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------


class SqlKeyValueStore:
    """KeyValueStore backed by a single SQLAlchemy table.

    Usage:
        kv = SqlKeyValueStore("sqlite:///:memory:")
        kv.ensure_table("sessions", partition_key="email", sort_key="id")
        kv.put_item("sessions", {"email": "a@x.com", "id": "s1", "name": "demo"})
        kv.get_item("sessions", {"email": "a@x.com", "id": "s1"})
        kv.query("sessions", {"email": "a@x.com"})
        kv.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        try:
            _metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not initialise key-value schema: {exc}") from exc
        self._schemas: dict[str, KeySchema] = {}

    def ensure_table(self, table: str, partition_key: str, sort_key: Optional[str] = None) -> None:
        """Declare the key schema for a logical table.

        Re-declaring a table with the same schema is a no-op; a conflicting
        schema is a programming error and raises StoreError.
        """
        schema = KeySchema(partition_key=partition_key, sort_key=sort_key)
        existing = self._schemas.get(table)
        if existing is not None and existing != schema:
            raise StoreError(f"Table {table!r} already declared with key schema {existing}")
        self._schemas[table] = schema

    # ------------------------------------------------------------------
    # Contract operations
    # ------------------------------------------------------------------

    def get_item(self, table: str, key: dict[str, str]) -> Optional[dict]:
        """Return the item stored under key, or None if there is none."""
        schema = self._schema(table)
        pk, sk = _extract_key(table, schema, key)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    _items.select().where(
                        (_items.c.table_name == table) & (_items.c.partition_key == pk) & (_items.c.sort_key == sk)
                    )
                ).fetchone()
        except SQLAlchemyError as exc:
            logger.error("get_item failed on table=%s: %s", table, exc)
            raise StoreError(f"get_item failed on table {table!r}") from exc
        return _decode(table, row.data) if row is not None else None

    def put_item(self, table: str, item: dict) -> None:
        """Store item under the key its own attributes describe, replacing any previous item."""
        schema = self._schema(table)
        pk, sk = _extract_key(table, schema, item)
        try:
            data = json.dumps(item)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Item for table {table!r} is not JSON serializable") from exc
        key_clause = (_items.c.table_name == table) & (_items.c.partition_key == pk) & (_items.c.sort_key == sk)
        try:
            with self.engine.begin() as conn:
                conn.execute(_items.delete().where(key_clause))
                conn.execute(_items.insert().values(table_name=table, partition_key=pk, sort_key=sk, data=data))
        except SQLAlchemyError as exc:
            logger.error("put_item failed on table=%s: %s", table, exc)
            raise StoreError(f"put_item failed on table {table!r}") from exc

    def query(self, table: str, condition: dict[str, str]) -> list[dict]:
        """Return every item whose partition key equals the single value in condition.

        Only a partition-key equality condition is supported. Results come
        back in backend order; there is no pagination.
        """
        schema = self._schema(table)
        if set(condition) != {schema.partition_key}:
            raise StoreError(f"query on {table!r} must name exactly the partition key {schema.partition_key!r}")
        pk = condition[schema.partition_key]
        if not isinstance(pk, str):
            raise StoreError(f"Key attribute {schema.partition_key!r} must be a string")
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    _items.select().where((_items.c.table_name == table) & (_items.c.partition_key == pk))
                ).fetchall()
        except SQLAlchemyError as exc:
            logger.error("query failed on table=%s: %s", table, exc)
            raise StoreError(f"query failed on table {table!r}") from exc
        return [_decode(table, r.data) for r in rows]

    def ping(self) -> bool:
        """Return True if the backend answers a trivial round trip."""
        try:
            with self.engine.connect() as conn:
                conn.execute(_items.select().limit(1)).fetchall()
        except SQLAlchemyError:
            logger.exception("Key-value backend health check failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()

    def _schema(self, table: str) -> KeySchema:
        schema = self._schemas.get(table)
        if schema is None:
            raise StoreError(f"Unknown table {table!r}; call ensure_table() first")
        return schema


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _extract_key(table: str, schema: KeySchema, attrs: dict) -> tuple[str, str]:
    names = [schema.partition_key] + ([schema.sort_key] if schema.sort_key else [])
    values = []
    for name in names:
        value = attrs.get(name)
        if not isinstance(value, str) or not value:
            raise StoreError(f"Key attribute {name!r} for table {table!r} must be a non-empty string")
        values.append(value)
    sort_value = values[1] if schema.sort_key else _NO_SORT_KEY
    return values[0], sort_value


def _decode(table: str, data: str) -> dict:
    try:
        item = json.loads(data)
    except ValueError as exc:
        raise StoreError(f"Corrupt item in table {table!r}") from exc
    if not isinstance(item, dict):
        raise StoreError(f"Corrupt item in table {table!r}: expected an object")
    return item
