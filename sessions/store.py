"""
sessions/store.py -- Session persistence over the key-value contract.

Pattern: Repository + Data Mapper. SessionStore is the repository;
Session.to_item / Session.from_item are the mappers.

Key layout:
  partition key = "email" (owner), sort key = "id".
  Owner-first keeps list_by_owner() a single partition query and makes
  find_by_identifier() an exact composite-key read.

Upsert rules:
  - No id: the record is new. A uuid4 id is generated and meta is stamped
    created_at == updated_at == now, is_active = True.
  - With id, record stored under (id, email): the stored created_at is
    kept, updated_at moves strictly forward, is_active is set True.
  - With id, nothing stored: the record is written under the caller's id.
    created_at comes from the session's meta when it has one, otherwise
    now. Because email is part of the key, an id reused by another owner
    lands in that owner's partition and never touches the original.

Concurrency: no optimistic locking. Two concurrent upserts of the same
(id, email) both succeed and the last write wins.

Usage:
    store = SessionStore(kv, table_name="sessions")
    saved = store.upsert(Session(email="a@x.com", name="demo", status="open",
                                 session_start_date=utc_now()))
    store.find_by_identifier(saved.id, "a@x.com")
    store.list_by_owner("a@x.com")
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Optional

from core.errors import NotFoundError, StoreError
from core.models import Meta, as_utc, utc_now
from kvstore.backend import KeyValueStore
from sessions.models import Session

logger = logging.getLogger("sessionvault.sessions")

_PARTITION_KEY = "email"
_SORT_KEY = "id"


class SessionStore:
    """Repository for Session records."""

    def __init__(self, kv: KeyValueStore, table_name: str) -> None:
        self._kv = kv
        self.table_name = table_name
        kv.ensure_table(table_name, partition_key=_PARTITION_KEY, sort_key=_SORT_KEY)

    def upsert(self, session: Session) -> Session:
        """Create or update a session and return it as stored.

        The argument is not mutated; the returned Session is a new instance
        carrying the id and meta that were written.
        """
        if not session.id:
            saved = replace(session, id=str(uuid.uuid4()), meta=Meta.fresh())
            logger.info("Creating session id=%s owner=%s", saved.id, saved.email)
        else:
            item = self._kv.get_item(self.table_name, {_PARTITION_KEY: session.email, _SORT_KEY: session.id})
            if item is not None:
                existing = _item_to_session(item)
                previous = existing.meta if existing.meta is not None else Meta.fresh()
                saved = replace(session, meta=previous.touched())
                logger.info("Updating session id=%s owner=%s", saved.id, saved.email)
            else:
                saved = replace(session, meta=_first_meta(session.meta))
                logger.info("Creating session under caller id=%s owner=%s", saved.id, saved.email)

        self._kv.put_item(self.table_name, saved.to_item())
        return saved

    def find_by_identifier(self, session_id: str, email: str) -> Session:
        """Return the session stored under (session_id, email).

        Raises NotFoundError if absent, StoreError on backend or decode failure.
        """
        item = self._kv.get_item(self.table_name, {_PARTITION_KEY: email, _SORT_KEY: session_id})
        if item is None:
            raise NotFoundError(f"No session {session_id!r} for owner {email!r}")
        return _item_to_session(item)

    def list_by_owner(self, email: str) -> list[Session]:
        """Return every session owned by email, in backend order. Empty list if none."""
        items = self._kv.query(self.table_name, {_PARTITION_KEY: email})
        return [_item_to_session(i) for i in items]


def _item_to_session(item: dict) -> Session:
    try:
        return Session.from_item(item)
    except (KeyError, TypeError, ValueError) as exc:
        raise StoreError("Stored session record could not be decoded") from exc


def _first_meta(supplied: Optional[Meta]) -> Meta:
    if supplied is None:
        return Meta.fresh()
    created_at = as_utc(supplied.created_at)
    return Meta(created_at=created_at, updated_at=max(utc_now(), created_at), is_active=True)
