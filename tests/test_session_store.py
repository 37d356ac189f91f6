"""Unit tests for sessions/store.py -- SessionStore upsert / find / list.

Covers:
- upsert() without an id generates a fresh, unused id and stamps metadata
- upsert() with an id keeps id and created_at, strictly advances updated_at
- upsert() does not mutate its argument
- upsert() with an unknown id persists under that id; another owner reusing an id never touches the original
- find_by_identifier() is scoped by owner
- list_by_owner() returns only the owner's sessions and [] when there are none
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from core.errors import NotFoundError, StoreError
from core.models import Meta
from kvstore.backend import SqlKeyValueStore
from sessions.models import Session
from sessions.store import SessionStore

START = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def _new(email: str = "a@x.com", name: str = "upload batch") -> Session:
    return Session(email=email, name=name, session_start_date=START, status="open")


class TestUpsertNew:
    def test_generates_identifier(self, session_store: SessionStore) -> None:
        saved = session_store.upsert(_new())
        assert saved.id

    def test_identifiers_are_unique(self, session_store: SessionStore) -> None:
        ids = {session_store.upsert(_new()).id for _ in range(20)}
        assert len(ids) == 20

    def test_empty_string_id_counts_as_new(self, session_store: SessionStore) -> None:
        saved = session_store.upsert(replace(_new(), id=""))
        assert saved.id

    def test_stamps_metadata(self, session_store: SessionStore) -> None:
        saved = session_store.upsert(_new())
        assert saved.meta is not None
        assert saved.meta.created_at == saved.meta.updated_at
        assert saved.meta.is_active is True

    def test_argument_not_mutated(self, session_store: SessionStore) -> None:
        draft = _new()
        session_store.upsert(draft)
        assert draft.id is None
        assert draft.meta is None

    def test_optional_fields_round_trip(self, session_store: SessionStore) -> None:
        draft = replace(_new(), description="nightly", session_end_date=START + timedelta(hours=2))
        saved = session_store.upsert(draft)
        found = session_store.find_by_identifier(saved.id, "a@x.com")
        assert found == saved


class TestUpsertExisting:
    def test_preserves_created_at_and_advances_updated_at(self, session_store: SessionStore) -> None:
        first = session_store.upsert(_new())
        second = session_store.upsert(replace(first, status="closed"))
        assert second.id == first.id
        assert second.meta.created_at == first.meta.created_at
        assert second.meta.updated_at > first.meta.updated_at
        assert second.status == "closed"

    def test_repeated_updates_keep_advancing(self, session_store: SessionStore) -> None:
        current = session_store.upsert(_new())
        stamps = [current.meta.updated_at]
        for _ in range(5):
            current = session_store.upsert(current)
            stamps.append(current.meta.updated_at)
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == len(stamps)

    def test_client_supplied_meta_is_ignored(self, session_store: SessionStore) -> None:
        """created_at always comes from the stored record, not the caller."""
        first = session_store.upsert(_new())
        forged = replace(first, meta=replace(first.meta, created_at=START - timedelta(days=365)))
        second = session_store.upsert(forged)
        assert second.meta.created_at == first.meta.created_at

    def test_update_is_persisted(self, session_store: SessionStore) -> None:
        first = session_store.upsert(_new())
        session_store.upsert(replace(first, name="renamed"))
        assert session_store.find_by_identifier(first.id, "a@x.com").name == "renamed"

    def test_unknown_id_is_created_under_that_id(self, session_store: SessionStore) -> None:
        saved = session_store.upsert(replace(_new(), id="caller-chosen"))
        assert saved.id == "caller-chosen"
        assert saved.meta.created_at == saved.meta.updated_at
        assert saved.meta.is_active is True
        assert session_store.find_by_identifier("caller-chosen", "a@x.com") == saved

    def test_unknown_id_keeps_supplied_created_at(self, session_store: SessionStore) -> None:
        created = START - timedelta(days=3)
        draft = replace(_new(), id="imported", meta=Meta(created_at=created, updated_at=created, is_active=False))
        saved = session_store.upsert(draft)
        assert saved.meta.created_at == created
        assert saved.meta.updated_at > created
        assert saved.meta.is_active is True

    def test_other_owner_reusing_id_leaves_original_untouched(self, session_store: SessionStore) -> None:
        first = session_store.upsert(_new())
        session_store.upsert(replace(first, email="b@x.com", name="someone else"))
        assert session_store.find_by_identifier(first.id, "a@x.com") == first
        assert session_store.find_by_identifier(first.id, "b@x.com").name == "someone else"


class TestFindAndList:
    def test_find_is_owner_scoped(self, session_store: SessionStore) -> None:
        saved = session_store.upsert(_new())
        with pytest.raises(NotFoundError):
            session_store.find_by_identifier(saved.id, "b@x.com")

    def test_find_missing(self, session_store: SessionStore) -> None:
        with pytest.raises(NotFoundError):
            session_store.find_by_identifier("nope", "a@x.com")

    def test_list_empty_owner(self, session_store: SessionStore) -> None:
        assert session_store.list_by_owner("nobody@x.com") == []

    def test_list_returns_only_owner_sessions(self, session_store: SessionStore) -> None:
        mine = {session_store.upsert(_new()).id for _ in range(3)}
        session_store.upsert(_new(email="b@x.com"))
        listed = session_store.list_by_owner("a@x.com")
        assert {s.id for s in listed} == mine
        assert all(s.email == "a@x.com" for s in listed)

    def test_corrupt_item_raises_store_error(self, session_store: SessionStore, kv: SqlKeyValueStore) -> None:
        kv.put_item("sessions", {"email": "a@x.com", "id": "broken"})
        with pytest.raises(StoreError):
            session_store.find_by_identifier("broken", "a@x.com")
