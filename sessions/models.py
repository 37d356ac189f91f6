"""
sessions/models.py -- Domain dataclass for a session record.

Pure data container plus its item mapper. All lifecycle rules (id
generation, metadata stamping, immutability of id/owner/created_at) live in
sessions/store.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.models import Meta, parse_timestamp


@dataclass
class Session:
    """A named unit of work owned by one user.

    id is None until the first upsert assigns one; (id, email) is the
    record's key. meta is None on records that have never been saved.
    """

    email: str
    name: str
    session_start_date: datetime
    status: str
    id: Optional[str] = None
    description: Optional[str] = None
    session_end_date: Optional[datetime] = None
    meta: Optional[Meta] = None

    def to_item(self) -> dict:
        item: dict = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "session_start_date": self.session_start_date.isoformat(),
            "status": self.status,
        }
        # Optional attributes are omitted rather than stored as null.
        if self.description is not None:
            item["description"] = self.description
        if self.session_end_date is not None:
            item["session_end_date"] = self.session_end_date.isoformat()
        if self.meta is not None:
            item["meta"] = self.meta.to_item()
        return item

    @classmethod
    def from_item(cls, item: dict) -> "Session":
        end = item.get("session_end_date")
        meta = item.get("meta")
        return cls(
            id=item["id"],
            email=item["email"],
            name=item["name"],
            description=item.get("description"),
            session_start_date=parse_timestamp(item["session_start_date"]),
            session_end_date=parse_timestamp(end) if end else None,
            status=item["status"],
            meta=Meta.from_item(meta) if meta else None,
        )
