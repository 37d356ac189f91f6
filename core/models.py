"""
core/models.py -- Domain primitives shared by auth/ and sessions/.

Meta is the audit stamp carried by both User and Session records. It is a
pure data container; the stores decide when the stamps move.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

# Smallest step datetime can represent. Used to keep updated_at strictly
# increasing when two writes land inside the same clock tick.
_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_stamp(previous: Optional[datetime]) -> datetime:
    """Return the current UTC time, or previous + 1us if the clock has not moved past it."""
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + _TICK
    return now


@dataclass
class Meta:
    """Creation / modification stamp.

    is_active defaults True. Nothing in this codebase ever sets it False --
    the flag is reserved for a future soft-delete capability.
    """

    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    is_active: bool = True

    @classmethod
    def fresh(cls) -> "Meta":
        """Stamp for a brand-new record: created_at == updated_at == now."""
        now = utc_now()
        return cls(created_at=now, updated_at=now, is_active=True)

    def touched(self) -> "Meta":
        """Copy with updated_at advanced and is_active set, created_at preserved."""
        return Meta(created_at=self.created_at, updated_at=next_stamp(self.updated_at), is_active=True)

    def to_item(self) -> dict:
        return {
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "is_active": self.is_active,
        }

    @classmethod
    def from_item(cls, data: dict) -> "Meta":
        return cls(
            created_at=parse_timestamp(data["created_at"]),
            updated_at=parse_timestamp(data["updated_at"]),
            is_active=bool(data.get("is_active", True)),
        )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 string; naive values are treated as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def as_utc(value: datetime) -> datetime:
    """Return value in UTC. Naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
