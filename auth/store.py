"""
auth/store.py -- User persistence over the key-value contract.

Pattern: Repository + Data Mapper (same as sessions/store.py).
UserStore is the repository; User.to_item / User.from_item are the mappers.
Route and service code never touches the backend directly.

Key layout: the users table is keyed by "email" alone (partition key, no
sort key). One item per registered user.

Overwrite semantics:
  create() is a single unconditional put_item. Registering the same email
  twice replaces the first record -- there is no read-before-write here.
  Callers that must not overwrite (POST /auth/register) check exists()
  first. That check is not atomic with the write; concurrent registrations
  of one email still end with last write wins.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

import logging

from auth.models import User
from auth.passwords import hash_password
from core.errors import NotFoundError, StoreError
from core.models import Meta
from kvstore.backend import KeyValueStore

logger = logging.getLogger("sessionvault.auth")

_PARTITION_KEY = "email"


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore(kv, table_name="users")
        store.create("a@x.com", "secret", "A", "user")
        user = store.find_by_identifier("a@x.com")
    """

    def __init__(self, kv: KeyValueStore, table_name: str) -> None:
        self._kv = kv
        self.table_name = table_name
        kv.ensure_table(table_name, partition_key=_PARTITION_KEY)

    def find_by_identifier(self, email: str) -> User:
        """Return the user registered under email.

        Raises NotFoundError if there is none, StoreError if the backend fails
        or the stored item cannot be decoded.
        """
        item = self._kv.get_item(self.table_name, {_PARTITION_KEY: email})
        if item is None:
            logger.info("No user record for email=%s in table=%s", email, self.table_name)
            raise NotFoundError(f"No user with email {email!r}")
        return _item_to_user(item)

    def exists(self, email: str) -> bool:
        """Return True if a user is registered under email."""
        return self._kv.get_item(self.table_name, {_PARTITION_KEY: email}) is not None

    def create(self, email: str, plain_password: str, name: str, role: str) -> User:
        """Hash the password, stamp fresh metadata and persist a new user.

        The write is unconditional: an existing record under the same email
        is replaced. Raises HashingError or StoreError.
        """
        logger.info("Registering user email=%s role=%s table=%s", email, role, self.table_name)
        user = User(
            email=email,
            pwd=hash_password(plain_password),
            name=name,
            role=role,
            meta=Meta.fresh(),
        )
        self._kv.put_item(self.table_name, user.to_item())
        return user


def _item_to_user(item: dict) -> User:
    try:
        return User.from_item(item)
    except (KeyError, TypeError, ValueError) as exc:
        raise StoreError("Stored user record could not be decoded") from exc
