"""
Record store contract

The user service only talks to a ``UserStore``; the concrete store is
injected at construction. ``Database`` (db.py) keeps records in SQLite,
``MemoryUserStore`` keeps them in process memory.

Both stores enforce uniqueness of ``username`` and of non-null ``token``
as part of the write itself, so two racing writers cannot both succeed.
"""
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .models import UserRecord


class DuplicateKeyError(Exception):
    """A write would break a uniqueness constraint"""

    def __init__(self, field: str):
        super().__init__(f"Duplicate value for unique field '{field}'")
        self.field = field


class UserStore(ABC):
    """Keyed storage of user records"""

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        """Return the record with this identifier, if any"""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        """Return the record with this username, if any"""

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[UserRecord]:
        """Return the first record with this display name, if any"""

    @abstractmethod
    async def find_by_token(self, token: Optional[str]) -> Optional[UserRecord]:
        """Return the record currently holding this session token, if any"""

    @abstractmethod
    async def insert(self, record: UserRecord) -> UserRecord:
        """
        Persist a new record and return it with its identifier assigned

        Raises:
            DuplicateKeyError: username (or token) already stored
        """

    @abstractmethod
    async def update(self, user_id: int, fields: Dict[str, Any], holding_token: Optional[str] = None) -> bool:
        """
        Write ``fields`` onto the stored record with ``user_id``

        Columns not named in ``fields`` keep whatever value is stored at
        the time of the write.

        Args:
            user_id: identifier of the record to change
            fields: column name to new value
            holding_token: when given, only write if the record still holds this token

        Returns:
            bool: False when no record matched

        Raises:
            DuplicateKeyError: the new username or token belongs to another record
        """

    @abstractmethod
    async def all(self) -> List[UserRecord]:
        """Return every stored record"""


class MemoryUserStore(UserStore):
    """In-process store, used by tests and the ``memory`` backend"""

    def __init__(self) -> None:
        self._records: Dict[int, UserRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    async def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            record = self._records.get(user_id)
            return record.model_copy() if record else None

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        return self._find(lambda record: record.username == username)

    async def find_by_name(self, name: str) -> Optional[UserRecord]:
        return self._find(lambda record: record.name == name)

    async def find_by_token(self, token: Optional[str]) -> Optional[UserRecord]:
        if not token:
            return None
        return self._find(lambda record: record.token == token)

    async def insert(self, record: UserRecord) -> UserRecord:
        with self._lock:
            self._check_unique(record, exclude_id=None)
            stored = record.model_copy(update={"id": self._next_id})
            self._records[stored.id] = stored
            self._next_id += 1
            return stored.model_copy()

    async def update(self, user_id: int, fields: Dict[str, Any], holding_token: Optional[str] = None) -> bool:
        with self._lock:
            current = self._records.get(user_id)
            if current is None:
                return False
            if holding_token is not None and current.token != holding_token:
                return False
            merged = UserRecord.model_validate({**current.model_dump(), **fields, "id": user_id})
            self._check_unique(merged, exclude_id=user_id)
            self._records[user_id] = merged
            return True

    async def all(self) -> List[UserRecord]:
        with self._lock:
            return [record.model_copy() for record in self._records.values()]

    def _find(self, predicate) -> Optional[UserRecord]:
        with self._lock:
            for record in self._records.values():
                if predicate(record):
                    return record.model_copy()
        return None

    def _check_unique(self, record: UserRecord, exclude_id: Optional[int]) -> None:
        for other in self._records.values():
            if other.id == exclude_id:
                continue
            if other.username == record.username:
                raise DuplicateKeyError("username")
            if record.token is not None and other.token == record.token:
                raise DuplicateKeyError("token")


__all__ = ["DuplicateKeyError", "UserStore", "MemoryUserStore"]
