"""
Database module

Responsibilities:
1. the database proxy (bound once the path is known)
2. the users table
3. ``Database``, the SQLite implementation of the record store
"""
from pathlib import Path
from typing import Any, Dict, List, Optional

from peewee import DatabaseProxy, SqliteDatabase, Model, CharField, IntegrityError
from playhouse.sqlite_ext import AutoIncrementField

from .models import UserRecord, UserStatus
from .store import DuplicateKeyError, UserStore


# ============================================================================
# Part 1: database proxy
# ============================================================================

db_proxy = DatabaseProxy()


def init_database(db_path: str):
    """
    Bind the proxy to a SQLite file

    Args:
        db_path: SQLite database file path
    """
    db_file = Path(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)

    database = SqliteDatabase(db_path, pragmas={
        'foreign_keys': 1,
        'journal_mode': 'wal',
    })

    db_proxy.initialize(database)


# ============================================================================
# Part 2: tables
# ============================================================================

class BaseTable(Model):
    """Base class for every table, bound to the proxy"""
    class Meta:
        database = db_proxy


class UserTable(BaseTable):
    """Users table - identity, credentials and session state"""
    # AUTOINCREMENT keeps SQLite from handing out an identifier twice
    id = AutoIncrementField()
    name = CharField(max_length=100, index=True)
    username = CharField(max_length=100, unique=True)
    password = CharField()

    creation_date = CharField(max_length=32)
    birthday = CharField(max_length=32, null=True)

    status = CharField(max_length=10, default=UserStatus.OFFLINE.value)
    token = CharField(max_length=64, null=True, unique=True)

    class Meta:
        table_name = 'users'


def get_all_tables():
    """All table models, in creation order"""
    return [UserTable]


def _duplicate_key(exc: IntegrityError) -> Optional[DuplicateKeyError]:
    message = str(exc)
    for field in ("username", "token"):
        if f"{UserTable._meta.table_name}.{field}" in message:
            return DuplicateKeyError(field)
    return None


# ============================================================================
# Part 3: data access
# ============================================================================

class Database(UserStore):
    """
    SQLite record store

    Usage:
        >>> db = Database("usher.db")   # binds the proxy
        >>> await db.connect()
        >>>
        >>> init_database("usher.db")   # or bind it elsewhere first
        >>> db = Database()
    """

    def __init__(self, db_path: str = None):
        """
        Args:
            db_path: SQLite database file path
                    - given: (re)bind the proxy to this file
                    - None: use the proxy as already bound
        """
        if db_path:
            init_database(db_path)

        self.db = db_proxy

    async def connect(self):
        """Open the connection for the current thread"""
        if self.db.is_closed():
            self.db.connect()

    async def disconnect(self):
        """Close the connection for the current thread"""
        if not self.db.is_closed():
            self.db.close()

    async def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self._to_record(UserTable.get_or_none(UserTable.id == user_id))

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        return self._to_record(UserTable.get_or_none(UserTable.username == username))

    async def find_by_name(self, name: str) -> Optional[UserRecord]:
        row = (
            UserTable
            .select()
            .where(UserTable.name == name)
            .order_by(UserTable.id)
            .first()
        )
        return self._to_record(row)

    async def find_by_token(self, token: Optional[str]) -> Optional[UserRecord]:
        if not token:
            return None
        return self._to_record(UserTable.get_or_none(UserTable.token == token))

    async def insert(self, record: UserRecord) -> UserRecord:
        fields = record.model_dump(mode="json", exclude={"id"})
        try:
            with self.db.atomic():
                row = UserTable.create(**fields)
        except IntegrityError as e:
            duplicate = _duplicate_key(e)
            if duplicate is None:
                raise
            raise duplicate from e

        return record.model_copy(update={"id": row.id})

    async def update(self, user_id: int, fields: Dict[str, Any], holding_token: Optional[str] = None) -> bool:
        columns = {
            name: value.value if isinstance(value, UserStatus) else value
            for name, value in fields.items()
        }
        query = UserTable.update(**columns).where(UserTable.id == user_id)
        if holding_token is not None:
            query = query.where(UserTable.token == holding_token)
        try:
            with self.db.atomic():
                updated = query.execute()
        except IntegrityError as e:
            duplicate = _duplicate_key(e)
            if duplicate is None:
                raise
            raise duplicate from e

        return updated > 0

    async def all(self) -> List[UserRecord]:
        return [self._to_record(row) for row in UserTable.select().order_by(UserTable.id)]

    @staticmethod
    def _to_record(row: Optional[UserTable]) -> Optional[UserRecord]:
        if row is None:
            return None
        return UserRecord.model_validate(row)


__all__ = ["db_proxy", "init_database", "BaseTable", "UserTable", "get_all_tables", "Database"]
