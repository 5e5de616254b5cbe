# Server package

from .db import Database
from .errors import ConflictError, NotFoundError, UnauthorizedError, UserServiceError
from .models import User, UserRecord, UserStatus
from .server import UsherServer, create_app
from .services import UserService
from .store import MemoryUserStore, UserStore

__all__ = [
    "Database",
    "MemoryUserStore",
    "UserStore",
    "UserService",
    "User",
    "UserRecord",
    "UserStatus",
    "UserServiceError",
    "ConflictError",
    "NotFoundError",
    "UnauthorizedError",
    "UsherServer",
    "create_app",
]
