import secrets
import uuid
from datetime import date
from typing import Callable, List, Optional

from .errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    INVALID_CREDENTIALS,
    USERNAME_NOT_UNIQUE,
    USER_NOT_FOUND,
)
from .logger import get_logger
from .models import UserCreate, UserEdit, UserLogin, UserRecord, UserStatus
from .store import DuplicateKeyError, UserStore

logger = get_logger("UserService")

CREATION_DATE_FORMAT = "%d.%m.%Y"


def generate_token() -> str:
    """Fresh opaque session token"""
    return str(uuid.uuid4())


def _passwords_match(stored: str, supplied: str) -> bool:
    # plaintext equality; compare_digest only accepts ASCII str, so compare bytes
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


class UserService:
    """
    Account and session rules over an injected record store

    Status and token only ever change together: login sets ONLINE plus a
    fresh token, logout sets OFFLINE and clears it. Profile edits never
    touch either.
    """

    def __init__(
        self,
        store: UserStore,
        token_factory: Callable[[], str] = generate_token,
        today: Callable[[], date] = date.today,
        token_attempts: int = 3,
    ):
        self.store = store
        self._token_factory = token_factory
        self._today = today
        self._token_attempts = max(1, token_attempts)

    async def create_user(self, candidate: UserCreate) -> UserRecord:
        """
        Create an OFFLINE account with no token

        Only the username has to be unique; a repeated display name is fine.

        Raises:
            ConflictError: the username is taken
        """
        if await self.store.find_by_username(candidate.username) is not None:
            raise ConflictError(USERNAME_NOT_UNIQUE)

        record = UserRecord(
            name=candidate.name,
            username=candidate.username,
            password=candidate.password,
            creation_date=self._today().strftime(CREATION_DATE_FORMAT),
            status=UserStatus.OFFLINE,
            token=None,
        )

        # the store's unique constraint settles races the lookup above cannot see
        try:
            created = await self.store.insert(record)
        except DuplicateKeyError as e:
            raise ConflictError(USERNAME_NOT_UNIQUE) from e

        logger.info(f"Created user {created.id} ({created.username})")
        return created

    async def log_in_user(self, credentials: UserLogin) -> UserRecord:
        """
        Check credentials, then go ONLINE under a fresh token

        An unknown username and a wrong password fail the same way.

        Raises:
            UnauthorizedError: no such username, or wrong password
        """
        record = await self.store.find_by_username(credentials.username)
        if record is None or not _passwords_match(record.password, credentials.password):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        for _ in range(self._token_attempts):
            session = {"status": UserStatus.ONLINE, "token": self._token_factory()}
            try:
                updated = await self.store.update(record.id, session)
            except DuplicateKeyError as e:
                if e.field != "token":
                    raise
                continue

            if not updated:
                raise UnauthorizedError(INVALID_CREDENTIALS)

            logger.info(f"User {record.id} logged in")
            return record.model_copy(update=session)

        raise ConflictError("Could not issue a unique session token")

    async def log_out_user(self, token: Optional[str]) -> bool:
        """
        End the session holding ``token``

        Unknown or already-cleared tokens are a no-op, still reported as True.
        A session that replaced ``token`` in the meantime is left alone.
        """
        record = await self.store.find_by_token(token)
        if record is None:
            logger.debug("Logout for a token with no live session, nothing to do")
            return True

        ended = await self.store.update(
            record.id,
            {"status": UserStatus.OFFLINE, "token": None},
            holding_token=token,
        )
        if ended:
            logger.info(f"User {record.id} logged out")
        return True

    async def authenticate_user(self, token: Optional[str]) -> bool:
        """True iff some user is currently logged in with exactly this token"""
        if not token:
            return False
        record = await self.store.find_by_token(token)
        return record is not None and record.token == token

    async def get_users(self) -> List[UserRecord]:
        return await self.store.all()

    async def get_user_by_id(self, user_id: int) -> UserRecord:
        """
        Raises:
            NotFoundError: no user has this identifier
        """
        record = await self.store.find_by_id(user_id)
        if record is None:
            raise NotFoundError(USER_NOT_FOUND)
        return record

    async def update(self, user_id: int, edit: UserEdit) -> None:
        """
        Apply the fields present in ``edit``; status and token are untouched

        The username is not re-checked here. A clash is still refused by
        the store and comes back as a conflict.

        Raises:
            NotFoundError: no user has this identifier
            ConflictError: the new username belongs to another user
        """
        await self.get_user_by_id(user_id)

        changes = edit.model_dump(exclude_none=True)
        if not changes:
            return

        try:
            updated = await self.store.update(user_id, changes)
        except DuplicateKeyError as e:
            raise ConflictError(f"The username '{changes.get('username')}' is already taken") from e

        if not updated:
            raise NotFoundError(USER_NOT_FOUND)

        logger.info(f"Updated user {user_id}: {', '.join(sorted(changes))}")


__all__ = ["UserService", "generate_token", "CREATION_DATE_FORMAT"]
