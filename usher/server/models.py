"""
Server-side data models

Plain pydantic models: the stored user record, plus the request and
response shapes the gateway validates and renders.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UserStatus(str, Enum):
    """Session state of a user, coupled to token presence"""
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class UserRecord(BaseModel):
    """A stored user: identity, credentials and session state"""
    id: Optional[int] = None
    name: str
    username: str
    password: str
    creation_date: str
    birthday: Optional[str] = None
    status: UserStatus = UserStatus.OFFLINE
    token: Optional[str] = None

    class Config:
        from_attributes = True


# Request models

class UserCreate(BaseModel):
    """Account creation request"""
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    """Login request"""
    username: str
    password: str


class UserLogout(BaseModel):
    """Logout request"""
    token: str


class UserEdit(BaseModel):
    """Profile edit; fields left out (or null) stay unchanged"""
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    birthday: Optional[str] = None


# Response models

class User(BaseModel):
    """Public view of a user (no password, no token)"""
    id: int
    name: str
    username: str
    creation_date: str = Field(alias="creationDate")
    status: UserStatus
    birthday: Optional[str] = None

    class Config:
        from_attributes = True
        populate_by_name = True

    @classmethod
    def from_record(cls, record: UserRecord) -> "User":
        return cls(
            id=record.id,
            name=record.name,
            username=record.username,
            creation_date=record.creation_date,
            status=record.status,
            birthday=record.birthday,
        )


class SessionToken(BaseModel):
    """Returned by a successful login"""
    id: int
    token: str


__all__ = [
    "UserStatus",
    "UserRecord",
    "UserCreate",
    "UserLogin",
    "UserLogout",
    "UserEdit",
    "User",
    "SessionToken",
]
