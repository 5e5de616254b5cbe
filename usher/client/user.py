"""User - plain data"""
from typing import Optional


class User:
    """A user as the server reports it - data only"""

    def __init__(
        self,
        id: int,
        username: str,
        name: str = "",
        status: str = "OFFLINE",
        creation_date: str = "",
        birthday: Optional[str] = None,
    ):
        self.id = id
        self.username = username
        self.name = name
        self.status = status
        self.creation_date = creation_date
        self.birthday = birthday

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=data["id"],
            username=data["username"],
            name=data.get("name", ""),
            status=data.get("status", "OFFLINE"),
            creation_date=data.get("creationDate", ""),
            birthday=data.get("birthday"),
        )

    @property
    def online(self) -> bool:
        return self.status == "ONLINE"

    def __repr__(self):
        return f"User(id={self.id}, username='{self.username}', status={self.status})"

    def __eq__(self, other):
        return isinstance(other, User) and self.id == other.id

    def __hash__(self):
        return hash(self.id)
