"""Client - async HTTP client for the Usher server"""
from typing import List, Optional

import httpx

from .user import User
from .logger import get_logger

logger = get_logger("Client")


class ClientError(Exception):
    """The server answered with a non-success status"""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class Client:
    """Usher client - one login session at a time

    Usage:
        async with Client("localhost:8000") as client:
            await client.register("Test User", "testUsername", "testPassword")
            await client.login("testUsername", "testPassword")
            me = await client.get_user(client.user_id)
            await client.logout()
    """

    def __init__(self, endpoint: str = "localhost:8000", transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            endpoint: server address, scheme optional
            transport: custom httpx transport (e.g. httpx.ASGITransport in tests)
        """
        if not endpoint.startswith("http"):
            endpoint = "http://" + endpoint
        self.http_url = endpoint.rstrip("/")

        self._http = httpx.AsyncClient(base_url=self.http_url, transport=transport, timeout=30.0)

        self.token: Optional[str] = None
        self.user_id: Optional[int] = None

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        await self._http.aclose()

    @staticmethod
    def _check(resp: httpx.Response) -> httpx.Response:
        if resp.is_success:
            return resp
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        logger.warning(f"{resp.request.method} {resp.request.url.path} failed with {resp.status_code}: {detail}")
        raise ClientError(resp.status_code, str(detail))

    # ========== API ==========

    async def register(self, name: str, username: str, password: str) -> User:
        """Create an account"""
        resp = await self._http.post("/users", json={
            "name": name,
            "username": username,
            "password": password
        })
        user = User.from_dict(self._check(resp).json())
        logger.info(f"Registered {user.username} (id {user.id})")
        return user

    async def login(self, username: str, password: str) -> str:
        """Log in and remember the session token"""
        resp = await self._http.post("/login", json={"username": username, "password": password})
        data = self._check(resp).json()
        self.token = data["token"]
        self.user_id = data["id"]
        logger.info(f"Logged in as {username}")
        return self.token

    async def logout(self) -> bool:
        """End the current session; a no-op when not logged in"""
        if self.token is None:
            return True
        resp = await self._http.put("/logout", json={"token": self.token})
        result = bool(self._check(resp).json())
        self.token = None
        self.user_id = None
        logger.info("Logged out")
        return result

    async def list_users(self) -> List[User]:
        resp = await self._http.get("/users")
        return [User.from_dict(item) for item in self._check(resp).json()]

    async def get_user(self, user_id: int) -> User:
        """Fetch one user; needs a live session"""
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        resp = await self._http.get(f"/users/{user_id}", headers=headers)
        return User.from_dict(self._check(resp).json())

    async def edit(self, user_id: int, username: Optional[str] = None, birthday: Optional[str] = None) -> None:
        """Change username and/or birthday; omitted fields stay as they are"""
        payload = {}
        if username is not None:
            payload["username"] = username
        if birthday is not None:
            payload["birthday"] = birthday
        resp = await self._http.put(f"/users/{user_id}", json=payload)
        self._check(resp)
