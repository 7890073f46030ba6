"""Async HTTP client for the ReClaim API.

The active tracking session id lives on a ``SessionTracker`` instance owned by
the caller. It is set by ``login()`` and cleared by ``logout()``; using the
tracker as an async context manager ties both to a block::

    async with aiohttp.ClientSession() as http:
        client = ReclaimClient("http://localhost:8000", http)
        await client.login("user@x.edu", "secret-password")
        async with client.tracker() as tracker:
            ...  # tracker.session_id is set here
"""
import logging
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class ReclaimAPIError(Exception):
    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


class ReclaimClient:
    def __init__(self, base_url: str, http: aiohttp.ClientSession, token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.http = http
        self.token = token

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def post(self, path: str, payload: Optional[dict] = None) -> dict:
        async with self.http.post(f"{self.base_url}{path}", json=payload or {}, headers=self._headers()) as response:
            data = await response.json(content_type=None)
            if response.status >= 400:
                raise ReclaimAPIError(response.status, (data or {}).get("error", "Request failed"))
            return data

    async def send_otp(self, email: str) -> dict:
        return await self.post("/otp/send", {"email": email})

    async def verify_otp(self, email: str, otp: str, new_password: str) -> dict:
        return await self.post("/otp/verify", {"email": email, "otp": otp, "newPassword": new_password})

    async def login(self, email: str, password: str) -> str:
        data = await self.post("/auth/login", {"email": email, "password": password})
        self.token = data["access_token"]
        return self.token

    def tracker(self) -> "SessionTracker":
        return SessionTracker(self)


class SessionTracker:
    """Holds the server-side tracking session id for one signed-in user."""

    def __init__(self, client: ReclaimClient):
        self.client = client
        self.session_id: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.session_id is not None

    async def login(self) -> Optional[int]:
        try:
            data = await self.client.post("/session/login")
        except (ReclaimAPIError, aiohttp.ClientError) as exc:
            # Tracking must never block the user's own sign-in
            logger.error("Failed to track login: %s", exc)
            return None
        self.session_id = data.get("sessionId")
        return self.session_id

    async def logout(self) -> None:
        payload = {"sessionId": self.session_id} if self.session_id is not None else {}
        try:
            await self.client.post("/session/logout", payload)
        except (ReclaimAPIError, aiohttp.ClientError) as exc:
            logger.error("Failed to track logout: %s", exc)
        finally:
            self.session_id = None

    async def __aenter__(self) -> "SessionTracker":
        await self.login()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.logout()
