"""Async HTTP client for the Famli API with persisted tokens and one-shot refresh on 401."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Requests to these endpoints never carry a bearer token and never trigger a refresh.
AUTH_PATH_MARKER = "/auth/"


class ApiError(Exception):
    """Raised for non-2xx responses (status > 0) and transport failures (status 0)."""

    def __init__(self, message: str, status: int, data: Any = None) -> None:
        self.message = message
        self.status = status
        self.data = data
        super().__init__(message)


class SessionExpiredError(ApiError):
    """Raised when the refresh token is missing or rejected; the local session has been cleared."""

    def __init__(self, message: str = "Session expired; please log in again", data: Any = None) -> None:
        super().__init__(message, 401, data)


class TokenStore:
    """
    Access token, refresh token and user profile, kept together.

    With a path, the state is persisted as JSON and reloaded on construction.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.user: dict[str, Any] | None = None
        if self.path is not None and self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Discarding unreadable session file %s", self.path)
            self.clear()
            return
        self.access_token = data.get("accessToken")
        self.refresh_token = data.get("refreshToken")
        self.user = data.get("user")

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(
                {
                    "accessToken": self.access_token,
                    "refreshToken": self.refresh_token,
                    "user": self.user,
                }
            ),
            encoding="utf-8",
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token and self.user)

    def save(self, access_token: str, refresh_token: str, user: dict[str, Any] | None = None) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        if user is not None:
            self.user = user
        self._persist()

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None
        if self.path is not None and self.path.exists():
            self.path.unlink()


def _is_auth_endpoint(endpoint: str) -> bool:
    return AUTH_PATH_MARKER in endpoint


def _response_data(resp: httpx.Response) -> Any:
    content_type = resp.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return resp.json()
        except ValueError:
            return resp.text
    return resp.text


def _handle_response(resp: httpx.Response) -> Any:
    data = _response_data(resp)
    if resp.status_code >= 400:
        message = "An error occurred"
        if isinstance(data, dict):
            message = data.get("error") or data.get("message") or message
        raise ApiError(message, resp.status_code, data)
    return data


class FamliClient:
    """
    Thin API client. Attaches the stored access token to every non-auth request;
    on a 401 it refreshes once and retries the request once. If the refresh
    fails, the store is cleared and SessionExpiredError is raised.
    """

    def __init__(
        self,
        base_url: str,
        store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.store = store or TokenStore()
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=httpx.Timeout(timeout),
        )

    async def __aenter__(self) -> FamliClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, endpoint: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.store.access_token and not _is_auth_endpoint(endpoint):
            headers["Authorization"] = f"Bearer {self.store.access_token}"
        return headers

    async def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(
                method, endpoint, headers=self._headers(endpoint), **kwargs
            )
        except httpx.HTTPError as e:
            raise ApiError("Network error", 0, {"error": str(e)}) from e

    async def _refresh_access_token(self) -> None:
        refresh_token = self.store.refresh_token
        if not refresh_token:
            self.store.clear()
            raise SessionExpiredError("No refresh token available")
        resp = await self._send("POST", "/auth/refresh", json={"refreshToken": refresh_token})
        if resp.status_code != 200:
            logger.info("Token refresh rejected (status=%s); clearing session", resp.status_code)
            self.store.clear()
            raise SessionExpiredError(data=_response_data(resp))
        data = resp.json()
        self.store.save(data["accessToken"], data["refreshToken"])

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one API request; returns the decoded body or raises ApiError."""
        kwargs: dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if params is not None:
            kwargs["params"] = params

        resp = await self._send(method, endpoint, **kwargs)
        if resp.status_code == 401 and not _is_auth_endpoint(endpoint):
            await self._refresh_access_token()
            resp = await self._send(method, endpoint, **kwargs)
        return _handle_response(resp)

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("PUT", endpoint, json=data)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

    async def first_run(self) -> bool:
        data = await self.get("/auth/first-run")
        return bool(data.get("isFirstRun"))

    async def setup(self, username: str, email: str, password: str) -> dict[str, Any]:
        data = await self.post(
            "/auth/setup", {"username": username, "email": email, "password": password}
        )
        self.store.save(data["accessToken"], data["refreshToken"], data["user"])
        return data

    async def login(self, username: str, password: str) -> dict[str, Any]:
        data = await self.post("/auth/login", {"username": username, "password": password})
        self.store.save(data["accessToken"], data["refreshToken"], data["user"])
        return data

    async def refresh(self) -> None:
        """Rotate the stored token pair explicitly."""
        await self._refresh_access_token()

    async def logout(self) -> None:
        """Revoke the server session (best effort) and always clear local state."""
        try:
            await self.post("/auth/logout", {"refreshToken": self.store.refresh_token})
        except ApiError as e:
            logger.warning("Logout request failed: %s", e.message)
        self.store.clear()

    async def update_preferences(self, preferences: dict[str, Any]) -> None:
        await self.put("/users/me/preferences", {"preferences": preferences})
        if self.store.user is not None:
            self.store.user = {**self.store.user, "preferences": preferences}
            self.store.save(self.store.access_token, self.store.refresh_token, self.store.user)
