"""
client/api.py -- Client-side wrapper that attaches credentials to outgoing calls.

AuthorizedRequestClient is the single choke point for talking to the backend:
  - reads the persisted token before every request and sends
    'Authorization: Bearer <token>', or no Authorization key at all;
  - sets Content-Type: application/json for JSON bodies (and bodiless calls),
    and leaves it out for multipart/raw bodies so the transport can write it;
  - merges caller headers over the computed defaults, except Authorization,
    which is always computed here and never taken from the caller;
  - returns the requests.Response untouched. No retries, no 401 handling --
    branching on status is the caller's job.

SessionGateClient layers the backend's endpoints on top:
    client = SessionGateClient("http://localhost:8000", storage=SQLiteStorage(path))
    client.auth.login("alice", "correct horse")   # persists the token on 200
    client.projects()                              # sent with the bearer token
    client.auth.logout()                           # clears the persisted token

Layer rule: client/ imports only stdlib and third-party libraries. It does
NOT import from api/, auth/, or core/ -- it talks to the server over HTTP.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests
from requests.structures import CaseInsensitiveDict

from client.body import JSON_CONTENT_TYPE, Body, JsonBody
from client.storage import TOKEN_KEY, MemoryStorage, Storage

logger = logging.getLogger("sessiongate.client")

_DEFAULT_TIMEOUT = 30


class AuthorizedRequestClient:
    """Sends requests to the backend with the persisted bearer token attached."""

    def __init__(
        self,
        base_url: str = "",
        storage: Optional[Storage] = None,
        session: Optional[requests.Session] = None,
        token_key: str = TOKEN_KEY,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.storage = storage if storage is not None else MemoryStorage()
        self.session = session if session is not None else requests.Session()
        self.token_key = token_key
        self.timeout = timeout

    def build_headers(
        self,
        body: Optional[Body] = None,
        headers: Optional[dict[str, str]] = None,
        anonymous: bool = False,
    ) -> CaseInsensitiveDict:
        """Compute the final header set for one outgoing request."""
        merged: CaseInsensitiveDict = CaseInsensitiveDict()
        content_type = JSON_CONTENT_TYPE if body is None else body.content_type
        if content_type:
            merged["Content-Type"] = content_type

        for name, value in (headers or {}).items():
            if name.lower() == "authorization":
                logger.debug("Ignoring caller-supplied Authorization header")
                continue
            merged[name] = value

        token = None if anonymous else self.storage.get(self.token_key)
        if token:
            merged["Authorization"] = f"Bearer {token}"
        return merged

    def request(
        self,
        method: str,
        path: str,
        body: Optional[Body] = None,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        anonymous: bool = False,
    ) -> requests.Response:
        """Send one request and return the response exactly as received.

        anonymous=True skips the token entirely; used for login and register,
        which must not carry a stale session.
        """
        kwargs: dict[str, Any] = body.request_kwargs() if body is not None else {}
        if params:
            kwargs["params"] = params
        return self.session.request(
            method,
            self.base_url + path,
            headers=self.build_headers(body, headers, anonymous=anonymous),
            timeout=self.timeout,
            **kwargs,
        )

    def get(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, body: Optional[Body] = None, **kwargs: Any) -> requests.Response:
        return self.request("POST", path, body=body, **kwargs)

    def put(self, path: str, body: Optional[Body] = None, **kwargs: Any) -> requests.Response:
        return self.request("PUT", path, body=body, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("DELETE", path, **kwargs)


class AuthApi:
    """The /api/auth endpoints, plus the token bookkeeping they imply."""

    def __init__(self, http: AuthorizedRequestClient) -> None:
        self._http = http

    def login(self, username: str, password: str) -> requests.Response:
        response = self._http.post(
            "/api/auth/login",
            JsonBody({"username": username, "password": password}),
            anonymous=True,
        )
        self._remember_token(response)
        return response

    def register(self, username: str, password: str) -> requests.Response:
        response = self._http.post(
            "/api/auth/register",
            JsonBody({"username": username, "password": password}),
            anonymous=True,
        )
        self._remember_token(response)
        return response

    def status(self) -> requests.Response:
        return self._http.get("/api/auth/status")

    def user(self) -> requests.Response:
        return self._http.get("/api/auth/user")

    def logout(self) -> requests.Response:
        """Tell the server, then drop the local token whatever it answered."""
        try:
            return self._http.post("/api/auth/logout")
        finally:
            self._http.storage.remove(self._http.token_key)

    def _remember_token(self, response: requests.Response) -> None:
        if not response.ok:
            return
        try:
            data = response.json()
        except ValueError:
            logger.warning("Auth response was not JSON; token not stored")
            return
        token = data.get("token") if isinstance(data, dict) else None
        if token:
            self._http.storage.set(self._http.token_key, token)


class SessionGateClient:
    """Typed entry points for the backend's HTTP API."""

    def __init__(self, base_url: str = "", storage: Optional[Storage] = None, **kwargs: Any) -> None:
        self.http = AuthorizedRequestClient(base_url, storage=storage, **kwargs)
        self.auth = AuthApi(self.http)

    def projects(self) -> requests.Response:
        return self.http.get("/api/projects")

    def sessions(self, project_name: str, limit: int = 5, offset: int = 0) -> requests.Response:
        path = f"/api/projects/{quote(project_name, safe='')}/sessions"
        return self.http.get(path, params={"limit": limit, "offset": offset})
