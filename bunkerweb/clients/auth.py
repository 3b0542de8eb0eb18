"""
Authentication header selection.

Two static modes, picked in priority order:
1. API token -> `Authorization: Bearer <token>`
2. username + password -> `Authorization: Basic <base64(user:pass)>`

With neither configured no `Authorization` header is sent. A successful
`login()` replaces the token, switching every later request on the same client
to Bearer auth.
"""

from __future__ import annotations

import base64
import threading

from .pipeline import Middleware, Pipeline, SDKRequest, SDKResponse


def basic_authorization(username: str, password: str) -> str:
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {encoded}"


def bearer_authorization(token: str) -> str:
    return f"Bearer {token}"


class Credentials:
    """
    Mutable credential holder shared by every request of one client.

    The token written by `login()` is read by concurrent requests; the lock
    makes the swap atomic so a request sees either the old or the new token.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        username: str | None = None,
        password: str | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._token = token or None
        self._username = username or None
        self._password = password or None

    @property
    def token(self) -> str | None:
        with self._lock:
            return self._token

    @property
    def mode(self) -> str:
        """Active mode: "bearer", "basic" or "none"."""
        with self._lock:
            if self._token:
                return "bearer"
            if self._username and self._password:
                return "basic"
            return "none"

    def set_token(self, token: str) -> None:
        with self._lock:
            self._token = token

    def authorization(self) -> str | None:
        with self._lock:
            if self._token:
                return bearer_authorization(self._token)
            if self._username and self._password:
                return basic_authorization(self._username, self._password)
            return None


def auth_middleware(credentials: Credentials) -> Middleware:
    """
    Attach the client's `Authorization` header.

    Requests that already carry one (the login call) or that opt out through
    `context["skip_auth"]` are left untouched.
    """

    def _middleware(req: SDKRequest, next: Pipeline) -> SDKResponse:
        if not req.context.get("skip_auth") and not req.has_header("Authorization"):
            header = credentials.authorization()
            if header is not None:
                req.set_header("Authorization", header)
        return next(req)

    return _middleware
