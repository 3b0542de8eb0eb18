"""
Main BunkerWeb API client.

Provides a unified interface to the BunkerWeb control-plane API.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import httpx

from .clients.auth import basic_authorization
from .clients.http import ClientConfig, HTTPClient
from .exceptions import DecodeError, ValidationError
from .models.entities import LoginPayload
from .models.types import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .policies import Policies
from .services.bans import BanService
from .services.cache import CacheService
from .services.configs import ConfigService
from .services.global_config import GlobalConfigService
from .services.instances import InstanceService
from .services.jobs import JobService
from .services.plugins import PluginService
from .services.services import ServiceService

logger = logging.getLogger(__name__)

ENV_ENDPOINT = "BUNKERWEB_API_ENDPOINT"
ENV_TOKEN = "BUNKERWEB_API_TOKEN"
ENV_USERNAME = "BUNKERWEB_API_USERNAME"
ENV_PASSWORD = "BUNKERWEB_API_PASSWORD"
ENV_INSECURE = "BUNKERWEB_API_INSECURE"
ENV_TIMEOUT = "BUNKERWEB_API_TIMEOUT"
ENV_READ_ONLY = "BUNKERWEB_API_READ_ONLY"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _maybe_load_dotenv(
    *,
    load_dotenv: bool,
    dotenv_path: str | Path | None = None,
    override: bool = False,
) -> None:
    if not load_dotenv:
        return
    try:
        import dotenv
    except ImportError as e:
        raise ImportError(
            "Optional .env support requires python-dotenv; install `bunkerweb-sdk[dotenv]`."
        ) from e
    dotenv.load_dotenv(dotenv_path=dotenv_path, override=override)


def _env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


class BunkerWeb:
    """
    Synchronous BunkerWeb API client.

    Example:
        ```python
        from bunkerweb import BunkerWeb, ConfigKey

        with BunkerWeb(base_url="https://bw.example/api", api_token="...") as client:
            for service in client.services.list():
                print(service.id)

            key = ConfigKey("app", "http", "app.conf")
            client.configs.create(key, "add_header X-App 1;")
            client.instances.reload(test=True)
        ```

    Attributes:
        services: Service (virtual host) operations
        instances: Instance operations and actions
        global_config: Global settings
        configs: Custom configuration snippets
        bans: IP bans
        plugins: Plugin operations
        cache: Job cache entries
        jobs: Scheduler jobs
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        api_token: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        log_requests: bool = False,
        policies: Policies | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the BunkerWeb client.

        Args:
            base_url: Control-plane API root (default: https://127.0.0.1:5000/api)
            api_token: Bearer token; takes precedence over username/password
            username: Basic auth username
            password: Basic auth password
            timeout: Request timeout in seconds
            verify: Verify the server's TLS certificate
            log_requests: Log every request and response at DEBUG level
            policies: Client policies (e.g. deny writes)
            transport: Custom httpx transport (mainly for tests)
        """
        config = ClientConfig(
            base_url=base_url,
            api_token=api_token,
            username=username,
            password=password,
            timeout=timeout,
            verify=verify,
            log_requests=log_requests,
            policies=policies or Policies(),
            transport=transport,
        )
        self._http = HTTPClient(config)

        self._services: ServiceService | None = None
        self._instances: InstanceService | None = None
        self._global_config: GlobalConfigService | None = None
        self._configs: ConfigService | None = None
        self._bans: BanService | None = None
        self._plugins: PluginService | None = None
        self._cache: CacheService | None = None
        self._jobs: JobService | None = None

    @classmethod
    def from_env(
        cls,
        *,
        load_dotenv: bool = False,
        dotenv_path: str | Path | None = None,
        **overrides: Any,
    ) -> BunkerWeb:
        """
        Build a client from `BUNKERWEB_API_*` environment variables.

        Reads `BUNKERWEB_API_ENDPOINT`, `BUNKERWEB_API_TOKEN`,
        `BUNKERWEB_API_USERNAME`, `BUNKERWEB_API_PASSWORD`,
        `BUNKERWEB_API_INSECURE`, `BUNKERWEB_API_TIMEOUT` and
        `BUNKERWEB_API_READ_ONLY`. Keyword arguments override the environment.

        Args:
            load_dotenv: Load a `.env` file first (requires python-dotenv)
            dotenv_path: Explicit `.env` path; searched for when omitted
        """
        _maybe_load_dotenv(load_dotenv=load_dotenv, dotenv_path=dotenv_path)

        kwargs: dict[str, Any] = {}
        endpoint = _env(ENV_ENDPOINT)
        if endpoint is not None:
            kwargs["base_url"] = endpoint
        for key, name in (
            ("api_token", ENV_TOKEN),
            ("username", ENV_USERNAME),
            ("password", ENV_PASSWORD),
        ):
            value = _env(name)
            if value is not None:
                kwargs[key] = value

        insecure = _env(ENV_INSECURE)
        if insecure is not None:
            kwargs["verify"] = insecure.lower() not in _TRUTHY

        timeout = _env(ENV_TIMEOUT)
        if timeout is not None:
            try:
                kwargs["timeout"] = float(timeout)
            except ValueError:
                raise ValidationError(
                    f"{ENV_TIMEOUT} must be a number of seconds, got {timeout!r}",
                    field="timeout",
                ) from None

        read_only = _env(ENV_READ_ONLY)
        if read_only is not None:
            kwargs["policies"] = Policies.from_flag(read_only)

        if "insecure" in overrides:
            overrides["verify"] = not overrides.pop("insecure")
        kwargs.update(overrides)
        return cls(**kwargs)

    def __enter__(self) -> BunkerWeb:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._http.close()

    # =========================================================================
    # Service Properties (lazy initialization)
    # =========================================================================

    @property
    def services(self) -> ServiceService:
        """Service (virtual host) operations."""
        if self._services is None:
            self._services = ServiceService(self._http)
        return self._services

    @property
    def instances(self) -> InstanceService:
        """Instance operations and actions."""
        if self._instances is None:
            self._instances = InstanceService(self._http)
        return self._instances

    @property
    def global_config(self) -> GlobalConfigService:
        """Global settings."""
        if self._global_config is None:
            self._global_config = GlobalConfigService(self._http)
        return self._global_config

    @property
    def configs(self) -> ConfigService:
        """Custom configuration snippets."""
        if self._configs is None:
            self._configs = ConfigService(self._http)
        return self._configs

    @property
    def bans(self) -> BanService:
        """IP bans."""
        if self._bans is None:
            self._bans = BanService(self._http)
        return self._bans

    @property
    def plugins(self) -> PluginService:
        """Plugin operations."""
        if self._plugins is None:
            self._plugins = PluginService(self._http)
        return self._plugins

    @property
    def cache(self) -> CacheService:
        """Job cache entries."""
        if self._cache is None:
            self._cache = CacheService(self._http)
        return self._cache

    @property
    def jobs(self) -> JobService:
        """Scheduler jobs."""
        if self._jobs is None:
            self._jobs = JobService(self._http)
        return self._jobs

    # =========================================================================
    # Utility Methods
    # =========================================================================

    @property
    def auth_mode(self) -> str:
        """Authentication currently in use: "bearer", "basic" or "none"."""
        return self._http.credentials.mode

    def ping(self) -> dict[str, Any]:
        """Check that the API answers."""
        return self._http.get("ping", shape=dict[str, Any]) or {}

    def health(self) -> dict[str, Any]:
        """Fetch the API health report."""
        return self._http.get("health", shape=dict[str, Any]) or {}

    def login(self, username: str, password: str) -> str:
        """
        Exchange credentials for an API token.

        The call is Basic-authenticated with the given credentials regardless
        of how the client was configured. On success the token replaces the
        client's credentials, so every later request uses Bearer auth.

        Returns:
            The new token.
        """
        if not username.strip():
            raise ValidationError("username must be provided", field="username")
        if not password.strip():
            raise ValidationError("password must be provided", field="password")

        payload = self._http.post(
            "auth",
            json={"username": username, "password": password},
            headers={"Authorization": basic_authorization(username, password)},
            shape=LoginPayload,
            write=False,
        )
        token = payload.token if payload is not None else ""
        if not token:
            raise DecodeError("login response did not include a token")

        self._http.credentials.set_token(token)
        logger.debug("bunkerweb login succeeded for %s", username)
        return token
