"""
BunkerWeb SDK.

A Python client for the BunkerWeb control-plane API.

Example:
    ```python
    from bunkerweb import BunkerWeb

    client = BunkerWeb.from_env()
    token = client.login("admin", "secret")
    print(client.health())
    ```
"""

from __future__ import annotations

from ._version import __version__
from .client import BunkerWeb
from .clients.http import ClientConfig
from .clients.multipart import UploadFile
from .exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    BunkerWebError,
    ConflictError,
    DecodeError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    ValidationError,
    WriteNotAllowedError,
    is_not_found,
)
from .models import (
    GLOBAL_SERVICE,
    Ban,
    BanKey,
    BanRequest,
    CacheEntry,
    Config,
    ConfigKey,
    ConvertTarget,
    Instance,
    InstanceAction,
    InstanceCreate,
    InstanceUpdate,
    Job,
    JobItem,
    Plugin,
    PluginType,
    Service,
    derive_service_id,
)
from .policies import Policies, WritePolicy

__all__ = [
    "__version__",
    # Client
    "BunkerWeb",
    "ClientConfig",
    "Policies",
    "WritePolicy",
    "UploadFile",
    # Models
    "Service",
    "Instance",
    "InstanceCreate",
    "InstanceUpdate",
    "Config",
    "Ban",
    "BanRequest",
    "Plugin",
    "CacheEntry",
    "Job",
    "JobItem",
    "ConfigKey",
    "BanKey",
    "derive_service_id",
    "GLOBAL_SERVICE",
    "ConvertTarget",
    "InstanceAction",
    "PluginType",
    # Exceptions
    "BunkerWebError",
    "ValidationError",
    "WriteNotAllowedError",
    "TransportError",
    "RequestTimeoutError",
    "DecodeError",
    "APIError",
    "BadRequestError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    "is_not_found",
]
