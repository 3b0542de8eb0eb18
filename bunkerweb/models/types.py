"""
Constants and enums shared across the SDK.
"""

from __future__ import annotations

from enum import Enum

DEFAULT_BASE_URL = "https://127.0.0.1:5000/api"
DEFAULT_TIMEOUT = 30.0

# Scope name used for configs that are not attached to a service.
GLOBAL_SERVICE = "global"

# Envelope `status` values that mean success (compared case-insensitively).
SUCCESS_STATUSES = frozenset({"ok", "success"})


class ConvertTarget(str, Enum):
    """Target state for `POST /services/{id}/convert`."""

    ONLINE = "online"
    DRAFT = "draft"


class InstanceAction(str, Enum):
    """Actions the instance dispatcher can run."""

    PING = "ping"
    RELOAD = "reload"
    STOP = "stop"
    DELETE = "delete"


class PluginType(str, Enum):
    """Plugin listing filter accepted by `GET /plugins`."""

    ALL = "all"
    CORE = "core"
    EXTERNAL = "external"
    UI = "ui"
    PRO = "pro"
