"""
BunkerWeb data models.

All Pydantic models, resource keys and type definitions are available from
this module.
"""

from __future__ import annotations

# Core entities
from .entities import (
    # Ban
    Ban,
    BanRequest,
    # Base
    BunkerWebModel,
    CacheEntry,
    # Config
    Config,
    ConfigUpdate,
    # Instance
    Instance,
    InstanceCreate,
    InstanceUpdate,
    # Jobs / plugins / cache
    Job,
    JobItem,
    Plugin,
    # Service
    Service,
    ServiceCreate,
    ServiceUpdate,
)

# Resource keys
from .keys import BanKey, ConfigKey, derive_service_id

# Types
from .types import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    GLOBAL_SERVICE,
    ConvertTarget,
    InstanceAction,
    PluginType,
)

__all__ = [
    # Base
    "BunkerWebModel",
    # Service
    "Service",
    "ServiceCreate",
    "ServiceUpdate",
    # Instance
    "Instance",
    "InstanceCreate",
    "InstanceUpdate",
    # Config
    "Config",
    "ConfigUpdate",
    # Ban
    "Ban",
    "BanRequest",
    # Jobs / plugins / cache
    "Plugin",
    "CacheEntry",
    "Job",
    "JobItem",
    # Keys
    "ConfigKey",
    "BanKey",
    "derive_service_id",
    # Types
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "GLOBAL_SERVICE",
    "ConvertTarget",
    "InstanceAction",
    "PluginType",
]
