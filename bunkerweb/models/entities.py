"""
Pydantic models for BunkerWeb resources and request payloads.

Response models ignore unknown fields so newer control-plane versions keep
decoding. Request models are serialised with `exclude_none=True`, which is how
optional fields are left out of request bodies.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .keys import BanKey, ConfigKey, normalize_ban_service, normalize_config_service
from .types import GLOBAL_SERVICE


class BunkerWebModel(BaseModel):
    """Base model for all BunkerWeb API objects."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


# =============================================================================
# Services
# =============================================================================


class Service(BunkerWebModel):
    id: str
    server_name: str = ""
    is_draft: bool = False
    variables: dict[str, str] = Field(default_factory=dict)

    @field_validator("variables", mode="before")
    @classmethod
    def _none_variables(cls, value: Any) -> Any:
        return {} if value is None else value


class ServiceCreate(BunkerWebModel):
    server_name: str
    is_draft: bool = False
    variables: dict[str, str] | None = None


class ServiceUpdate(BunkerWebModel):
    server_name: str | None = None
    is_draft: bool | None = None
    variables: dict[str, str] | None = None


# =============================================================================
# Instances
# =============================================================================


class Instance(BunkerWebModel):
    hostname: str
    name: str | None = None
    port: int | None = None
    listen_https: bool | None = None
    https_port: int | None = None
    server_name: str | None = None
    method: str | None = None


class InstanceCreate(BunkerWebModel):
    hostname: str
    name: str | None = None
    port: int | None = None
    listen_https: bool | None = None
    https_port: int | None = None
    server_name: str | None = None
    method: str | None = None


class InstanceUpdate(BunkerWebModel):
    name: str | None = None
    port: int | None = None
    listen_https: bool | None = None
    https_port: int | None = None
    server_name: str | None = None
    method: str | None = None


# =============================================================================
# Custom configs
# =============================================================================


class Config(BunkerWebModel):
    service: str = GLOBAL_SERVICE
    type: str
    name: str
    data: str | None = None
    method: str | None = None

    @field_validator("service", mode="before")
    @classmethod
    def _normalize_service(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return normalize_config_service(value)
        return value

    @property
    def key(self) -> ConfigKey:
        return ConfigKey(self.service, self.type, self.name)


class ConfigUpdate(BunkerWebModel):
    service: str | None = None
    type: str | None = None
    name: str | None = None
    data: str | None = None


# =============================================================================
# Bans
# =============================================================================


class Ban(BunkerWebModel):
    ip: str
    service: str | None = None
    reason: str | None = None
    exp: int = 0

    @field_validator("service", mode="before")
    @classmethod
    def _blank_service(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return normalize_ban_service(value)
        return value

    @field_validator("exp", mode="before")
    @classmethod
    def _none_exp(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def key(self) -> BanKey:
        return BanKey(self.ip, self.service)

    @property
    def is_permanent(self) -> bool:
        return self.exp == 0


class BanRequest(BunkerWebModel):
    """
    One item of a ban batch.

    `exp` is the ban duration in seconds (0 bans permanently); when omitted the
    control plane applies its default.
    """

    ip: str
    service: str | None = None
    reason: str | None = None
    exp: int | None = Field(default=None, ge=0)

    @field_validator("ip")
    @classmethod
    def _ip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ip must not be empty")
        return value

    @field_validator("service", mode="before")
    @classmethod
    def _blank_service(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return normalize_ban_service(value)
        return value

    @property
    def key(self) -> BanKey:
        return BanKey(self.ip, self.service)


# =============================================================================
# Plugins / cache / jobs
# =============================================================================


class Plugin(BunkerWebModel):
    id: str
    type: str = ""
    version: str | None = None
    description: str | None = None
    name: str | None = None


class CacheEntry(BunkerWebModel):
    service: str | None = None
    plugin: str
    job_name: str
    file_name: str
    data: str | None = None
    last_update: str | None = None
    checksum: str | None = None


class Job(BunkerWebModel):
    plugin: str
    name: str | None = None
    status: str | None = None
    last_run: str | None = None
    every: str | None = None
    reload: bool | None = None


class JobItem(BunkerWebModel):
    """A job to trigger through `POST /jobs/run`; `name` omitted runs all of the plugin's jobs."""

    plugin: str
    name: str | None = None

    @field_validator("plugin")
    @classmethod
    def _plugin_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("plugin must not be empty")
        return value


# =============================================================================
# Envelope data wrappers
# =============================================================================


class ServicePayload(BunkerWebModel):
    service: Service | None = None


class ServicesPayload(BunkerWebModel):
    services: list[Service] | None = None


class InstancePayload(BunkerWebModel):
    instance: Instance | None = None


class InstancesPayload(BunkerWebModel):
    instances: list[Instance] | None = None


class ConfigPayload(BunkerWebModel):
    config: Config | None = None


class ConfigsPayload(BunkerWebModel):
    configs: list[Config] | None = None


class BansPayload(BunkerWebModel):
    bans: list[Ban] | None = None


class PluginsPayload(BunkerWebModel):
    plugins: list[Plugin] | None = None


class CachePayload(BunkerWebModel):
    cache: list[CacheEntry] | None = None


class JobsPayload(BunkerWebModel):
    jobs: list[Job] | None = None


class LoginPayload(BunkerWebModel):
    token: str = ""
