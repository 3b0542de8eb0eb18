"""
Composite resource keys.

Configs and bans have no surrogate id: the key *is* the identity. Changing any
segment of a key addresses a different resource, so relocating a config is a
delete + create rather than a rename.

- `ConfigKey` is (service, type, name). A missing or blank service, or any
  casing of "global", is the default global scope.
- `BanKey` is (ip, service). A missing service is its own scope; there is no
  fallback between the unscoped ban and a service-scoped one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..exceptions import ValidationError
from .types import GLOBAL_SERVICE


def normalize_config_service(service: str | None) -> str:
    """Map an optional config scope to its canonical form ("global" when unset)."""
    if service is None:
        return GLOBAL_SERVICE
    trimmed = service.strip()
    if not trimmed or trimmed.lower() == GLOBAL_SERVICE:
        return GLOBAL_SERVICE
    return trimmed


def normalize_ban_service(service: str | None) -> str | None:
    if service is None:
        return None
    trimmed = service.strip()
    return trimmed or None


def derive_service_id(server_name: str) -> str:
    """
    Derive the identifier the control plane assigns to a service.

    The first whitespace-separated word of `server_name` is lowercased; letters,
    digits, `.` and `-` are kept, `_` becomes `-`, anything else is dropped.
    Falls back to "service" when nothing survives.
    """
    words = server_name.split()
    if not words:
        return "service"

    chars: list[str] = []
    for ch in words[0].lower():
        if ("a" <= ch <= "z") or ("0" <= ch <= "9") or ch in ".-":
            chars.append(ch)
        elif ch == "_":
            chars.append("-")
    return "".join(chars) or "service"


@dataclass(frozen=True, slots=True)
class ConfigKey:
    """
    Identity of a custom configuration snippet.

    The service is normalised on construction, so keys built with `None`, `""`
    or `"GLOBAL"` compare and hash equal. Type and name are trimmed, so the
    request body and the resource path always name the same config.
    """

    service: str
    type: str
    name: str

    def __init__(self, service: str | None, type: str, name: str) -> None:
        if not type or not type.strip():
            raise ValidationError("Config type must be provided", field="type")
        if not name or not name.strip():
            raise ValidationError("Config name must be provided", field="name")
        object.__setattr__(self, "service", normalize_config_service(service))
        object.__setattr__(self, "type", type.strip())
        object.__setattr__(self, "name", name.strip())

    @classmethod
    def parse(cls, identifier: str) -> ConfigKey:
        """Parse a `service/type/name` identifier (an empty service means global)."""
        parts = identifier.split("/")
        if len(parts) != 3:
            raise ValidationError(
                f"Expected identifier in the form service/type/name, got {identifier!r}"
            )
        return cls(parts[0], parts[1], parts[2])

    @property
    def is_global(self) -> bool:
        return self.service == GLOBAL_SERVICE

    @property
    def segments(self) -> tuple[str, str, str]:
        return (self.service, self.type, self.name)

    def moved(
        self,
        *,
        service: str | None = None,
        type: str | None = None,
        name: str | None = None,
    ) -> ConfigKey:
        """Return the key this config would have after relocating the given segments."""
        return ConfigKey(
            self.service if service is None else service,
            self.type if type is None else type,
            self.name if name is None else name,
        )

    def to_payload(self) -> dict[str, Any]:
        """Wire form used in batch bodies; the global scope omits `service`."""
        payload: dict[str, Any] = {"type": self.type, "name": self.name}
        if not self.is_global:
            payload["service"] = self.service
        return payload

    def __str__(self) -> str:
        return "/".join(self.segments)


@dataclass(frozen=True, slots=True)
class BanKey:
    """Identity of an IP ban: the address plus an optional service scope."""

    ip: str
    service: str | None = None

    def __init__(self, ip: str, service: str | None = None) -> None:
        if not ip or not ip.strip():
            raise ValidationError("Ban IP must be provided", field="ip")
        object.__setattr__(self, "ip", ip.strip())
        object.__setattr__(self, "service", normalize_ban_service(service))

    @classmethod
    def parse(cls, identifier: str) -> BanKey:
        """Parse an `ip` or `ip/service` identifier."""
        parts = identifier.split("/")
        if len(parts) > 2:
            raise ValidationError(f"Expected ip or ip/service, got {identifier!r}")
        return cls(parts[0], parts[1] if len(parts) == 2 else None)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ip": self.ip}
        if self.service is not None:
            payload["service"] = self.service
        return payload

    def __str__(self) -> str:
        if self.service is None:
            return self.ip
        return f"{self.ip}/{self.service}"
