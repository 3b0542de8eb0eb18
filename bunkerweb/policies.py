"""
Client-side guards applied to every control-plane request.

A read-only client (e.g. one driving a plan or preview run against a live
BunkerWeb) may list and fetch resources and log in, but any call that would
change services, instances, configs, bans, plugins or jobs is refused before
it is sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class WritePolicy(Enum):
    """Whether mutating control-plane calls may be sent."""

    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True, slots=True)
class Policies:
    write: WritePolicy = WritePolicy.ALLOW

    @classmethod
    def read_only(cls) -> Policies:
        return cls(write=WritePolicy.DENY)

    @classmethod
    def from_flag(cls, value: str | None) -> Policies:
        """Policies for a `BUNKERWEB_API_READ_ONLY`-style flag; unset or falsy allows writes."""
        if value is not None and value.strip().lower() in _TRUTHY:
            return cls.read_only()
        return cls()

    @property
    def is_read_only(self) -> bool:
        return self.write is WritePolicy.DENY

    def blocks(self, write_intent: bool) -> bool:
        """True when a request with this write intent must not reach the control plane."""
        return write_intent and self.is_read_only
