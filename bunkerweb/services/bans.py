"""
IP bans.

A ban is identified by `BanKey` (ip, optional service). An unscoped ban and a
ban on a named service are different bans; nothing falls back from one to the
other. Banning an existing key overwrites it.
"""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from ..exceptions import ValidationError
from ..models.entities import Ban, BanRequest, BansPayload
from ..models.keys import BanKey

if TYPE_CHECKING:
    from ..clients.http import HTTPClient


def _as_key(key: BanKey | str) -> BanKey:
    return key if isinstance(key, BanKey) else BanKey.parse(key)


class BanService:
    """List, create and lift IP bans, one at a time or in batches."""

    def __init__(self, client: HTTPClient):
        self._client = client

    def list(self) -> builtins.list[Ban]:
        payload = self._client.get("bans", shape=BansPayload)
        if payload is None:
            return []
        return payload.bans or []

    def find(self, key: BanKey | str) -> Ban | None:
        """
        Look up one ban by key.

        The control plane has no single-ban endpoint, so this scans `list()`.
        Returns None when no ban has exactly this (ip, service).
        """
        key = _as_key(key)
        for ban in self.list():
            if ban.key == key:
                return ban
        return None

    def ban(
        self,
        ip: str,
        *,
        service: str | None = None,
        reason: str | None = None,
        exp: int | None = None,
    ) -> BanKey:
        """
        Ban an IP address.

        Args:
            ip: Address to ban
            service: Restrict the ban to one service; unscoped when omitted
            reason: Free-form reason stored with the ban
            exp: Duration in seconds, 0 for permanent; server default when omitted

        Returns:
            The key of the created ban.
        """
        request = self._request(ip, service=service, reason=reason, exp=exp)
        self._client.post("bans", json=[request.to_payload()])
        return request.key

    def unban(self, key: BanKey | str) -> None:
        key = _as_key(key)
        self._client.delete("bans", json=[key.to_payload()])

    def ban_many(self, requests: Iterable[BanRequest]) -> None:
        """Ban several addresses in one batch call; at least one request is required."""
        items = [request.to_payload() for request in requests]
        if not items:
            raise ValidationError("At least one ban request is required", field="bans")
        self._client.post("bans/ban", json=items)

    def unban_many(self, keys: Sequence[BanKey | str]) -> None:
        """Lift several bans in one batch call; at least one key is required."""
        if isinstance(keys, str):
            raise ValidationError("keys must be a sequence of ban keys", field="bans")
        items = [_as_key(key).to_payload() for key in keys]
        if not items:
            raise ValidationError("At least one unban request is required", field="bans")
        self._client.post("bans/unban", json=items)

    @staticmethod
    def _request(
        ip: str,
        *,
        service: str | None,
        reason: str | None,
        exp: int | None,
    ) -> BanRequest:
        if not ip.strip():
            raise ValidationError("Ban IP must be provided", field="ip")
        if exp is not None and exp < 0:
            raise ValidationError("exp must be zero or a positive number of seconds", field="exp")
        return BanRequest(ip=ip, service=service, reason=reason, exp=exp)
