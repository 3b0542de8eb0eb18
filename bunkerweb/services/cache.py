"""
Job cache entries (read-only).
"""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING

from ..models.entities import CacheEntry, CachePayload

if TYPE_CHECKING:
    from ..clients.http import HTTPClient


def _filter(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class CacheService:
    def __init__(self, client: HTTPClient):
        self._client = client

    def list(
        self,
        *,
        service: str | None = None,
        plugin: str | None = None,
        job_name: str | None = None,
        with_data: bool = False,
    ) -> builtins.list[CacheEntry]:
        """List cache files written by jobs; blank filters are ignored."""
        params = {
            "service": _filter(service),
            "plugin": _filter(plugin),
            "job_name": _filter(job_name),
            "with_data": True if with_data else None,
        }
        payload = self._client.get("cache", params=params, shape=CachePayload)
        if payload is None:
            return []
        return payload.cache or []
