"""
Service (virtual host) operations.

A service's id is derived by the control plane from its server name; see
`derive_service_id` to predict it client-side.
"""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING

from ..clients.http import build_path
from ..exceptions import DecodeError, NotFoundError, ValidationError
from ..models.entities import (
    Service,
    ServiceCreate,
    ServicePayload,
    ServicesPayload,
    ServiceUpdate,
)
from ..models.types import ConvertTarget

if TYPE_CHECKING:
    from ..clients.http import HTTPClient


def _require_service(payload: ServicePayload | None) -> Service:
    if payload is None or payload.service is None:
        raise DecodeError("decode response payload: missing 'service'")
    return payload.service


class ServiceService:
    """Create, read, update, delete and convert BunkerWeb services."""

    def __init__(self, client: HTTPClient):
        self._client = client

    # =========================================================================
    # Read Operations
    # =========================================================================

    def list(self, *, with_drafts: bool = True) -> builtins.list[Service]:
        """
        List services.

        Args:
            with_drafts: Include draft services (the control plane default)
        """
        params = None if with_drafts else {"with_drafts": False}
        payload = self._client.get("services", params=params, shape=ServicesPayload)
        if payload is None:
            return []
        return payload.services or []

    def get(self, service_id: str) -> Service:
        payload = self._client.get(build_path("services", service_id.strip()), shape=ServicePayload)
        return _require_service(payload)

    def find(self, service_id: str) -> Service | None:
        """Like `get()`, but returns None when the service does not exist."""
        try:
            return self.get(service_id)
        except NotFoundError:
            return None

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(
        self,
        server_name: str,
        *,
        is_draft: bool = False,
        variables: dict[str, str] | None = None,
    ) -> Service:
        if not server_name.strip():
            raise ValidationError("server_name must be provided", field="server_name")
        data = ServiceCreate(server_name=server_name, is_draft=is_draft, variables=variables)
        payload = self._client.post("services", json=data.to_payload(), shape=ServicePayload)
        return _require_service(payload)

    def update(
        self,
        service_id: str,
        *,
        server_name: str | None = None,
        is_draft: bool | None = None,
        variables: dict[str, str] | None = None,
    ) -> Service:
        """
        Update a service.

        Only the given fields are sent. When provided, `variables` replaces the
        service's variables. Renaming `server_name` may change the service id;
        use the id of the returned service afterwards.
        """
        data = ServiceUpdate(server_name=server_name, is_draft=is_draft, variables=variables)
        payload = self._client.patch(
            build_path("services", service_id.strip()),
            json=data.to_payload(),
            shape=ServicePayload,
        )
        return _require_service(payload)

    def delete(self, service_id: str, *, missing_ok: bool = False) -> None:
        """
        Delete a service.

        Args:
            service_id: The service to delete
            missing_ok: Treat "not found" as already deleted
        """
        try:
            self._client.delete(build_path("services", service_id.strip()))
        except NotFoundError:
            if not missing_ok:
                raise

    def convert(self, service_id: str, to: ConvertTarget | str) -> Service:
        """Convert a service between online and draft state."""
        target = to.value if isinstance(to, ConvertTarget) else str(to).strip().lower()
        if target not in {t.value for t in ConvertTarget}:
            raise ValidationError("convert_to must be 'online' or 'draft'", field="convert_to")

        payload = self._client.post(
            build_path("services", service_id.strip(), "convert"),
            params={"convert_to": target},
            shape=ServicePayload,
        )
        return _require_service(payload)
