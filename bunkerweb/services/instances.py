"""
Instance operations and the instance action dispatcher.

Ping, reload and stop run either once against the collection endpoint (all
instances) or once per hostname, sequentially. A per-host failure stops the
fan-out: hosts already contacted are not rolled back and later hosts are not
contacted. Delete is always a single batch call with explicit hostnames.
"""

from __future__ import annotations

import builtins
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from ..clients.http import build_path
from ..exceptions import DecodeError, NotFoundError, ValidationError
from ..models.entities import (
    Instance,
    InstanceCreate,
    InstancePayload,
    InstancesPayload,
    InstanceUpdate,
)
from ..models.types import InstanceAction

if TYPE_CHECKING:
    from ..clients.http import HTTPClient

logger = logging.getLogger(__name__)


def _require_instance(payload: InstancePayload | None) -> Instance:
    if payload is None or payload.instance is None:
        raise DecodeError("decode response payload: missing 'instance'")
    return payload.instance


def _clean_hostnames(hostnames: Sequence[str]) -> builtins.list[str]:
    if isinstance(hostnames, str):
        raise ValidationError("hostnames must be a sequence of strings", field="hostnames")
    cleaned: builtins.list[str] = []
    for idx, host in enumerate(hostnames):
        value = host.strip()
        if not value:
            raise ValidationError(f"Hostname at index {idx} cannot be empty", field="hostnames")
        cleaned.append(value)
    return cleaned


class InstanceService:
    """Manage BunkerWeb instances and run actions on them."""

    def __init__(self, client: HTTPClient):
        self._client = client

    # =========================================================================
    # CRUD
    # =========================================================================

    def list(self) -> builtins.list[Instance]:
        payload = self._client.get("instances", shape=InstancesPayload)
        if payload is None:
            return []
        return payload.instances or []

    def get(self, hostname: str) -> Instance:
        payload = self._client.get(build_path("instances", hostname.strip()), shape=InstancePayload)
        return _require_instance(payload)

    def find(self, hostname: str) -> Instance | None:
        """Like `get()`, but returns None when the instance does not exist."""
        try:
            return self.get(hostname)
        except NotFoundError:
            return None

    def create(self, data: InstanceCreate) -> Instance:
        if not data.hostname.strip():
            raise ValidationError("hostname must be provided", field="hostname")
        payload = self._client.post("instances", json=data.to_payload(), shape=InstancePayload)
        return _require_instance(payload)

    def update(self, hostname: str, data: InstanceUpdate) -> Instance:
        """Update an instance; only fields set on `data` are sent."""
        payload = self._client.patch(
            build_path("instances", hostname.strip()),
            json=data.to_payload(),
            shape=InstancePayload,
        )
        return _require_instance(payload)

    def delete(self, hostname: str, *, missing_ok: bool = False) -> None:
        try:
            self._client.delete(build_path("instances", hostname.strip()))
        except NotFoundError:
            if not missing_ok:
                raise

    def delete_many(self, hostnames: Sequence[str]) -> None:
        """
        Delete several instances in one batch call.

        At least one hostname is required; there is no implicit "delete all".
        """
        hosts = _clean_hostnames(hostnames)
        if not hosts:
            raise ValidationError("At least one hostname is required", field="hostnames")
        self._client.delete("instances", json={"instances": hosts})

    # =========================================================================
    # Actions
    # =========================================================================

    def _fan_out(
        self,
        action: str,
        hostnames: Sequence[str],
        call: Callable[[str], dict[str, Any]],
    ) -> dict[str, Any]:
        hosts = _clean_hostnames(hostnames)
        results: dict[str, Any] = {}
        for host in hosts:
            logger.debug("instance %s: %s", action, host)
            results[host] = call(host)
        return results

    def ping(self, hostnames: Sequence[str] | None = None) -> dict[str, Any]:
        """
        Ping all instances, or each of `hostnames` in turn.

        Returns the collection payload, or a mapping of hostname to payload.
        """
        if not hostnames:
            return self._client.get("instances/ping") or {}
        return self._fan_out(
            "ping",
            hostnames,
            lambda host: self._client.get(build_path("instances", host, "ping")) or {},
        )

    def reload(
        self,
        hostnames: Sequence[str] | None = None,
        *,
        test: bool | None = None,
    ) -> dict[str, Any]:
        """
        Reload all instances, or each of `hostnames` in turn.

        Args:
            hostnames: Instances to reload; all instances when omitted
            test: Test the configuration before reloading. Omitted from the
                request when None (the control plane then defaults to True).
        """
        params = None if test is None else {"test": test}
        if not hostnames:
            return self._client.post("instances/reload", params=params) or {}
        return self._fan_out(
            "reload",
            hostnames,
            lambda host: self._client.post(
                build_path("instances", host, "reload"), params=params
            )
            or {},
        )

    def stop(self, hostnames: Sequence[str] | None = None) -> dict[str, Any]:
        """Stop all instances, or each of `hostnames` in turn."""
        if not hostnames:
            return self._client.post("instances/stop") or {}
        return self._fan_out(
            "stop",
            hostnames,
            lambda host: self._client.post(build_path("instances", host, "stop")) or {},
        )

    def run(
        self,
        action: InstanceAction | str,
        hostnames: Sequence[str] | None = None,
        *,
        test: bool | None = None,
    ) -> dict[str, Any]:
        """
        Dispatch an instance action by name.

        `delete` requires hostnames and returns `{"deleted": [...]}`.
        """
        if isinstance(action, InstanceAction):
            action = action.value
        try:
            op = InstanceAction(action.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Operation {action!r} is not supported. Use ping, reload, stop, or delete.",
                field="operation",
            ) from None

        if op is InstanceAction.PING:
            return self.ping(hostnames)
        if op is InstanceAction.RELOAD:
            return self.reload(hostnames, test=test)
        if op is InstanceAction.STOP:
            return self.stop(hostnames)

        if not hostnames:
            raise ValidationError(
                "Provide at least one hostname when operation is delete", field="hostnames"
            )
        hosts = _clean_hostnames(hostnames)
        self.delete_many(hosts)
        return {"deleted": hosts}
