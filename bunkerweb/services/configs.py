"""
Custom configuration snippets.

Configs are addressed by `ConfigKey` (service, type, name). Changing any part
of the key relocates the config: `move()` deletes the old key and creates the
new one, and `upload_update()` can relocate in the same call as a content
replacement.
"""

from __future__ import annotations

import builtins
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ..clients.http import build_path
from ..clients.multipart import MultipartForm, UploadFile
from ..exceptions import DecodeError, NotFoundError, ValidationError
from ..models.entities import Config, ConfigPayload, ConfigsPayload, ConfigUpdate
from ..models.keys import ConfigKey

if TYPE_CHECKING:
    from ..clients.http import HTTPClient


def _config_path(key: ConfigKey, *extra: str) -> str:
    return build_path("configs", *key.segments, *extra)


def _require_config(payload: ConfigPayload | None) -> Config:
    if payload is None or payload.config is None:
        raise DecodeError("decode response payload: missing 'config'")
    return payload.config


def _as_key(key: ConfigKey | str) -> ConfigKey:
    return key if isinstance(key, ConfigKey) else ConfigKey.parse(key)


def _trimmed(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class ConfigService:
    """Manage custom configuration snippets (global or per service)."""

    def __init__(self, client: HTTPClient):
        self._client = client

    # =========================================================================
    # Read Operations
    # =========================================================================

    def list(
        self,
        *,
        service: str | None = None,
        type: str | None = None,
        with_drafts: bool | None = None,
        with_data: bool | None = None,
    ) -> builtins.list[Config]:
        """
        List configs, optionally filtered.

        Args:
            service: Only configs of this service (blank means no filter)
            type: Only configs of this type (blank means no filter)
            with_drafts: Include configs of draft services
            with_data: Include the config contents
        """
        params = {
            "service": _trimmed(service),
            "type": _trimmed(type),
            "with_drafts": with_drafts,
            "with_data": with_data,
        }
        payload = self._client.get("configs", params=params, shape=ConfigsPayload)
        if payload is None:
            return []
        return payload.configs or []

    def get(self, key: ConfigKey | str, *, with_data: bool = False) -> Config:
        key = _as_key(key)
        params = {"with_data": True} if with_data else None
        payload = self._client.get(_config_path(key), params=params, shape=ConfigPayload)
        return _require_config(payload)

    def find(self, key: ConfigKey | str, *, with_data: bool = False) -> Config | None:
        """Like `get()`, but returns None when the config does not exist."""
        try:
            return self.get(key, with_data=with_data)
        except NotFoundError:
            return None

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, key: ConfigKey, data: str) -> Config:
        body: dict[str, Any] = {**key.to_payload(), "data": data}
        payload = self._client.post("configs", json=body, shape=ConfigPayload)
        return _require_config(payload)

    def update(
        self,
        key: ConfigKey | str,
        *,
        data: str | None = None,
        service: str | None = None,
        type: str | None = None,
        name: str | None = None,
    ) -> Config:
        """
        Patch a config in place.

        Only the given fields are sent. Passing `service`, `type` or `name`
        asks the control plane to relocate the config; the returned config
        carries the new key.
        """
        key = _as_key(key)
        update = ConfigUpdate(service=service, type=type, name=name, data=data)
        payload = self._client.patch(
            _config_path(key), json=update.to_payload(), shape=ConfigPayload
        )
        return _require_config(payload)

    def move(self, key: ConfigKey, new_key: ConfigKey, *, data: str | None = None) -> Config:
        """
        Relocate a config by deleting `key` and creating `new_key`.

        Without `data` the current contents are fetched first and carried over.
        Not atomic: if the create fails, the old config is already gone.
        """
        if data is None:
            data = self.get(key, with_data=True).data or ""
        if new_key == key:
            return self.update(key, data=data)
        self.delete(key)
        return self.create(new_key, data)

    def delete(self, key: ConfigKey | str, *, missing_ok: bool = False) -> None:
        key = _as_key(key)
        try:
            self._client.delete(_config_path(key))
        except NotFoundError:
            if not missing_ok:
                raise

    def delete_many(self, keys: Sequence[ConfigKey | str]) -> None:
        """Delete several configs in one batch call; at least one key is required."""
        if isinstance(keys, str):
            raise ValidationError("keys must be a sequence of config keys", field="configs")
        items = [_as_key(key).to_payload() for key in keys]
        if not items:
            raise ValidationError("At least one config key is required", field="configs")
        self._client.delete("configs", json={"configs": items})

    # =========================================================================
    # Uploads
    # =========================================================================

    def upload(
        self,
        type: str,
        files: Sequence[UploadFile],
        *,
        service: str | None = None,
    ) -> builtins.list[Config]:
        """
        Create configs from uploaded files, one config per file.

        Each file's name becomes the config name.
        """
        if not type.strip():
            raise ValidationError("type must be provided", field="type")
        if not files:
            raise ValidationError("At least one file is required", field="files")

        form = MultipartForm()
        form.add_optional_field("service", service)
        form.add_field("type", type.strip())
        for upload in files:
            form.add_file("files", upload)

        payload = self._client.post(
            "configs/upload", body=form.encode(), shape=ConfigsPayload
        )
        if payload is None:
            return []
        return payload.configs or []

    def upload_update(
        self,
        key: ConfigKey | str,
        file: UploadFile,
        *,
        new_service: str | None = None,
        new_type: str | None = None,
        new_name: str | None = None,
    ) -> Config:
        """
        Replace a config's contents from a file, optionally relocating it.

        Blank `new_*` values are not sent. When any is given the config ends up
        under the new key and the old key stops resolving.
        """
        key = _as_key(key)
        form = MultipartForm()
        form.add_file("file", file)
        form.add_optional_field("new_service", new_service)
        form.add_optional_field("new_type", new_type)
        form.add_optional_field("new_name", new_name)

        payload = self._client.patch(
            _config_path(key, "upload"), body=form.encode(), shape=ConfigPayload
        )
        return _require_config(payload)
