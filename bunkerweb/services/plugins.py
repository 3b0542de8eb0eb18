"""
Plugin listing, upload and removal.

An uploaded plugin's id is derived by the control plane from its file name.
"""

from __future__ import annotations

import builtins
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..clients.http import build_path
from ..clients.multipart import MultipartForm, UploadFile
from ..exceptions import NotFoundError, ValidationError
from ..models.entities import Plugin, PluginsPayload
from ..models.types import PluginType

if TYPE_CHECKING:
    from ..clients.http import HTTPClient


class PluginService:
    def __init__(self, client: HTTPClient):
        self._client = client

    def list(
        self,
        *,
        type: PluginType | str | None = None,
        with_data: bool = False,
    ) -> builtins.list[Plugin]:
        """
        List plugins.

        Args:
            type: Only plugins of this kind (all, core, external, ui, pro)
            with_data: Include plugin archive data
        """
        plugin_type = None
        if type is not None:
            plugin_type = type.value if isinstance(type, PluginType) else type.strip() or None
        params = {"type": plugin_type, "with_data": True if with_data else None}
        payload = self._client.get("plugins", params=params, shape=PluginsPayload)
        if payload is None:
            return []
        return payload.plugins or []

    def upload(
        self,
        files: Sequence[UploadFile],
        *,
        method: str | None = None,
    ) -> builtins.list[Plugin]:
        """Upload one or more plugin archives; `method` tags who installed them."""
        if not files:
            raise ValidationError("At least one file is required", field="files")

        form = MultipartForm()
        form.add_optional_field("method", method)
        for upload in files:
            form.add_file("files", upload)

        payload = self._client.post("plugins/upload", body=form.encode(), shape=PluginsPayload)
        if payload is None:
            return []
        return payload.plugins or []

    def delete(self, plugin_id: str, *, missing_ok: bool = False) -> None:
        if not plugin_id.strip():
            raise ValidationError("plugin id must be provided", field="plugin_id")
        try:
            self._client.delete(build_path("plugins", plugin_id.strip()))
        except NotFoundError:
            if not missing_ok:
                raise
