"""
Global configuration settings.

The global config is one flat mapping of setting name to value. Updates are
partial: the given keys are shallow-merged, and a key set to None is reset to
its default.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..exceptions import ValidationError

if TYPE_CHECKING:
    from ..clients.http import HTTPClient

_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)
_NON_FINITE = frozenset({"nan", "inf", "infinity"})

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def coerce_setting_value(text: str) -> Any:
    """
    Parse a setting value typed as text.

    "true"/"false" (any case) become bools, decimal integers that fit in 64
    bits become ints, other decimal literals become floats. Blank text becomes
    "" and anything else is returned unchanged. "nan" and "inf" have no JSON
    form and raise `ValidationError`.
    """
    value = text.strip()
    if not value:
        return ""
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered.lstrip("+-") in _NON_FINITE:
        raise ValidationError(f"Setting value {text!r} is not a finite number", field="value")

    if _INT_RE.fullmatch(value):
        number = int(value)
        if _INT64_MIN <= number <= _INT64_MAX:
            return number
    if _FLOAT_RE.fullmatch(value):
        parsed = float(value)
        # Out of range for a double: kept as text.
        if math.isfinite(parsed):
            return parsed
    return text


class GlobalConfigService:
    """Read and patch the control plane's global settings."""

    def __init__(self, client: HTTPClient):
        self._client = client

    def get(self, *, full: bool = False, methods: bool = False) -> dict[str, Any]:
        """
        Fetch the global settings.

        Args:
            full: Include settings still at their default value
            methods: Return each setting with the method that last set it
        """
        params = {"full": True if full else None, "methods": True if methods else None}
        data = self._client.get("global_config", params=params, shape=dict[str, Any])
        return data or {}

    def update(self, settings: Mapping[str, Any]) -> dict[str, Any]:
        """
        Patch global settings and return the resulting values.

        Keys mapped to None are reset. At least one key is required.
        """
        if not settings:
            raise ValidationError("At least one setting must be provided", field="settings")
        data = self._client.patch("global_config", json=dict(settings), shape=dict[str, Any])
        return data or {}

    # =========================================================================
    # Single-setting helpers
    # =========================================================================

    def get_setting(self, key: str) -> Any | None:
        """
        Current value of one setting; None when it is absent or null.

        Reads the full map, so settings still at their default are found too.
        """
        return self.get(full=True).get(key)

    def set_setting(self, key: str, value: Any) -> Any | None:
        """Set one setting; string values are coerced with `coerce_setting_value`."""
        if not key.strip():
            raise ValidationError("Setting key must be provided", field="key")
        if isinstance(value, str):
            value = coerce_setting_value(value)
        return self.update({key: value}).get(key)

    def reset_setting(self, key: str) -> None:
        if not key.strip():
            raise ValidationError("Setting key must be provided", field="key")
        self.update({key: None})
