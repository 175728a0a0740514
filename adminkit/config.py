"""Application-wide constants and the extension settings block."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

VERSION = "2.0.6"

LOGIN_LOG = "login_log_queue"
OPERATE_LOG = "operate_log_queue"
API_CHECK = "api_check_queue"


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Find a key case-insensitively, as settings files are loaded."""
    for key, value in data.items():
        if str(key).lower() == name:
            return value
    return None


@dataclass
class AMap:
    """Settings for the map service used to locate client addresses."""

    key: str = ""


@dataclass
class Extend:
    """Extra settings read from the ``extend`` section of the settings file."""

    amap: AMap = field(default_factory=AMap)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "Extend":
        """Build the settings from a parsed ``extend`` mapping."""
        data = data or {}
        if not isinstance(data, Mapping):
            raise TypeError("extend settings must be a mapping")
        amap = _lookup(data, "amap") or {}
        if not isinstance(amap, Mapping):
            raise TypeError("amap settings must be a mapping")
        key = _lookup(amap, "key")
        return cls(amap=AMap(key="" if key is None else str(key)))