"""Shared model parts, menu kinds and response envelopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


@dataclass
class ControlBy:
    """Ids of the users who created and last updated a row."""

    create_by: int = 0
    update_by: int = 0


@dataclass
class Model:
    """Auto-increment primary key."""

    id: int = 0


@dataclass
class ModelTime:
    """Creation, update and soft-deletion times."""

    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


class MenuType(str, Enum):
    """Kinds of menu entry."""

    DIRECTORY = "M"
    MENU = "C"
    BUTTON = "F"


@dataclass
class Migration:
    """A record of an applied schema migration."""

    table_name: ClassVar[str] = "sys_migration"

    version: str
    apply_time: datetime = field(default_factory=datetime.now)


@dataclass
class Response:
    """Standard JSON reply envelope."""

    code: int = 0
    data: Any = None
    msg: str = ""
    request_id: str = ""

    def return_ok(self) -> "Response":
        self.code = 200
        return self

    def return_error(self, code: int) -> "Response":
        self.code = code
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "data": self.data,
            "msg": self.msg,
            "requestId": self.request_id,
        }


@dataclass
class Page:
    """One page of a listing with its total count."""

    list: Any = None
    count: int = 0
    page_index: int = 0
    page_size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "list": self.list,
            "count": self.count,
            "pageIndex": self.page_index,
            "pageSize": self.page_size,
        }