"""Request objects for paging, id lookups and deletions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple


class BindError(ValueError):
    """Raised when request data cannot be bound to a request object."""


def _to_int(value: Any, name: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise BindError(f"invalid {name}: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise BindError(f"invalid {name}: {value!r}") from exc


def _int_list(value: Any, name: str) -> list[int]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise BindError(f"invalid {name}: {value!r}")
    result = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            raise BindError(f"invalid {name}: {value!r}")
        result.append(item)
    return result


class Window(NamedTuple):
    """Offset and limit of one page of rows."""

    offset: int
    limit: int


def paginate(page_size: int, page_index: int) -> Window:
    """Return the row window for a page, never with a negative offset."""
    offset = max((page_index - 1) * page_size, 0)
    return Window(offset=offset, limit=page_size)


def order_by(column: str, desc: bool) -> str:
    """Return an ORDER BY term for a quoted column name."""
    quoted = '"' + column.replace('"', '""') + '"'
    return f"{quoted} DESC" if desc else quoted


@dataclass
class Pagination:
    """Page index and size; non-positive values fall back to 1 and 10."""

    page_index: int = 0
    page_size: int = 0

    def __post_init__(self) -> None:
        if self.page_index <= 0:
            self.page_index = 1
        if self.page_size <= 0:
            self.page_size = 10

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "Pagination":
        """Read ``pageIndex`` and ``pageSize`` from query parameters."""
        return cls(
            page_index=_to_int(query.get("pageIndex"), "pageIndex"),
            page_size=_to_int(query.get("pageSize"), "pageSize"),
        )

    def offset(self) -> int:
        """Number of rows before this page."""
        return paginate(self.page_size, self.page_index).offset


@dataclass
class GeneralDelDto:
    """Single id or list of ids to delete."""

    id: int = 0
    ids: list[int] = field(default_factory=list)

    def get_ids(self) -> list[int]:
        """Ids to delete; ``[0]`` when none are given, so nothing matches."""
        ids = []
        if self.id != 0:
            ids.append(self.id)
        if self.ids:
            ids.extend(i for i in self.ids if i > 0)
        elif self.id > 0:
            ids.append(self.id)
        return ids or [0]


@dataclass
class ObjectById:
    """Id from the path, plus a list of ids in the body for deletions."""

    id: int = 0
    ids: list[int] = field(default_factory=list)

    def bind(
        self,
        method: str,
        uri_params: Mapping[str, Any],
        body: Mapping[str, Any] | None = None,
    ) -> "ObjectById":
        self.id = _to_int(uri_params.get("id"), "id")
        if method.upper() == "DELETE":
            self.ids = _int_list((body or {}).get("ids"), "ids")
            if not self.ids and self.id != 0:
                self.ids.append(self.id)
        return self

    def get_id(self) -> int | list[int]:
        if self.ids:
            return [*self.ids, self.id]
        return self.id


@dataclass
class ObjectGetReq:
    """Id taken from the path."""

    id: int = 0

    def bind(self, uri_params: Mapping[str, Any]) -> "ObjectGetReq":
        self.id = _to_int(uri_params.get("id"), "id")
        return self

    def get_id(self) -> int:
        return self.id


@dataclass
class ObjectDeleteReq:
    """List of ids taken from the body."""

    ids: list[int] = field(default_factory=list)

    def bind(self, body: Mapping[str, Any] | None) -> "ObjectDeleteReq":
        self.ids = _int_list((body or {}).get("ids"), "ids")
        return self

    def get_id(self) -> list[int]:
        return self.ids