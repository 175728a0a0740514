"""Data-scope permissions: which rows a user may see and change."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

PERMISSION_KEY = "dataPermission"

_USER_QUERY = (
    "SELECT sys_user.user_id, sys_role.role_id, sys_user.dept_id, sys_role.data_scope "
    "FROM sys_user LEFT JOIN sys_role ON sys_role.role_id = sys_user.role_id "
    "WHERE sys_user.user_id = ?"
)


@dataclass
class DataPermission:
    """Data scope of a user's role, with the ids it is measured against."""

    data_scope: str = ""
    user_id: int = 0
    dept_id: int = 0
    role_id: int = 0


class Condition(NamedTuple):
    """A WHERE clause with its parameters."""

    sql: str
    params: tuple[Any, ...]


def load_data_permission(conn: Any, user_id: Any) -> DataPermission:
    """Read a user's data scope; an unknown user gets an empty permission."""
    try:
        row = conn.execute(_USER_QUERY, (user_id,)).fetchone()
    except Exception as exc:
        raise RuntimeError("获取用户数据出错 msg:" + str(exc)) from exc
    if row is None:
        return DataPermission()
    uid, role_id, dept_id, data_scope = row
    return DataPermission(
        data_scope="" if data_scope is None else str(data_scope),
        user_id=uid or 0,
        dept_id=dept_id or 0,
        role_id=role_id or 0,
    )


def permission_filter(
    table_name: str, permission: DataPermission, enabled: bool
) -> Condition | None:
    """Condition limiting rows of ``table_name`` to the permission's scope.

    Returns ``None`` when data permissions are off or the scope allows all rows.
    """
    if not enabled:
        return None
    scope = permission.data_scope
    if scope == "2":
        return Condition(
            f"{table_name}.create_by in (select sys_user.user_id from sys_role_dept "
            "left join sys_user on sys_user.dept_id=sys_role_dept.dept_id "
            "where sys_role_dept.role_id = ?)",
            (permission.role_id,),
        )
    if scope == "3":
        return Condition(
            f"{table_name}.create_by in (SELECT user_id from sys_user where dept_id = ? )",
            (permission.dept_id,),
        )
    if scope == "4":
        return Condition(
            f"{table_name}.create_by in (SELECT user_id from sys_user where "
            "sys_user.dept_id in(select dept_id from sys_dept where dept_path like ? ))",
            (f"%/{permission.dept_id}/%",),
        )
    if scope == "5":
        return Condition(f"{table_name}.create_by = ?", (permission.user_id,))
    return None


def permission_from_context(values: Mapping[str, Any]) -> DataPermission:
    """The permission stored for a request, or an empty one."""
    found = values.get(PERMISSION_KEY)
    return found if isinstance(found, DataPermission) else DataPermission()