"""Users, roles and password log-in against the account tables."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, TypeVar

import bcrypt

_LOG = logging.getLogger("adminkit")

T = TypeVar("T")


class LoginError(Exception):
    """Raised when a user cannot be logged in."""


def _from_row(cls: type[T], row: Mapping[str, Any]) -> T:
    names = {f.name for f in fields(cls) if f.init}
    return cls(**{k: v for k, v in row.items() if k in names})


def _fetch_one(conn: Any, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
    cursor = conn.execute(sql, params)
    row = cursor.fetchone()
    if row is None:
        return None
    columns = [d[0] for d in cursor.description]
    return dict(zip(columns, row))


@dataclass
class SysRole:
    """A role and the data scope it grants."""

    table_name = "sys_role"

    role_id: int = 0
    role_name: str = ""
    status: str = ""
    role_key: str = ""
    role_sort: int = 0
    flag: str = ""
    remark: str = ""
    admin: bool = False
    data_scope: str = ""
    params: str = ""
    menu_ids: list[int] = field(default_factory=list)
    dept_ids: list[int] = field(default_factory=list)
    create_by: int = 0
    update_by: int = 0
    created_at: datetime | str | None = None
    updated_at: datetime | str | None = None
    deleted_at: datetime | str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SysRole":
        role = _from_row(cls, row)
        role.admin = bool(role.admin)
        return role


@dataclass
class SysUser:
    """A user account; the id lists mirror the single ids after loading."""

    table_name = "sys_user"

    user_id: int = 0
    username: str = ""
    password: str = field(default="", repr=False)
    nick_name: str = ""
    phone: str = ""
    role_id: int = 0
    salt: str = field(default="", repr=False)
    avatar: str = ""
    sex: str = ""
    email: str = ""
    dept_id: int = 0
    post_id: int = 0
    remark: str = ""
    status: str = ""
    dept_ids: list[int] = field(default_factory=list)
    post_ids: list[int] = field(default_factory=list)
    role_ids: list[int] = field(default_factory=list)
    create_by: int = 0
    update_by: int = 0
    created_at: datetime | str | None = None
    updated_at: datetime | str | None = None
    deleted_at: datetime | str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SysUser":
        user = _from_row(cls, row)
        user.dept_ids = [user.dept_id]
        user.post_ids = [user.post_id]
        user.role_ids = [user.role_id]
        return user


@dataclass
class Login:
    """Credentials and captcha answer sent by a log-in form."""

    username: str = ""
    password: str = field(default="", repr=False)
    code: str = ""
    uuid: str = ""

    def get_user(self, conn: Any) -> tuple[SysUser, SysRole]:
        """Find the active user, check the password and load the role.

        Raises :class:`LoginError` when the user is missing or disabled, the
        password is wrong or the role cannot be found.
        """
        row = _fetch_one(
            conn,
            "SELECT * FROM sys_user WHERE username = ? and status = 2 "
            "AND deleted_at IS NULL ORDER BY user_id LIMIT 1",
            (self.username,),
        )
        if row is None:
            _LOG.error("get user error, record not found")
            raise LoginError("record not found")
        user = SysUser.from_row(row)

        try:
            matches = bcrypt.checkpw(self.password.encode(), user.password.encode())
        except ValueError as exc:
            _LOG.error("user login error, %s", exc)
            raise LoginError(str(exc)) from exc
        if not matches:
            _LOG.error("user login error, password mismatch")
            raise LoginError("hashedPassword is not the hash of the given password")

        role_row = _fetch_one(
            conn,
            "SELECT * FROM sys_role WHERE role_id = ? "
            "AND deleted_at IS NULL ORDER BY role_id LIMIT 1",
            (user.role_id,),
        )
        if role_row is None:
            _LOG.error("get role error, record not found")
            raise LoginError("record not found")
        return user, SysRole.from_row(role_row)