"""Table definitions for the admin database and the SQL that creates them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import bcrypt

_BCRYPT_COST = 10


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class Column:
    """One column of a table."""

    name: str
    type: str
    primary_key: bool = False
    autoincrement: bool = False
    default: str | None = None
    index: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("column name must not be empty")
        if self.autoincrement and not self.primary_key:
            raise ValueError(f"column {self.name!r}: autoincrement needs a primary key")

    def definition(self, single_key: bool) -> str:
        """The column as written inside CREATE TABLE."""
        if self.autoincrement:
            return f"{_quote(self.name)} integer PRIMARY KEY AUTOINCREMENT"
        parts = [_quote(self.name), self.type]
        if self.primary_key and single_key:
            parts.append("PRIMARY KEY")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


@dataclass(frozen=True)
class Table:
    """A table with its columns, in the order they are created."""

    name: str
    columns: tuple[Column, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("table name must not be empty")
        object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise ValueError(f"table {self.name!r} has no columns")
        names = [c.name for c in self.columns]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"table {self.name!r} repeats columns: {', '.join(duplicates)}")
        keys = self.primary_key
        if len(keys) > 1 and any(c.autoincrement for c in self.columns):
            raise ValueError(f"table {self.name!r}: autoincrement with a composite key")

    @property
    def primary_key(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns if c.primary_key)

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def create_sql(self) -> list[str]:
        """Statements creating the table and its indexes, if they are missing."""
        keys = self.primary_key
        single = len(keys) == 1
        lines = [c.definition(single) for c in self.columns]
        if len(keys) > 1:
            lines.append("PRIMARY KEY (" + ", ".join(_quote(k) for k in keys) + ")")
        statements = [
            f"CREATE TABLE IF NOT EXISTS {_quote(self.name)} (" + ", ".join(lines) + ")"
        ]
        for column in self.columns:
            if column.index:
                index = f"idx_{self.name}_{column.name}"
                statements.append(
                    f"CREATE INDEX IF NOT EXISTS {_quote(index)} "
                    f"ON {_quote(self.name)} ({_quote(column.name)})"
                )
        return statements


def _id(name: str) -> Column:
    return Column(name, "integer", primary_key=True, autoincrement=True)


def _int(name: str, kind: str = "integer") -> Column:
    return Column(name, kind)


def _str(name: str, size: int | None = None) -> Column:
    return Column(name, f"varchar({size})" if size else "text")


def _bool(name: str, default: str | None = None) -> Column:
    return Column(name, "boolean", default=default)


def _time(name: str, kind: str = "datetime") -> Column:
    return Column(name, kind)


def _key(name: str) -> Column:
    return Column(name, "integer", primary_key=True)


CONTROL_BY: tuple[Column, ...] = (
    Column("create_by", "integer", index=True),
    Column("update_by", "integer", index=True),
)

MODEL_TIME: tuple[Column, ...] = (
    _time("created_at"),
    _time("updated_at"),
    Column("deleted_at", "datetime", index=True),
)

BASE_MODEL: tuple[Column, ...] = (
    _time("created_at"),
    _time("updated_at"),
    _time("deleted_at"),
)


CASBIN_RULE = Table("sys_casbin_rule", (
    _str("p_type", 100),
    *(_str(f"v{i}", 100) for i in range(6)),
))

SYS_DEPT = Table("sys_dept", (
    _id("dept_id"),
    _int("parent_id"),
    _str("dept_path", 255),
    _str("dept_name", 128),
    _int("sort"),
    _str("leader", 128),
    _str("phone", 11),
    _str("email", 64),
    _int("status"),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_CONFIG = Table("sys_config", (
    _id("id"),
    _str("config_name", 128),
    _str("config_key", 128),
    _str("config_value", 255),
    _str("config_type", 64),
    _str("is_frontend", 64),
    _str("remark", 128),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_TABLES = Table("sys_tables", (
    _id("table_id"),
    *(_str(name, 255) for name in (
        "table_name", "table_comment", "class_name", "tpl_category",
        "package_name", "module_name", "module_front_name", "business_name",
        "function_name", "function_author", "pk_column", "pk_go_field",
        "pk_json_field", "options", "tree_code", "tree_parent_code", "tree_name",
    )),
    _bool("tree", "0"),
    _bool("crud", "1"),
    _str("remark", 255),
    _int("is_data_scope"),
    _int("is_actions"),
    _int("is_auth"),
    _str("is_logical_delete", 1),
    _bool("logical_delete"),
    _str("logical_delete_column", 128),
    *MODEL_TIME,
    *CONTROL_BY,
))

SYS_COLUMNS = Table("sys_columns", (
    _id("column_id"),
    _int("table_id"),
    *(_str(name, 128) for name in (
        "column_name", "column_comment", "column_type", "go_type", "go_field", "json_field",
    )),
    *(_str(name, 4) for name in (
        "is_pk", "is_increment", "is_required", "is_insert", "is_edit", "is_list", "is_query",
    )),
    _str("query_type", 128),
    _str("html_type", 128),
    _str("dict_type", 128),
    _int("sort"),
    _str("list", 1),
    *(_bool(name) for name in (
        "pk", "required", "super_column", "usable_column",
        "increment", "insert", "edit", "query",
    )),
    _str("remark", 255),
    _str("fk_table_name"),
    _str("fk_table_name_class"),
    _str("fk_table_name_package"),
    _str("fk_label_id"),
    _str("fk_label_name", 255),
    *MODEL_TIME,
    *CONTROL_BY,
))

SYS_MENU = Table("sys_menu", (
    _id("menu_id"),
    _str("menu_name", 128),
    _str("title", 128),
    _str("icon", 128),
    _str("path", 128),
    _str("paths", 128),
    _str("menu_type", 1),
    _str("action", 16),
    _str("permission", 255),
    _int("parent_id"),
    _bool("no_cache"),
    _str("breadcrumb", 255),
    _str("component", 255),
    _int("sort"),
    _str("visible", 1),
    Column("is_frame", "varchar(1)", default="'0'"),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_LOGIN_LOG = Table("sys_login_log", (
    _id("id"),
    _str("username", 128),
    _str("status", 4),
    _str("ipaddr", 255),
    _str("login_location", 255),
    _str("browser", 255),
    _str("os", 255),
    _str("platform", 255),
    _time("login_time", "timestamp"),
    _str("remark", 255),
    _str("msg", 255),
    _time("created_at"),
    _time("updated_at"),
    *CONTROL_BY,
))

SYS_OPERA_LOG = Table("sys_opera_log", (
    _id("id"),
    _str("title", 255),
    _str("business_type", 128),
    _str("business_types", 128),
    _str("method", 128),
    _str("request_method", 128),
    _str("operator_type", 128),
    _str("oper_name", 128),
    _str("dept_name", 128),
    _str("oper_url", 255),
    _str("oper_ip", 128),
    _str("oper_location", 128),
    _str("oper_param", 255),
    _str("status", 4),
    _time("oper_time", "timestamp"),
    _str("json_result", 255),
    _str("remark", 255),
    _str("latency_time", 128),
    _str("user_agent", 255),
    _time("created_at"),
    _time("updated_at"),
    *CONTROL_BY,
))

SYS_ROLE_DEPT = Table("sys_role_dept", (_key("role_id"), _key("dept_id")))

SYS_USER = Table("sys_user", (
    _id("user_id"),
    _str("username", 64),
    _str("password", 128),
    _str("nick_name", 128),
    _str("phone", 11),
    _int("role_id", "bigint(20)"),
    _str("salt", 255),
    _str("avatar", 255),
    _str("sex", 255),
    _str("email", 128),
    _int("dept_id", "bigint(20)"),
    _int("post_id", "bigint(20)"),
    _str("remark", 255),
    _str("status", 4),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_ROLE = Table("sys_role", (
    _id("role_id"),
    _str("role_name", 128),
    _str("status", 4),
    _str("role_key", 128),
    _int("role_sort"),
    _str("flag", 128),
    _str("remark", 255),
    _bool("admin"),
    _str("data_scope", 128),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_POST = Table("sys_post", (
    _id("post_id"),
    _str("post_name", 128),
    _str("post_code", 128),
    _int("sort"),
    _int("status"),
    _str("remark", 255),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_DICT_DATA = Table("sys_dict_data", (
    _id("dict_code"),
    _int("dict_sort"),
    _str("dict_label", 128),
    _str("dict_value", 255),
    _str("dict_type", 64),
    _str("css_class", 128),
    _str("list_class", 128),
    _str("is_default", 8),
    _int("status"),
    _str("default", 8),
    _str("remark", 255),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_DICT_TYPE = Table("sys_dict_type", (
    _id("dict_id"),
    _str("dict_name", 128),
    _str("dict_type", 128),
    _int("status"),
    _str("remark", 255),
    *CONTROL_BY,
    *MODEL_TIME,
))

SYS_JOB = Table("sys_job", (
    _id("job_id"),
    _str("job_name", 255),
    _str("job_group", 255),
    _int("job_type"),
    _str("cron_expression", 255),
    _str("invoke_target", 255),
    _str("args", 255),
    _int("misfire_policy"),
    _int("concurrent"),
    _int("status"),
    _int("entry_id"),
    *MODEL_TIME,
    *CONTROL_BY,
))

SYS_API = Table("sys_api", (
    _id("id"),
    _str("handle", 128),
    _str("title", 128),
    _str("path", 128),
    _str("type", 16),
    _str("action", 16),
    *MODEL_TIME,
    *CONTROL_BY,
))

TB_DEMO = Table("tb_demo", (
    _id("id"),
    _str("name", 128),
    *MODEL_TIME,
    *CONTROL_BY,
))

SYS_MENU_API_RULE = Table("sys_menu_api_rule", (_key("sys_menu_menu_id"), _key("sys_api_id")))

SYS_ROLE_MENU = Table("sys_role_menu", (_key("role_id"), _key("menu_id")))

ALL_TABLES: tuple[Table, ...] = (
    CASBIN_RULE,
    SYS_DEPT,
    SYS_CONFIG,
    SYS_TABLES,
    SYS_COLUMNS,
    SYS_MENU,
    SYS_LOGIN_LOG,
    SYS_OPERA_LOG,
    SYS_ROLE_DEPT,
    SYS_USER,
    SYS_ROLE,
    SYS_POST,
    SYS_DICT_DATA,
    SYS_DICT_TYPE,
    SYS_JOB,
    SYS_API,
    TB_DEMO,
    SYS_MENU_API_RULE,
    SYS_ROLE_MENU,
)


def create_all(conn: Any, tables: Iterable[Table] | None = None) -> list[str]:
    """Create every missing table and index; return the table names in order.

    A table listed twice is created once.
    """
    created: list[str] = []
    for table in ALL_TABLES if tables is None else tables:
        if table.name in created:
            continue
        for statement in table.create_sql():
            conn.execute(statement)
        created.append(table.name)
    return created


def encrypt_password(password: str) -> str:
    """Hash a password with bcrypt; an empty password stays empty."""
    if not password:
        return ""
    hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=_BCRYPT_COST))
    return hashed.decode()