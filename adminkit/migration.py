"""Versioned schema migrations and loading of seed SQL scripts."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import Migration
from .schema import create_all

_LOG = logging.getLogger("adminkit")

MigrationFunc = Callable[[Any, str], None]

INITIAL_VERSION = 1599190683659

_VERSION_DIGITS = 13

_MIGRATION_TABLE_SQL = (
    f'CREATE TABLE IF NOT EXISTS "{Migration.table_name}" '
    '("version" varchar(191) PRIMARY KEY, "apply_time" datetime)'
)


def version_from_filename(path: str | os.PathLike[str]) -> int:
    """Read the millisecond timestamp that starts a migration file's name."""
    name = Path(path).name
    head = name[:_VERSION_DIGITS]
    if len(head) < _VERSION_DIGITS or not (head.isascii() and head.isdigit()):
        raise ValueError(f"migration file name does not start with a version: {name!r}")
    return int(head)


class Migrator:
    """Registry of migrations, applied in version order and recorded once."""

    def __init__(self) -> None:
        self._versions: dict[int, MigrationFunc] = {}
        self._lock = threading.Lock()

    @property
    def versions(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(sorted(self._versions))

    def register(self, version: int, func: MigrationFunc) -> None:
        """Add a migration; a later registration of a version replaces it."""
        with self._lock:
            self._versions[version] = func

    def migrate(self, conn: Any) -> list[int]:
        """Apply every migration not yet recorded; return the versions applied.

        Each migration is called with the connection and its version as text
        and is responsible for recording itself in the migration table.
        """
        conn.execute(_MIGRATION_TABLE_SQL)
        with self._lock:
            pending = sorted(self._versions.items())
        applied: list[int] = []
        for version, func in pending:
            (count,) = conn.execute(
                f'SELECT count(*) FROM "{Migration.table_name}" WHERE version = ?',
                (str(version),),
            ).fetchone()
            if count > 0:
                _LOG.info("migration %s already applied (%s)", version, count)
                continue
            func(conn, str(version))
            applied.append(version)
        return applied


def read_sql(path: str | os.PathLike[str]) -> str:
    """Read a SQL script, dropping its first line break."""
    try:
        contents = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        _LOG.error("数据库基础数据初始化脚本读取失败！原因: %s", exc)
        raise
    return contents.replace("\n", "", 1)


def split_sql(text: str) -> list[str]:
    """Split a script on ``;`` into statements.

    Text after the last ``;`` is dropped, pieces holding ``--`` are skipped
    whole, and empty statements are left out.
    """
    statements: list[str] = []
    for piece in text.split(";")[:-1]:
        if "--" in piece:
            _LOG.info("%s", piece)
            continue
        statement = (piece + ";").strip()
        if statement != ";":
            statements.append(statement)
    return statements


def exec_sql(conn: Any, path: str | os.PathLike[str]) -> None:
    """Run every statement of a SQL script, stopping at the first failure."""
    for statement in split_sql(read_sql(path)):
        try:
            conn.execute(statement)
        except Exception as exc:
            _LOG.error("error sql: %s", statement)
            if "Query was empty" not in str(exc):
                raise


def init_db(conn: Any, driver: str, base_dir: str | os.PathLike[str]) -> None:
    """Load ``config/db.sql`` and, for PostgreSQL, ``config/pg.sql`` too.

    For PostgreSQL the outcome of the second script decides whether an
    error is raised.
    """
    config_dir = Path(base_dir) / "config"
    error: BaseException | None = None
    try:
        exec_sql(conn, config_dir / "db.sql")
    except Exception as exc:
        error = exc
    if driver == "postgres":
        try:
            exec_sql(conn, config_dir / "pg.sql")
            error = None
        except Exception as exc:
            error = exc
    if error is not None:
        raise error


def initial_tables(conn: Any, version: str) -> None:
    """Create the admin tables, load seed data and record the migration.

    Seed data comes from ``config/db.sql`` under the working directory; a
    missing or failing script is logged and does not stop the migration.
    """
    try:
        conn.execute(_MIGRATION_TABLE_SQL)
        create_all(conn)
        try:
            init_db(conn, "sqlite3", ".")
        except Exception as exc:
            _LOG.warning("seed data not loaded: %s", exc)
        conn.execute(
            f'INSERT INTO "{Migration.table_name}" (version, apply_time) VALUES (?, ?)',
            (version, datetime.now().isoformat(sep=" ")),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def default_migrator() -> Migrator:
    """A migrator holding the built-in migrations."""
    migrator = Migrator()
    migrator.register(INITIAL_VERSION, initial_tables)
    return migrator