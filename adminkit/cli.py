"""Command-line entry point: version, settings dump and database migration."""

from __future__ import annotations

import argparse
import json
import re
import sqlite3
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml

from .config import VERSION
from .migration import default_migrator

PROG = "adminkit"
DEFAULT_CONFIG = "config/settings.yml"
MIGRATE_TEMPLATE = "template/migrate.template"

_EXIT_FAILURE = 255
_SQLITE_DRIVERS = ("sqlite3", "sqlite")
_TEMPLATE_FIELD = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")


def _green(text: str) -> str:
    return f"\x1b[32m{text}\x1b[0m"


def _red(text: str) -> str:
    return f"\x1b[31m{text}\x1b[0m"


def load_settings(path: str) -> dict[str, Any]:
    """Read a YAML settings file and return its ``settings`` section."""
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"settings file {path!r} does not hold a mapping")
    settings = data.get("settings", data)
    if settings is None:
        settings = {}
    if not isinstance(settings, dict):
        raise ValueError(f"settings section in {path!r} is not a mapping")
    return settings


def tip() -> None:
    """Print the welcome line."""
    print(f"欢迎使用 {_green(f'{PROG} {VERSION}')} 可以使用 {_red('-h')} 查看命令")


def _databases(settings: dict[str, Any]) -> dict[str, Any]:
    databases = dict(settings.get("databases") or {})
    single = settings.get("database")
    if single:
        databases.setdefault("*", single)
    return databases


def _connect(host: str, database: Any) -> sqlite3.Connection:
    if not isinstance(database, dict):
        raise ValueError(f"database settings for {host!r} must be a mapping")
    driver = str(database.get("driver", ""))
    if driver not in _SQLITE_DRIVERS:
        raise ValueError(f"unsupported database driver: {driver!r}")
    source = database.get("source")
    if not source:
        raise ValueError(f"no database source configured for {host!r}")
    print(f"{host} => {_green(str(source))}")
    return sqlite3.connect(str(source))


def _run_version(args: argparse.Namespace) -> int:
    print(VERSION)
    return 0


def _run_config(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    sections = (
        ("application", settings.get("application")),
        ("jwt", settings.get("jwt")),
        ("database", _databases(settings)),
        ("gen", settings.get("gen")),
        ("logger", settings.get("logger")),
    )
    for label, value in sections:
        print(f"{label}:", json.dumps(value, indent=3, ensure_ascii=False, default=str))
    return 0


def _generate_migration(go_admin: bool) -> Path:
    template = Path(MIGRATE_TEMPLATE).read_text(encoding="utf-8")
    values = {
        "GenerateTime": str(time.time_ns() // 1_000_000),
        "Package": "version" if go_admin else "version_local",
    }
    text = _TEMPLATE_FIELD.sub(lambda m: values.get(m.group(1), "<no value>"), template)
    target = Path("migration") / values["Package"] / f"{values['GenerateTime']}_migrate.py"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    return target


def _run_migrate(args: argparse.Namespace) -> int:
    if args.generate:
        print("generate migration file")
        try:
            target = _generate_migration(args.go_admin)
        except OSError as exc:
            print(_red(str(exc)), file=sys.stderr)
        else:
            print(target)
        return 0

    print("start init")
    settings = load_settings(args.config)
    host = args.domain or "*"
    databases = _databases(settings)
    if host not in databases:
        raise ValueError(f"no database configured for {host!r}")
    conn = _connect(host, databases[host])
    try:
        print("数据库迁移开始")
        default_migrator().migrate(conn)
        conn.commit()
    finally:
        conn.close()
    print("数据库基础数据初始化成功")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description=PROG)
    commands = parser.add_subparsers(dest="command", required=True)

    version = commands.add_parser("version", help="Get version info")
    version.set_defaults(handler=_run_version)

    config = commands.add_parser("config", help="Get Application config info")
    config.add_argument("-c", "--config", default=DEFAULT_CONFIG,
                        help="settings file to read")
    config.set_defaults(handler=_run_config)

    migrate = commands.add_parser("migrate", help="Initialize the database")
    migrate.add_argument("-c", "--config", default=DEFAULT_CONFIG,
                         help="settings file to read")
    migrate.add_argument("-g", "--generate", action="store_true",
                         help="generate migration file")
    migrate.add_argument("-a", "--goAdmin", dest="go_admin", action="store_true",
                         help="generate a built-in migration file")
    migrate.add_argument("-d", "--domain", default="*", help="select tenant host")
    migrate.set_defaults(handler=_run_migrate)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    arguments = sys.argv[1:] if argv is None else list(argv)
    if not arguments:
        tip()
        print(_red("requires at least one arg"), file=sys.stderr)
        return _EXIT_FAILURE
    parser = _build_parser()
    try:
        args = parser.parse_args(arguments)
    except SystemExit as exc:
        return 0 if exc.code in (0, None) else _EXIT_FAILURE
    try:
        return args.handler(args)
    except (OSError, ValueError, yaml.YAMLError, sqlite3.Error) as exc:
        print(_red(str(exc)), file=sys.stderr)
        return _EXIT_FAILURE