"""Building blocks for an admin back end: DTOs, middleware, data permissions, operation logs and SQLite migrations."""

__version__ = "2.0.6"

__all__ = [
    "accounts",
    "autoform",
    "cli",
    "clientip",
    "config",
    "dto",
    "middleware",
    "migration",
    "models",
    "oplog",
    "permission",
    "schema",
    "service",
]