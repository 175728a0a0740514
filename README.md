# adminkit

Building blocks for the back end of an admin console:

- `adminkit.config`: the version string, the log queue topic names and the `Extend` settings block (`Extend.from_mapping`).
- `adminkit.dto`: request objects for paging (`Pagination`, `paginate`), ordering (`order_by`) and id binding (`ObjectById`, `ObjectGetReq`, `ObjectDeleteReq`, `GeneralDelDto`). Bad input raises `BindError`.
- `adminkit.autoform`: the form-designer description (`AutoForm`, `Field` and their parts) with `to_dict` / `from_dict`.
- `adminkit.models`: shared model pieces (`ControlBy`, `Model`, `ModelTime`, `Migration`, `MenuType`) and the reply envelopes `Response` and `Page`.
- `adminkit.service`: `Service` and `Api` objects that collect errors into a `MultiError` and build replies.
- `adminkit.clientip`: `get_client_ip`, picking the client address from the peer and the proxy headers.
- `adminkit.middleware`: a small `Request`/`Context` pair, `run_chain`, and middleware for no-cache headers, CORS preflight, security headers, `CustomError` replies, demo mode, request ids and role checks (`auth_check_role`, `is_casbin_excluded`, `key_match2`), plus a `ping` handler.
- `adminkit.permission`: row-level data scopes (`DataPermission`, `load_data_permission`, `permission_filter`).
- `adminkit.oplog`: operation-log records built from each request (`build_oper_log`, `logger_to_queue`).
- `adminkit.accounts`: log-in against the `sys_user` and `sys_role` tables (`Login.get_user`, raising `LoginError`).
- `adminkit.schema` and `adminkit.migration`: table definitions (`Table`, `Column`, `create_all`) and the versioned `Migrator`.

## Install

```
pip install adminkit
```

## Command line

Print the version:

```
adminkit version
```

Show the application, jwt, database, gen and logger sections of a YAML settings file as JSON (default file `config/settings.yml`):

```
adminkit config -c config/settings.yml
```

Create the tables, load the seed data and record the migration in the configured database:

```
adminkit migrate -c config/settings.yml
```

`-d/--domain` picks the database entry (default `*`). The settings are read from the `settings` section; databases come from `databases` (keyed by host) or a single `database` entry used for `*`:

```yaml
settings:
  database:
    driver: sqlite3
    source: admin.db
```

Seed data is read from `config/db.sql` under the working directory; if it is missing the tables are still created.

`adminkit migrate -g` fills `template/migrate.template` and writes the result under `migration/version_local/` (or `migration/version/` with `-a`).

## Paging and data scopes

```python
from adminkit.dto import Pagination, paginate
from adminkit.permission import DataPermission, permission_filter

page = Pagination.from_query({"pageIndex": "2", "pageSize": "20"})
window = paginate(page.page_size, page.page_index)   # window.offset == 20, window.limit == 20

scope = DataPermission(data_scope="5", user_id=7)
where = permission_filter("sys_post", scope, enabled=True)
# where.sql == "sys_post.create_by = ?", where.params == (7,)
```

## Middleware

Handlers take a `Context` and a function that runs the rest of the chain:

```python
from adminkit.middleware import Context, Request, run_chain, no_cache, options, secure, ping

ctx = run_chain(
    [no_cache, options, secure, lambda c, nxt: ping(c)],
    Context(request=Request(method="GET", path="/api/v1/health")),
)
# ctx.body == {"message": "ok"}
```

## Migrations

```python
import sqlite3
from adminkit.migration import default_migrator

conn = sqlite3.connect("admin.db")
default_migrator().migrate(conn)
```

A migration runs only when its version is not yet recorded in `sys_migration`.

## What it does not do

- There is no HTTP server and no route table: the middleware works on the package's own `Context` and is not bound to any web framework.
- The `migrate` command connects to SQLite only; other drivers in the settings file are rejected.
- JWT issuing and checking, captchas, caches, queues and job scheduling are not provided. `logger_to_queue` hands records to a callable you supply, and `auth_check_role` takes the policy check as a callable.