"""Request context, handler chain and the common HTTP middleware."""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from email.utils import formatdate
from typing import Any

from .clientip import get_client_ip
from .models import Response

_LOG = logging.getLogger("adminkit")

JWT_TOKEN_CHECK = "JwtToken"
ROLE_CHECK = "AuthCheckRole"
PERMISSION_CHECK = "PermissionAction"

JWT_PAYLOAD_KEY = "JWT_PAYLOAD"
LOGGER_KEY = "logger"

Next = Callable[[], None]


def _find_header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or ""
    return ""


@dataclass
class Request:
    """The parts of an HTTP request the middleware looks at."""

    method: str = "GET"
    path: str = "/"
    uri: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    host: str = ""
    tls: bool = False
    remote_ip: str = "127.0.0.1"
    client_ip: str | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.uri is None:
            self.uri = self.path
        if self.client_ip is None:
            self.client_ip = self.remote_ip


@dataclass
class Context:
    """State of one request as it passes through the handler chain."""

    request: Request = field(default_factory=Request)
    values: dict[str, Any] = field(default_factory=dict)
    response_headers: dict[str, str] = field(default_factory=dict)
    status: int = 200
    body: Any = None
    aborted: bool = False

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def json(self, status: int, payload: Any) -> None:
        self.status = status
        self.body = payload

    def abort(self) -> None:
        """Stop the handlers that have not run yet."""
        self.aborted = True

    def abort_with_status(self, status: int) -> None:
        self.status = status
        self.abort()


class CustomError(Exception):
    """Raised with a ``CustomError#<code>#<message>`` text to reply with that code."""


@dataclass(frozen=True)
class UrlInfo:
    url: str
    method: str


CASBIN_EXCLUDE: tuple[UrlInfo, ...] = tuple(
    UrlInfo(url, method)
    for url, method in (
        ("/api/v1/dict/type-option-select", "GET"),
        ("/api/v1/dict-data/option-select", "GET"),
        ("/api/v1/deptTree", "GET"),
        ("/api/v1/db/tables/page", "GET"),
        ("/api/v1/db/columns/page", "GET"),
        ("/api/v1/gen/toproject/:tableId", "GET"),
        ("/api/v1/gen/todb/:tableId", "GET"),
        ("/api/v1/gen/tabletree", "GET"),
        ("/api/v1/gen/preview/:tableId", "GET"),
        ("/api/v1/gen/apitofile/:tableId", "GET"),
        ("/api/v1/getCaptcha", "GET"),
        ("/api/v1/getinfo", "GET"),
        ("/api/v1/menuTreeselect", "GET"),
        ("/api/v1/menurole", "GET"),
        ("/api/v1/menuids", "GET"),
        ("/api/v1/roleMenuTreeselect/:roleId", "GET"),
        ("/api/v1/roleDeptTreeselect/:roleId", "GET"),
        ("/api/v1/refresh_token", "GET"),
        ("/api/v1/configKey/:configKey", "GET"),
        ("/api/v1/app-config", "GET"),
        ("/api/v1/user/profile", "GET"),
        ("/info", "GET"),
        ("/api/v1/login", "POST"),
        ("/api/v1/logout", "POST"),
        ("/api/v1/user/avatar", "POST"),
        ("/api/v1/user/pwd", "PUT"),
        ("/api/v1/metrics", "GET"),
        ("/api/v1/health", "GET"),
        ("/", "GET"),
        ("/api/v1/server-monitor", "GET"),
        ("/api/v1/public/uploadFile", "POST"),
    )
)


def run_chain(
    handlers: Iterable[Callable[[Context, Next], None]], ctx: Context
) -> Context:
    """Run handlers in order; each takes the context and a call for the rest.

    A handler that returns without calling the rest lets the chain go on;
    only an abort stops it.
    """
    pending = list(handlers)
    position = 0

    def call_next() -> None:
        nonlocal position
        while position < len(pending) and not ctx.aborted:
            handler = pending[position]
            position += 1
            handler(ctx, call_next)

    call_next()
    return ctx


def _error_reply(ctx: Context, code: int, err: BaseException | None, msg: str) -> None:
    text = msg or (str(err) if err is not None else "")
    response = Response(msg=text).return_error(code)
    response.request_id = ctx.get(LOGGER_KEY + ":request_id", "")
    payload = response.to_dict()
    ctx.set("result", payload)
    ctx.set("status", code)
    ctx.json(200, payload)
    ctx.abort()


def no_cache(ctx: Context, call_next: Next) -> None:
    """Add headers that keep clients from caching the reply."""
    headers = ctx.response_headers
    headers["Cache-Control"] = "no-cache, no-store, max-age=0, must-revalidate, value"
    headers["Expires"] = "Thu, 01 Jan 1970 00:00:00 GMT"
    headers["Last-Modified"] = formatdate(usegmt=True)
    call_next()


def options(ctx: Context, call_next: Next) -> None:
    """Answer OPTIONS requests with CORS headers and stop the chain."""
    if ctx.request.method != "OPTIONS":
        call_next()
        return
    headers = ctx.response_headers
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    headers["Access-Control-Allow-Headers"] = "authorization, origin, content-type, accept"
    headers["Allow"] = "HEAD,GET,POST,PUT,PATCH,DELETE,OPTIONS"
    headers["Content-Type"] = "application/json"
    ctx.abort_with_status(200)


def secure(ctx: Context, call_next: Next) -> None:
    """Add security and resource-access headers."""
    headers = ctx.response_headers
    headers["Access-Control-Allow-Origin"] = "*"
    headers["X-Content-Type-Options"] = "nosniff"
    headers["X-XSS-Protection"] = "1; mode=block"
    if ctx.request.tls:
        headers["Strict-Transport-Security"] = "max-age=31536000"


def parse_custom_error(message: str) -> tuple[int, str] | None:
    """Split ``CustomError#<code>#<message>``; ``None`` if it is not one."""
    parts = message.split("#")
    if len(parts) != 3 or parts[0] != "CustomError":
        return None
    try:
        code = int(parts[1])
    except ValueError:
        return None
    return code, parts[2]


def custom_error(ctx: Context, call_next: Next) -> None:
    """Turn a raised :class:`CustomError` into a JSON reply."""
    try:
        call_next()
    except CustomError as exc:
        if ctx.aborted:
            ctx.status = 200
        parsed = parse_custom_error(str(exc))
        if parsed is None:
            return
        code, msg = parsed
        ctx.status = code
        req = ctx.request
        _LOG.error(
            "%s [ERROR] %s %s %s %s %s %s",
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            req.method,
            req.path,
            code,
            req.uri,
            get_client_ip(req.client_ip, req.remote_ip, req.headers),
            msg,
        )
        ctx.json(200, {"code": code, "msg": msg})


def demo_env(ctx: Context, call_next: Next) -> None:
    """Let only reads, log-in and log-out through, for a public demo."""
    req = ctx.request
    if req.method in ("GET", "OPTIONS") or req.uri in ("/api/v1/login", "/api/v1/logout"):
        call_next()
        return
    ctx.json(200, {
        "code": 500,
        "msg": "谢谢您的参与，但为了大家更好的体验，所以本次提交就算了吧！\U0001F600\U0001F600\U0001F600",
    })
    ctx.abort()


def request_id(traffic_key: str) -> Callable[[Context, Next], None]:
    """Middleware that gives every request an id under ``traffic_key``."""

    def handler(ctx: Context, call_next: Next) -> None:
        req = ctx.request
        if req.method == "OPTIONS":
            call_next()
            return
        rid = _find_header(req.headers, traffic_key) or str(uuid.uuid4())
        for key in [k for k in req.headers if k.lower() == traffic_key.lower()]:
            del req.headers[key]
        req.headers[traffic_key] = rid
        ctx.set(traffic_key, rid)
        ctx.set(LOGGER_KEY + ":request_id", rid)
        ctx.set(LOGGER_KEY, logging.LoggerAdapter(_LOG, {traffic_key: rid}))
        call_next()

    return handler


_PARAM = re.compile(r":[^/]+")


def key_match2(key1: str, key2: str) -> bool:
    """Match a path against a pattern with ``:name`` segments and ``/*`` tails."""
    pattern = key2.replace("/*", "/.*")
    pattern = _PARAM.sub("[^/]+", pattern)
    return re.search("^" + pattern + "$", key1) is not None


def is_casbin_excluded(path: str, method: str) -> bool:
    """Whether a route skips the role check."""
    return any(
        key_match2(path, info.url) and method == info.method for info in CASBIN_EXCLUDE
    )


def auth_check_role(
    enforcer: Callable[[Any, str, str], bool],
) -> Callable[[Context, Next], None]:
    """Middleware checking the caller's role against a policy.

    ``enforcer`` is called with the role key, the path and the method and
    tells whether the request is allowed.
    """

    def handler(ctx: Context, call_next: Next) -> None:
        log = ctx.get(LOGGER_KEY) or _LOG
        claims = ctx.get(JWT_PAYLOAD_KEY) or {}
        role = claims.get("rolekey")
        req = ctx.request
        if role == "admin":
            call_next()
            return
        if is_casbin_excluded(req.path, req.method):
            log.info("Casbin exclusion, no validation method:%s path:%s", req.method, req.path)
            call_next()
            return
        try:
            allowed = enforcer(role, req.path, req.method)
        except Exception as exc:
            log.error("AuthCheckRole error:%s method:%s path:%s", exc, req.method, req.path)
            _error_reply(ctx, 500, exc, "")
            return
        if allowed:
            log.info("isTrue: %s role: %s method: %s path: %s", allowed, role, req.method, req.path)
            call_next()
            return
        log.warning(
            "isTrue: %s role: %s method: %s path: %s message: %s",
            allowed, role, req.method, req.path, "当前request无权限，请管理员确认！",
        )
        ctx.json(200, {"code": 403, "msg": "对不起，您没有该接口访问权限，请联系管理员"})
        ctx.abort()

    return handler


def ping(ctx: Context) -> None:
    """Health endpoint."""
    ctx.json(200, {"message": "ok"})


COMMON_MIDDLEWARE = (custom_error, no_cache, options, secure)