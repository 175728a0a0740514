"""Request logging and queuing of operation-log records."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from .clientip import get_client_ip
from .config import OPERATE_LOG
from .middleware import LOGGER_KEY, Context, Next

_LOG = logging.getLogger("adminkit")

REQUEST_BODY_KEY = "requestBody"
FULL_PATH_KEY = "fullPath"
USER_NAME_KEY = "userName"

_BODY_METHODS = ("POST", "PUT", "GET", "DELETE")

Sink = Callable[[str, dict[str, Any]], None]
Locate = Callable[[str], str]


def _format_duration(latency: timedelta | float) -> str:
    """Render a duration with the largest unit that keeps it at or above one."""
    seconds = latency.total_seconds() if isinstance(latency, timedelta) else float(latency)
    if seconds == 0:
        return "0s"
    magnitude = abs(seconds)
    if magnitude < 1e-6:
        return f"{seconds * 1e9:g}ns"
    if magnitude < 1e-3:
        return f"{seconds * 1e6:g}µs"
    if magnitude < 1:
        return f"{seconds * 1e3:g}ms"
    return f"{seconds:g}s"


def _body_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)


def build_oper_log(
    ctx: Context,
    client_ip: str,
    status_code: int,
    req_uri: str,
    req_method: str,
    latency: timedelta | float,
    body: str,
    result: str,
    status: int,
    locate: Locate | None = None,
) -> dict[str, Any]:
    """Assemble the operation-log record for one finished request."""
    location = locate(client_ip) if locate is not None else ""
    return {
        "_fullPath": ctx.get(FULL_PATH_KEY, ctx.request.path),
        "operUrl": req_uri,
        "operIp": client_ip,
        "operLocation": location or "",
        "operName": ctx.get(USER_NAME_KEY, ""),
        "requestMethod": req_method,
        "operParam": body,
        "operTime": datetime.now(),
        "jsonResult": result,
        "latencyTime": _format_duration(latency),
        "statusCode": status_code,
        "status": "2" if status == 200 else "1",
    }


def logger_to_queue(
    sink: Sink, enabled_db: bool, locate: Locate | None = None
) -> Callable[[Context, Next], None]:
    """Middleware logging each request and handing an operation record to ``sink``.

    ``sink`` is called with the operate-log topic and the record. Log-in and
    log-out requests, OPTIONS requests and 404 replies produce no record.
    """

    def handler(ctx: Context, call_next: Next) -> None:
        log = ctx.get(LOGGER_KEY) or _LOG
        req = ctx.request
        start = time.perf_counter()
        body = ""
        if req.method in _BODY_METHODS:
            body = _body_text(ctx.get(REQUEST_BODY_KEY))

        call_next()

        uri = req.uri or ""
        if "logout" in uri or "login" in uri:
            return
        latency = timedelta(seconds=time.perf_counter() - start)
        if req.method == "OPTIONS":
            return

        result = ""
        if REQUEST_RESULT_KEY in ctx.values:
            try:
                result = json.dumps(
                    ctx.get(REQUEST_RESULT_KEY), ensure_ascii=False, separators=(",", ":")
                )
            except (TypeError, ValueError) as exc:
                log.warning("json Marshal result error, %s", exc)

        status_bus = ctx.get(REQUEST_STATUS_KEY, 0)
        if not isinstance(status_bus, int):
            status_bus = 0

        status_code = ctx.status
        client_ip = get_client_ip(req.client_ip, req.remote_ip, req.headers)
        log.info(
            "statusCode=%s latencyTime=%s clientIP=%s method=%s uri=%s",
            status_code, _format_duration(latency), client_ip, req.method, uri,
        )

        if enabled_db and status_code != 404:
            record = build_oper_log(
                ctx, client_ip, status_code, uri, req.method, latency,
                body, result, status_bus, locate,
            )
            try:
                sink(OPERATE_LOG, record)
            except Exception as exc:  # a failing log sink must not break the request
                log.error("Append message error, %s", exc)

    return handler


REQUEST_RESULT_KEY = "result"
REQUEST_STATUS_KEY = "status"