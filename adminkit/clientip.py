"""Work out the address of the client behind a request."""

from __future__ import annotations

from collections.abc import Mapping

LOCALHOST = "127.0.0.1"


def _header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or ""
    return ""


def get_client_ip(
    client_ip: str | None,
    remote_ip: str | None,
    headers: Mapping[str, str] | None = None,
) -> str:
    """Pick the client address from the peer, the proxy headers and the defaults.

    A non-local client address wins, then a non-local peer address, then
    ``X-Forwarded-For`` (unless it names the local host), then ``X-Real-IP``.
    """
    headers = headers or {}
    ip = _header(headers, "X-Forwarded-For")
    if LOCALHOST in ip or not ip:
        ip = _header(headers, "X-Real-IP")
    if not ip:
        ip = LOCALHOST
    if remote_ip and remote_ip != LOCALHOST:
        ip = remote_ip
    if client_ip and client_ip != LOCALHOST:
        ip = client_ip
    return ip