"""Base service and API handler with error accumulation and replies."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .models import Page, Response

_LOG = logging.getLogger("adminkit")


class MultiError(Exception):
    """Several errors collected one after another."""

    def __init__(self, errors: list[BaseException]):
        super().__init__("; ".join(str(e) for e in errors))
        self.errors = list(errors)


def _combine(first: BaseException, second: BaseException) -> MultiError:
    errors = first.errors if isinstance(first, MultiError) else [first]
    return MultiError([*errors, second])


@dataclass
class Service:
    """Base for business services: database handle, log and error state."""

    orm: Any = None
    msg: str = ""
    msg_id: str = ""
    log: logging.Logger = field(default=_LOG)
    error: BaseException | None = None

    def add_error(self, err: BaseException | None) -> BaseException | None:
        """Record an error and return everything recorded so far."""
        if self.error is None:
            self.error = err
        elif err is not None:
            self.error = _combine(self.error, err)
        return self.error


@dataclass
class Api:
    """Base for API handlers; replies are kept in ``result`` and ``status``."""

    request_id: str = ""
    logger: logging.Logger = field(default=_LOG)
    orm: Any = None
    errors: BaseException | None = None
    result: dict[str, Any] | None = None
    status: int | None = None

    def add_error(self, err: BaseException | None) -> None:
        if self.errors is None:
            self.errors = err
        elif err is not None:
            self.logger.error("%s", err)
            self.errors = _combine(self.errors, err)

    def _reply(self, response: Response) -> None:
        response.request_id = self.request_id
        self.result = response.to_dict()
        self.status = response.code

    def error(self, code: int, err: BaseException | None, msg: str) -> None:
        """Reply with an error; the message defaults to the error's text."""
        text = msg or (str(err) if err is not None else "")
        self._reply(Response(msg=text).return_error(code))

    def ok(self, data: Any, msg: str) -> None:
        self._reply(Response(data=data, msg=msg).return_ok())

    def page_ok(self, result: Any, count: int, page_index: int,
                page_size: int, msg: str) -> None:
        page = Page(list=result, count=count, page_index=page_index, page_size=page_size)
        self.ok(page.to_dict(), msg)

    def custom(self, data: dict[str, Any]) -> None:
        """Reply with a caller-built payload, tagged with the request id."""
        payload = dict(data)
        payload["requestId"] = self.request_id
        self.result = payload
        self.status = payload.get("code")