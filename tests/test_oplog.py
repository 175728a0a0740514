from datetime import timedelta

import pytest

from adminkit.config import OPERATE_LOG
from adminkit.middleware import Context, Request, run_chain
from adminkit.oplog import (
    FULL_PATH_KEY,
    REQUEST_BODY_KEY,
    USER_NAME_KEY,
    build_oper_log,
    logger_to_queue,
)


def _ctx(method="POST", uri="/api/v1/sys-user", **kwargs):
    return Context(request=Request(method=method, path=uri, **kwargs))


class _Sink:
    def __init__(self):
        self.items = []

    def __call__(self, topic, record):
        self.items.append((topic, record))


def _handler(result=None, status=None, code=200):
    def inner(ctx, call_next):
        if result is not None:
            ctx.set("result", result)
        if status is not None:
            ctx.set("status", status)
        ctx.status = code
        call_next()
    return inner


def test_build_oper_log_fields():
    ctx = _ctx()
    ctx.set(FULL_PATH_KEY, "/api/v1/sys-user/:id")
    ctx.set(USER_NAME_KEY, "admin")
    record = build_oper_log(
        ctx, "10.0.0.5", 200, "/api/v1/sys-user", "POST",
        timedelta(milliseconds=5), "{}", '{"code":200}', 200,
        locate=lambda ip: "loc:" + ip,
    )
    assert record["_fullPath"] == "/api/v1/sys-user/:id"
    assert record["operUrl"] == "/api/v1/sys-user"
    assert record["operIp"] == "10.0.0.5"
    assert record["operLocation"] == "loc:10.0.0.5"
    assert record["operName"] == "admin"
    assert record["requestMethod"] == "POST"
    assert record["operParam"] == "{}"
    assert record["jsonResult"] == '{"code":200}'
    assert record["statusCode"] == 200
    assert record["status"] == "2"
    assert record["latencyTime"] == "5ms"


@pytest.mark.parametrize("status,expected", [(200, "2"), (500, "1"), (0, "1")])
def test_build_oper_log_status(status, expected):
    record = build_oper_log(_ctx(), "1.2.3.4", 200, "/x", "GET", 0.0, "", "", status)
    assert record["status"] == expected
    assert record["operLocation"] == ""


def test_middleware_queues_record():
    sink = _Sink()
    ctx = _ctx(remote_ip="10.1.1.1")
    ctx.set(REQUEST_BODY_KEY, b'{"name":"a"}')
    run_chain([logger_to_queue(sink, True), _handler({"code": 200}, 200)], ctx)
    assert len(sink.items) == 1
    topic, record = sink.items[0]
    assert topic == OPERATE_LOG
    assert record["operParam"] == '{"name":"a"}'
    assert record["jsonResult"] == '{"code":200}'
    assert record["operIp"] == "10.1.1.1"
    assert record["status"] == "2"


@pytest.mark.parametrize("uri", ["/api/v1/login", "/api/v1/logout"])
def test_login_and_logout_are_not_logged(uri):
    sink = _Sink()
    run_chain([logger_to_queue(sink, True), _handler()], _ctx(uri=uri))
    assert sink.items == []


def test_options_not_logged():
    sink = _Sink()
    run_chain([logger_to_queue(sink, True), _handler()], _ctx(method="OPTIONS"))
    assert sink.items == []


def test_not_found_not_logged():
    sink = _Sink()
    run_chain([logger_to_queue(sink, True), _handler(code=404)], _ctx())
    assert sink.items == []


def test_disabled_db_not_logged():
    sink = _Sink()
    run_chain([logger_to_queue(sink, False), _handler()], _ctx())
    assert sink.items == []


def test_failed_business_status_marked():
    sink = _Sink()
    run_chain([logger_to_queue(sink, True), _handler({"code": 500}, 500)], _ctx())
    assert sink.items[0][1]["status"] == "1"


def test_sink_failure_does_not_propagate():
    def broken(topic, record):
        raise RuntimeError("queue full")

    ctx = run_chain([logger_to_queue(broken, True), _handler()], _ctx())
    assert ctx.status == 200