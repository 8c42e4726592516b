import logging

import pytest
from fastapi import Request, FastAPI, Response
from web_admin.middlewares.context_middleware import ContextMiddleware
from web_admin.middlewares.trace_middleware import TraceMiddleware, redirect_outcome
from core.context import get_action_store, get_request_store, trace_id_var


def _request(method="GET", headers=None, path="/"):
    scope = {
        "type": "http",
        "client": ("127.0.0.1", 12345),
        "headers": headers or [],
        "scheme": "http",
        "path": path,
        "method": method,
        "query_string": b"",
    }
    return Request(scope)


# --- Context Middleware Tests ---

@pytest.mark.asyncio
async def test_context_middleware_sets_stores():
    middleware = ContextMiddleware(FastAPI())

    async def call_next(request):
        return {
            "request_store": get_request_store(),
            "action_store": get_action_store(),
        }

    result = await middleware.dispatch(_request(), call_next)

    assert result["request_store"] is not None
    assert len(result["request_store"].mutable_cookies) == 0
    assert result["action_store"].is_action is False
    # Reset after the request
    assert get_request_store() is None
    assert get_action_store() is None


@pytest.mark.asyncio
async def test_context_middleware_detects_action():
    middleware = ContextMiddleware(FastAPI())

    async def call_next(request):
        return get_action_store().is_action

    assert await middleware.dispatch(_request("POST", [(b"x-action", b"1")]), call_next) is True
    # Header without a mutating method is not an action
    assert await middleware.dispatch(_request("GET", [(b"x-action", b"1")]), call_next) is False
    # Mutating method without the header is not an action
    assert await middleware.dispatch(_request("POST"), call_next) is False


@pytest.mark.asyncio
async def test_context_middleware_custom_header():
    middleware = ContextMiddleware(FastAPI(), action_header="X-Form-Submit", action_methods=["put"])

    async def call_next(request):
        return get_action_store().is_action

    assert await middleware.dispatch(_request("PUT", [(b"x-form-submit", b"1")]), call_next) is True
    assert await middleware.dispatch(_request("POST", [(b"x-form-submit", b"1")]), call_next) is False


@pytest.mark.asyncio
async def test_context_middleware_resets_on_error():
    middleware = ContextMiddleware(FastAPI())

    async def call_next(request):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await middleware.dispatch(_request(), call_next)
    assert get_request_store() is None


@pytest.mark.asyncio
async def test_each_request_gets_fresh_cookie_jar():
    middleware = ContextMiddleware(FastAPI())

    async def call_next(request):
        return get_request_store().mutable_cookies

    first = await middleware.dispatch(_request(), call_next)
    second = await middleware.dispatch(_request(), call_next)
    assert first is not second


# --- Trace Middleware Tests ---

@pytest.mark.asyncio
async def test_trace_middleware_uses_incoming_id():
    middleware = TraceMiddleware(FastAPI())
    seen = {}

    async def call_next(request):
        seen["trace"] = trace_id_var.get()
        return Response("OK")

    response = await middleware.dispatch(_request(headers=[(b"x-trace-id", b"trace-42")]), call_next)
    assert seen["trace"] == "trace-42"
    assert response.headers["X-Trace-ID"] == "trace-42"
    assert trace_id_var.get() == "-"


@pytest.mark.asyncio
async def test_trace_middleware_generates_id():
    middleware = TraceMiddleware(FastAPI())

    async def call_next(request):
        return Response("OK")

    response = await middleware.dispatch(_request(), call_next)
    assert len(response.headers["X-Trace-ID"]) == 36


class DigestCarrier(Exception):
    """Exception from another library that happens to carry a redirect digest."""
    def __init__(self, digest):
        super().__init__("carrier")
        self.digest = digest


@pytest.mark.asyncio
async def test_context_middleware_answers_foreign_carrier():
    middleware = ContextMiddleware(FastAPI())

    async def call_next(request):
        raise DigestCarrier("NEXT_REDIRECT;push;/target;307;")

    response = await middleware.dispatch(_request(), call_next)
    assert response.status_code == 307
    assert response.headers["location"] == "/target"
    assert get_request_store() is None


@pytest.mark.asyncio
async def test_context_middleware_reraises_lookalike_carrier():
    middleware = ContextMiddleware(FastAPI())

    async def call_next(request):
        raise DigestCarrier("NEXT_REDIRECT;push;/target;302;")

    with pytest.raises(DigestCarrier):
        await middleware.dispatch(_request(), call_next)


# --- Redirect outcome logging ---

def test_redirect_outcome_http():
    response = Response(status_code=303, headers={"location": "/thanks"})
    assert redirect_outcome(response) == ("/thanks", "http", 303)


def test_redirect_outcome_navigation_instruction():
    response = Response(status_code=200, headers={"X-Redirect-Location": "/a;b", "X-Redirect-Type": "push"})
    assert redirect_outcome(response) == ("/a;b", "push", 200)


def test_redirect_outcome_plain_response():
    assert redirect_outcome(Response("OK")) is None
    # Location on a non-3xx response is not a redirect
    assert redirect_outcome(Response(status_code=201, headers={"location": "/items/1"})) is None


@pytest.mark.asyncio
async def test_trace_middleware_logs_redirect(caplog):
    middleware = TraceMiddleware(FastAPI())

    async def call_next(request):
        return Response(status_code=308, headers={"location": "/moved"})

    with caplog.at_level(logging.INFO, logger="web_admin.middlewares.trace_middleware"):
        response = await middleware.dispatch(_request(headers=[(b"x-trace-id", b"trace-7")], path="/old"), call_next)

    assert response.headers["X-Trace-ID"] == "trace-7"
    messages = [r.getMessage() for r in caplog.records]
    assert any("/old" in m and "/moved" in m and "status=308" in m and "trace-7" in m for m in messages)


@pytest.mark.asyncio
async def test_trace_middleware_quiet_without_redirect(caplog):
    middleware = TraceMiddleware(FastAPI())

    async def call_next(request):
        return Response("OK")

    with caplog.at_level(logging.INFO, logger="web_admin.middlewares.trace_middleware"):
        await middleware.dispatch(_request(), call_next)

    assert not [r for r in caplog.records if r.name == "web_admin.middlewares.trace_middleware"]
