"""
Integration Test Fixtures
=========================

A local aiohttp server exposing data, upload, status and slow endpoints.
"""

import asyncio
from typing import Any, AsyncGenerator, Callable, Dict

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from urlqueue.core.transport import AiohttpTransport


class ServerState:
    """Counters shared between the test and the server handlers."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.max_in_flight = 0
        self.uploads: Dict[str, Dict[str, Any]] = {}
        self.flaky_calls: Dict[str, int] = {}
        self.requests = 0


def build_app(state: ServerState) -> web.Application:
    """Build the test application."""

    @web.middleware
    async def tracking_middleware(request: web.Request, handler):
        state.requests += 1
        state.in_flight += 1
        state.max_in_flight = max(state.max_in_flight, state.in_flight)
        try:
            return await handler(request)
        finally:
            state.in_flight -= 1

    async def data(request: web.Request) -> web.Response:
        return web.Response(body=b"hello", content_type="text/plain")

    async def echo(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "method": request.method,
                "query": dict(request.query),
                "headers": {k: v for k, v in request.headers.items()},
                "body": (await request.read()).decode(),
            }
        )

    async def upload(request: web.Request) -> web.Response:
        body = await request.read()
        name = request.match_info["name"]
        state.uploads[name] = {"method": request.method, "body": body}
        return web.json_response({"received": len(body)}, status=201)

    async def status(request: web.Request) -> web.Response:
        code = int(request.match_info["code"])
        return web.Response(status=code, text=f"status {code}")

    async def slow(request: web.Request) -> web.Response:
        delay = float(request.query.get("delay", "0.05"))
        await asyncio.sleep(delay)
        return web.Response(text="slow")

    async def flaky(request: web.Request) -> web.Response:
        name = request.match_info["name"]
        failures = int(request.query.get("failures", "2"))
        calls = state.flaky_calls.get(name, 0) + 1
        state.flaky_calls[name] = calls
        if calls <= failures:
            return web.Response(status=500, text="try again")
        return web.Response(text=f"recovered after {calls}")

    app = web.Application(middlewares=[tracking_middleware])
    app.router.add_get("/data", data)
    app.router.add_route("*", "/echo", echo)
    app.router.add_route("*", "/upload/{name}", upload)
    app.router.add_get("/status/{code}", status)
    app.router.add_get("/slow", slow)
    app.router.add_get("/flaky/{name}", flaky)
    return app


@pytest.fixture
def server_state() -> ServerState:
    return ServerState()


@pytest.fixture
def make_app(server_state: ServerState) -> Callable[[], web.Application]:
    """Fresh application per event loop, sharing one state."""
    return lambda: build_app(server_state)


@pytest.fixture
async def http_server(server_state: ServerState) -> AsyncGenerator[TestServer, None]:
    """Running aiohttp test server."""
    async with TestServer(build_app(server_state)) as server:
        yield server


@pytest.fixture
async def http_transport() -> AsyncGenerator[AiohttpTransport, None]:
    """aiohttp transport closed after the test."""
    transport = AiohttpTransport()
    yield transport
    await transport.close()
