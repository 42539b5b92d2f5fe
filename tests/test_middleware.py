# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the request handler adapters."""

import asyncio
import threading
import time

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route, Router

from copilot_airbrake import Brake, BrakeMiddleware


def fail_request():
    raise RuntimeError("handler exploded")


@pytest.fixture
def fastapi_app(brake):
    """FastAPI app with the Brake middleware installed."""
    app = FastAPI()
    app.add_middleware(BrakeMiddleware, brake=brake)

    @app.get("/ok")
    def ok():
        return {"status": "ok"}

    @app.get("/boom")
    def boom():
        fail_request()

    return app


class TestBrakeMiddleware:
    """Test suite for BrakeMiddleware."""

    def test_successful_request_not_reported(self, fastapi_app, api):
        """Test normal requests pass through untouched."""
        response = TestClient(fastapi_app).get("/ok")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert api.requests == []

    def test_fault_is_reported_and_converted(self, fastapi_app, api):
        """Test a handler exception is reported and answered with a 500."""
        response = TestClient(fastapi_app).get("/boom")

        assert response.status_code == 500
        assert len(api.requests) == 1
        error = api.last_payload()["errors"][0]
        assert error["type"] == "panic"
        assert error["message"] == "handler exploded"
        assert error["backtrace"][0]["function"] == "fail_request"

    def test_server_keeps_serving(self, fastapi_app, api):
        """Test a fault in one request does not affect the next."""
        client = TestClient(fastapi_app)

        assert client.get("/boom").status_code == 500
        assert client.get("/ok").status_code == 200
        assert len(api.requests) == 1

    def test_wrap_handler(self, brake, api):
        """Test wrap_handler returns a recovering ASGI app."""

        def boom(request):
            fail_request()

        app = brake.wrap_handler(Router(routes=[Route("/boom", boom)]))

        response = TestClient(app).get("/boom")

        assert isinstance(app, BrakeMiddleware)
        assert response.status_code == 500
        assert api.last_payload()["errors"][0]["message"] == "handler exploded"


class TestWrapHandlerFunc:
    """Test suite for wrap_handler_func."""

    def test_async_endpoint_fault(self, brake, api):
        """Test an async endpoint fault is reported."""

        async def boom(request):
            fail_request()

        app = Starlette(routes=[Route("/boom", brake.wrap_handler_func(boom))])
        response = TestClient(app).get("/boom")

        assert response.status_code == 500
        assert len(api.requests) == 1
        assert api.last_payload()["errors"][0]["backtrace"][0]["function"] == "fail_request"

    def test_sync_endpoint_fault(self, brake, api):
        """Test a plain endpoint runs in the threadpool and is recovered."""

        def boom(request):
            fail_request()

        app = Starlette(routes=[Route("/boom", brake.wrap_handler_func(boom))])
        response = TestClient(app).get("/boom")

        assert response.status_code == 500
        assert api.last_payload()["errors"][0]["type"] == "panic"

    def test_endpoint_success(self, brake, api):
        """Test a successful endpoint response is returned unchanged."""

        async def hello(request):
            return PlainTextResponse(f"hello {request.path_params['name']}")

        app = Starlette(routes=[Route("/hello/{name}", brake.wrap_handler_func(hello))])
        response = TestClient(app).get("/hello/world")

        assert response.status_code == 200
        assert response.text == "hello world"
        assert api.requests == []

    def test_wrapper_keeps_name(self, brake):
        """Test the wrapper carries the endpoint's metadata."""

        async def my_endpoint(request):
            return PlainTextResponse("ok")

        assert brake.wrap_handler_func(my_endpoint).__name__ == "my_endpoint"


class TestEventLoopResponsiveness:
    """Test suite for delivering fault notices off the event loop."""

    @pytest.fixture
    def slow_brake(self, config):
        """Brake whose notices API takes half a second to answer."""

        def slow_handler(request):
            time.sleep(0.5)
            return httpx.Response(201, content=b'{"id":"42","url":"http://x/42"}')

        client = httpx.Client(transport=httpx.MockTransport(slow_handler))
        yield Brake("12345", "secret-key", "testing", config=config, http_client=client)
        client.close()

    def test_loop_keeps_running_while_reporting(self, slow_brake, log_writer):
        """Test other tasks make progress while a fault notice is delivered."""

        async def boom(request):
            fail_request()

        async def serve():
            ticks = 0

            async def ticker():
                nonlocal ticks
                while True:
                    await asyncio.sleep(0.01)
                    ticks += 1

            task = asyncio.create_task(ticker())
            await asyncio.sleep(0)
            response = await slow_brake.wrap_handler_func(boom)(None)
            task.cancel()
            return response, ticks

        response, ticks = asyncio.run(serve())

        assert response.status_code == 500
        assert log_writer.getvalue() == "error http://x/42\n"
        assert ticks >= 10

    def test_middleware_reports_off_loop(self, slow_brake):
        """Test the middleware hands delivery to a worker thread."""
        loop_thread = []
        report_threads = []
        report_panic = slow_brake.report_panic

        def recording_report_panic(error, backtrace):
            report_threads.append(threading.get_ident())
            report_panic(error, backtrace)

        slow_brake.report_panic = recording_report_panic

        async def boom(request):
            loop_thread.append(threading.get_ident())
            fail_request()

        app = slow_brake.wrap_handler(Router(routes=[Route("/boom", boom)]))
        response = TestClient(app).get("/boom")

        assert response.status_code == 500
        assert len(report_threads) == 1
        assert report_threads[0] != loop_thread[0]
