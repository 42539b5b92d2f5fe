# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Starlette/FastAPI adapters that report faults raised while serving requests.

Usage:
    from copilot_airbrake import BrakeMiddleware
    from fastapi import FastAPI

    app = FastAPI()
    app.add_middleware(BrakeMiddleware, brake=brake)

A fault is reported as a panic, the same way ``Brake.recover()`` reports
it, and the client receives a 500 response instead of the exception
reaching the server. The notice is delivered from a worker thread so the
event loop keeps serving other requests.
"""

import functools
import inspect
from typing import TYPE_CHECKING, Any, Callable

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from .backtrace import backtrace_from_traceback, internal_frame

if TYPE_CHECKING:
    from .brake import Brake


def _error_response() -> Response:
    return PlainTextResponse("Internal Server Error", status_code=500)


async def _report_off_loop(brake: "Brake", exc: Exception) -> None:
    # frames must be read on the loop thread while the coroutine is live
    backtrace = backtrace_from_traceback(exc.__traceback__)
    await run_in_threadpool(brake.report_panic, exc, backtrace)


class BrakeMiddleware(BaseHTTPMiddleware):
    """Middleware that reports unhandled exceptions to Airbrake.

    Attributes:
        brake: Brake used to report recovered faults
    """

    def __init__(self, app: Any, brake: "Brake"):
        """Initialize the middleware.

        Args:
            app: ASGI application to wrap
            brake: Brake used to report recovered faults
        """
        super().__init__(app)
        self.brake = brake

    @internal_frame
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            await _report_off_loop(self.brake, exc)
        return _error_response()


def wrap_endpoint(brake: "Brake", endpoint: Callable) -> Callable:
    """Wrap a Starlette endpoint function with fault recovery.

    Both async and plain functions are accepted; plain functions run in the
    threadpool as Starlette would run them.

    Args:
        brake: Brake used to report recovered faults
        endpoint: Function taking a request and returning a response

    Returns:
        Async endpoint function
    """

    @internal_frame
    @functools.wraps(endpoint)
    async def recovering_endpoint(request: Request) -> Response:
        try:
            if inspect.iscoroutinefunction(endpoint):
                return await endpoint(request)
            return await run_in_threadpool(endpoint, request)
        except Exception as exc:
            await _report_off_loop(brake, exc)
        return _error_response()

    return recovering_endpoint
