# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""The Brake: public entry points for reporting errors to Airbrake.

Example:
    >>> brake = Brake("12345", "api-key", "production")
    >>> brake.report("EOF", "could not read from file")
    >>>
    >>> with brake.recover():
    ...     this_might_raise()
"""

import logging
import sys
import threading
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Callable

import httpx

from .backtrace import backtrace_from_traceback, capture_backtrace, internal_frame
from .config import BrakeConfig
from .exceptions import AirbrakeError
from .middleware import BrakeMiddleware, wrap_endpoint
from .models import DEFAULT_NOTIFIER, Context, NoticeData, NotifierInfo, StackFrame
from .notice import build_notice
from .transport import NoticeTransport, build_notice_url
from .url_resolver import URLResolver, create_url_resolver

logger = logging.getLogger(__name__)

PANIC_ERROR_CLASS = "panic"


class Recovery:
    """Context manager that reports and absorbs an exception raised in its block.

    Only ``Exception`` subclasses are absorbed. KeyboardInterrupt, SystemExit
    and other ``BaseException`` subclasses keep propagating.

    Attributes:
        recovered: The absorbed exception, or None
    """

    def __init__(self, brake: "Brake"):
        self._brake = brake
        self.recovered: Exception | None = None

    def __enter__(self) -> "Recovery":
        return self

    @internal_frame
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None or not isinstance(exc, Exception):
            return False
        self.recovered = exc
        self._brake.report_panic(exc, backtrace_from_traceback(tb))
        return True


class Brake:
    """Long-lived handle that reports errors to the Airbrake notices API.

    A Brake is safe to share between threads. Each report builds its own
    notice and performs one blocking HTTP request on the calling thread.

    Attributes:
        project_id: Airbrake project id
        api_key: Airbrake project API key
    """

    def __init__(
        self,
        project_id: str,
        api_key: str,
        environment: str,
        config: BrakeConfig | None = None,
        notifier: NotifierInfo = DEFAULT_NOTIFIER,
        http_client: httpx.Client | None = None,
        url_resolver: URLResolver | None = None,
    ):
        """Initialize a Brake.

        Args:
            project_id: Airbrake project id
            api_key: Airbrake project API key
            environment: Deployment environment name sent with every notice
            config: Optional preferences and log sinks
            notifier: Identity of the notifier sent with every notice
            http_client: Optional httpx client used for notice requests
            url_resolver: Optional resolver overriding ``config.url_service``

        Raises:
            ValueError: If config.url_service names no known service
        """
        self._config = config or BrakeConfig()
        self._notifier = notifier
        self._context = Context.capture(environment, self._config)
        self._context_lock = threading.Lock()

        self.project_id = project_id
        self.api_key = api_key
        self._notice_url = build_notice_url(self._config.service_url, project_id, api_key)

        self._transport = NoticeTransport(
            self._notice_url,
            debug_log_out=self._config.debug_log_out,
            debug_log_in=self._config.debug_log_in,
            timeout=self._config.timeout,
            client=http_client,
        )
        self._url_resolver = url_resolver or create_url_resolver(self._config.url_service)

    @property
    def config(self) -> BrakeConfig:
        return self._config

    @property
    def notifier(self) -> NotifierInfo:
        return self._notifier

    @property
    def context(self) -> Context:
        """Current context snapshot."""
        return self._context

    @property
    def notice_url(self) -> str:
        return self._notice_url

    def set_user_details(self, user_id: str, user_name: str, user_email: str) -> None:
        """Replace the user details sent with subsequent notices.

        This overwrites the user values given through the config. Reports
        already in flight keep the snapshot they started with.
        """
        with self._context_lock:
            self._context = self._context.with_user(user_id, user_name, user_email)

    def _human_log(self, message: str) -> None:
        if not self._config.log_stdout_silent:
            try:
                sys.stdout.write(message)
                sys.stdout.flush()
            except Exception as e:
                logger.warning("Failed to write to stdout: %s", e)
        if self._config.log_writer is not None:
            try:
                self._config.log_writer.write(message)
            except Exception as e:
                logger.warning("Failed to write to log writer: %s", e)

    def _report(
        self,
        error_class: str,
        message: str,
        data: NoticeData | None,
        backtrace: list[StackFrame],
    ) -> None:
        notice = build_notice(
            self._notifier,
            self._context,
            error_class,
            message,
            data=data,
            backtrace=backtrace,
        )
        try:
            result = self._transport.send(notice)
        except AirbrakeError as e:
            logger.warning("Failed to deliver notice %s: %s", error_class, e)
            self._human_log(f"error processing notice: {e}\n")
            return
        except Exception as e:
            logger.error("Unexpected failure delivering notice %s: %s", error_class, e, exc_info=True)
            self._human_log(f"error processing notice: {e}\n")
            return

        url = self._url_resolver.resolve(result)
        self._human_log(f"error {url}\n")

    @internal_frame
    def report(self, error_class: str, message: str) -> None:
        """Report an error to Airbrake.

        Never raises; the outcome is written to the human log.

        Example:
            >>> brake.report("EOF", "could not read from file")
        """
        self._report(error_class, message, None, capture_backtrace())

    notify = report

    @internal_frame
    def reportf(self, error_class: str, fmt: str, *args: Any) -> None:
        """Report an error with a printf-style formatted message.

        Example:
            >>> brake.reportf("error", "could not read from file %s", filename)
        """
        self.report(error_class, _format_message(fmt, args))

    @internal_frame
    def report_with_data(self, error_class: str, message: str, data: NoticeData) -> None:
        """Report an error with environment, session and params data.

        Example:
            >>> brake.report_with_data("EOF", "could not read from file", NoticeData(
            ...     session={"account_id": 1337},
            ...     params={"filename": "foo.bar"},
            ... ))
        """
        self._report(error_class, message, data, capture_backtrace())

    notify_data = report_with_data

    @internal_frame
    def report_exception(self, error: BaseException, data: NoticeData | None = None) -> None:
        """Report a caught exception using its own traceback.

        Args:
            error: The exception to report
            data: Optional structured data
        """
        if error.__traceback__ is not None:
            backtrace = backtrace_from_traceback(error.__traceback__)
        else:
            backtrace = capture_backtrace()
        self._report(type(error).__name__, _safe_str(error), data, backtrace)

    def report_panic(self, error: BaseException, backtrace: list[StackFrame]) -> None:
        """Report a recovered fault with error class "panic".

        Blocks while the notice is delivered. Async callers should run it
        in a worker thread.

        Args:
            error: The recovered exception
            backtrace: Frames leading to the fault, innermost first
        """
        self._report(PANIC_ERROR_CLASS, _safe_str(error), None, backtrace)

    def recover(self) -> Recovery:
        """Return a scope that reports and absorbs an exception.

        An exception escaping the block is reported with error class
        "panic" and its string form as message, then suppressed.

        Example:
            >>> def do_something_dangerous():
            ...     with brake.recover():
            ...         this_might_raise()
            ...         this_might_also_raise()
        """
        return Recovery(self)

    def wrap_handler(self, app: Any) -> BrakeMiddleware:
        """Wrap an ASGI application so faults are reported and answered with a 500."""
        return BrakeMiddleware(app, brake=self)

    def wrap_handler_func(self, endpoint: Callable) -> Callable:
        """Wrap a Starlette endpoint function with fault recovery."""
        return wrap_endpoint(self, endpoint)


def _safe_str(error: BaseException) -> str:
    try:
        return str(error)
    except Exception:
        pass
    try:
        return repr(error)
    except Exception:
        return f"<unprintable {type(error).__name__}>"


def _format_message(fmt: str, args: tuple) -> str:
    if not args:
        return fmt
    values: Any = args
    if len(args) == 1 and isinstance(args[0], Mapping):
        values = args[0]
    try:
        return fmt % values
    except (TypeError, ValueError, KeyError):
        return f"{fmt} {args!r}"
