# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Copilot-for-Consensus Airbrake Notifier.

A client library that reports application errors to the Airbrake notices
API, with optional shortening of the returned report URL.

Example:
    >>> from copilot_airbrake import Brake, BrakeConfig, NoticeData
    >>> brake = Brake("12345", "api-key", "production", BrakeConfig(app_version="1.2.0"))
    >>> brake.report("EOF", "could not read from file")
    >>> brake.report_with_data("EOF", "could not read", NoticeData(params={"filename": "foo.bar"}))
    >>>
    >>> with brake.recover():
    ...     this_might_raise()
"""

import os
from typing import Any

from ._version import __version__

from .backtrace import capture_backtrace, internal_frame
from .brake import PANIC_ERROR_CLASS, Brake, Recovery
from .config import (
    URL_SERVICE_AIRBAT,
    URL_SERVICE_ISGD,
    URL_SERVICE_NONE,
    URL_SERVICE_TINYURL,
    BrakeConfig,
)
from .exceptions import (
    AirbrakeError,
    NoticeEncodingError,
    RequestFailedError,
    ResponseDecodeError,
    TransportError,
    UnexpectedStatusError,
    URLResolutionError,
)
from .middleware import BrakeMiddleware
from .models import (
    DEFAULT_NOTIFIER,
    Context,
    ErrorEntry,
    Notice,
    NoticeData,
    NoticeResult,
    NotifierInfo,
    StackFrame,
)
from .notice import build_notice, encode_notice
from .shorteners import Shortener, airbat_url, register_shortener
from .transport import NoticeTransport
from .url_resolver import (
    CanonicalURLResolver,
    EncodedURLResolver,
    ShortenedURLResolver,
    URLResolver,
    create_url_resolver,
)


def create_brake(
    project_id: str | None = None,
    api_key: str | None = None,
    environment: str | None = None,
    **kwargs: Any,
) -> Brake:
    """Factory function to create a Brake.

    Args:
        project_id: Airbrake project id. Defaults to AIRBRAKE_PROJECT_ID env.
        api_key: Airbrake API key. Defaults to AIRBRAKE_API_KEY env.
        environment: Environment name. Defaults to AIRBRAKE_ENVIRONMENT env
            or "production".
        **kwargs: BrakeConfig fields; unset fields are read from AIRBRAKE_* env

    Returns:
        Brake instance

    Raises:
        ValueError: If project id or API key is missing
    """
    project_id = project_id or os.getenv("AIRBRAKE_PROJECT_ID")
    api_key = api_key or os.getenv("AIRBRAKE_API_KEY")
    environment = environment or os.getenv("AIRBRAKE_ENVIRONMENT") or "production"

    if not project_id:
        raise ValueError("project_id is required (or set AIRBRAKE_PROJECT_ID)")
    if not api_key:
        raise ValueError("api_key is required (or set AIRBRAKE_API_KEY)")

    return Brake(project_id, api_key, environment, config=BrakeConfig.from_env(**kwargs))


__all__ = [
    # Version
    "__version__",
    # Client
    "Brake",
    "BrakeConfig",
    "Recovery",
    "BrakeMiddleware",
    "create_brake",
    "PANIC_ERROR_CLASS",
    # Models
    "Context",
    "ErrorEntry",
    "Notice",
    "NoticeData",
    "NoticeResult",
    "NotifierInfo",
    "StackFrame",
    "DEFAULT_NOTIFIER",
    # Pipeline
    "build_notice",
    "encode_notice",
    "capture_backtrace",
    "internal_frame",
    "NoticeTransport",
    # URL resolution
    "URLResolver",
    "CanonicalURLResolver",
    "EncodedURLResolver",
    "ShortenedURLResolver",
    "create_url_resolver",
    "Shortener",
    "airbat_url",
    "register_shortener",
    "URL_SERVICE_NONE",
    "URL_SERVICE_AIRBAT",
    "URL_SERVICE_TINYURL",
    "URL_SERVICE_ISGD",
    # Exceptions
    "AirbrakeError",
    "NoticeEncodingError",
    "TransportError",
    "RequestFailedError",
    "UnexpectedStatusError",
    "ResponseDecodeError",
    "URLResolutionError",
]
