# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Client configuration for the Airbrake notifier."""

import os
from dataclasses import dataclass
from typing import IO, Any

DEFAULT_SERVICE_URL = "http://airbrake.io"

URL_SERVICE_NONE = ""
URL_SERVICE_AIRBAT = "airbat"
URL_SERVICE_TINYURL = "tinyurl"
URL_SERVICE_ISGD = "isgd"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _default(value: str | None, env_var: str, fallback: str) -> str:
    """Helper to pick an explicit value, then env var, then fallback."""
    if value is not None:
        return value
    return os.getenv(env_var) or fallback


@dataclass
class BrakeConfig:
    """Optional preferences and log sinks for a ``Brake``.

    Attributes:
        app_version: Sent with every notice as the application version
        app_url: Sent with every notice as the application URL
        user_id: Initial user id (single-user applications)
        user_name: Initial user name
        user_email: Initial user email
        debug_log_out: Binary writer that receives every outgoing request body
        debug_log_in: Binary writer that receives every incoming response body
        log_writer: Text writer that receives the human log lines
        log_stdout_silent: When True, nothing is written to stdout
        url_service: Report URL shortening service; "" disables shortening,
            "airbat" is computed locally, any other value names a
            registered external shortener
        service_url: Base URL of the notices API
        timeout: Request timeout in seconds; None keeps the httpx default
    """
    app_version: str = ""
    app_url: str = ""
    user_id: str = ""
    user_name: str = ""
    user_email: str = ""
    debug_log_out: IO[bytes] | None = None
    debug_log_in: IO[bytes] | None = None
    log_writer: IO[str] | None = None
    log_stdout_silent: bool = False
    url_service: str = URL_SERVICE_NONE
    service_url: str = DEFAULT_SERVICE_URL
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")
        self.service_url = self.service_url.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> "BrakeConfig":
        """Create a config from AIRBRAKE_* environment variables.

        Explicit keyword arguments take precedence over the environment.

        Args:
            **overrides: BrakeConfig fields to set explicitly

        Returns:
            BrakeConfig instance

        Raises:
            ValueError: If AIRBRAKE_TIMEOUT is not a positive number
        """
        timeout = overrides.pop("timeout", None)
        if timeout is None and os.getenv("AIRBRAKE_TIMEOUT"):
            try:
                timeout = float(os.environ["AIRBRAKE_TIMEOUT"])
            except ValueError as e:
                raise ValueError(f"AIRBRAKE_TIMEOUT must be a number: {e}") from e

        silent = overrides.pop("log_stdout_silent", None)
        if silent is None:
            silent = os.getenv("AIRBRAKE_LOG_STDOUT_SILENT", "").lower() in _TRUE_VALUES

        return cls(
            app_version=_default(overrides.pop("app_version", None), "AIRBRAKE_APP_VERSION", ""),
            app_url=_default(overrides.pop("app_url", None), "AIRBRAKE_APP_URL", ""),
            user_id=_default(overrides.pop("user_id", None), "AIRBRAKE_USER_ID", ""),
            user_name=_default(overrides.pop("user_name", None), "AIRBRAKE_USER_NAME", ""),
            user_email=_default(overrides.pop("user_email", None), "AIRBRAKE_USER_EMAIL", ""),
            url_service=_default(overrides.pop("url_service", None), "AIRBRAKE_URL_SERVICE", URL_SERVICE_NONE),
            service_url=_default(overrides.pop("service_url", None), "AIRBRAKE_SERVICE_URL", DEFAULT_SERVICE_URL),
            timeout=timeout,
            log_stdout_silent=silent,
            **overrides,
        )
