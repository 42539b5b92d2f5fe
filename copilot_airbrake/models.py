# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Data models for Airbrake notices.

This module defines the notifier identity, the per-client context, and the
notice payload sent to the Airbrake v3 notices API. ``to_dict`` methods
produce the wire field names.
"""

import os
import platform
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ._version import __version__

if TYPE_CHECKING:
    from .config import BrakeConfig


@dataclass(frozen=True)
class NotifierInfo:
    """Describes the library that submits notices.

    Attributes:
        name: Name of the notifier client
        version: Version of the notifier client
        url: URL with more information about the notifier client
    """
    name: str
    version: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version, "url": self.url}


DEFAULT_NOTIFIER = NotifierInfo(
    name="copilot-airbrake",
    version=__version__,
    url="https://github.com/Alan-Jowett/CoPilot-For-Consensus",
)


def _working_directory() -> str:
    try:
        return os.getcwd()
    except OSError:
        return ""


@dataclass(frozen=True)
class Context:
    """Per-client metadata attached to every notice.

    Instances are immutable snapshots. User details are changed by building
    a new snapshot with ``with_user``.

    Attributes:
        os: Operating system and architecture (e.g., "linux_x86_64")
        language: Runtime identifier (e.g., "CPython 3.12.1")
        root_directory: Working directory at construction ("" if unreadable)
        environment: Deployment environment name
        version: Application version
        url: Application URL
        user_id: Optional user identifier
        user_name: Optional user display name
        user_email: Optional user email address
    """
    os: str
    language: str
    root_directory: str
    environment: str
    version: str = ""
    url: str = ""
    user_id: str = ""
    user_name: str = ""
    user_email: str = ""

    @classmethod
    def capture(cls, environment: str, config: "BrakeConfig") -> "Context":
        """Build a context from process facts and client configuration.

        Args:
            environment: Deployment environment name
            config: Client configuration supplying app and user details

        Returns:
            Context snapshot
        """
        return cls(
            os=f"{platform.system().lower()}_{platform.machine().lower()}",
            language=f"{platform.python_implementation()} {platform.python_version()}",
            root_directory=_working_directory(),
            environment=environment,
            version=config.app_version,
            url=config.app_url,
            user_id=config.user_id,
            user_name=config.user_name,
            user_email=config.user_email,
        )

    def with_user(self, user_id: str, user_name: str, user_email: str) -> "Context":
        """Return a copy of this context with new user details."""
        return replace(self, user_id=user_id, user_name=user_name, user_email=user_email)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "os": self.os,
            "language": self.language,
            "rootDirectory": self.root_directory,
            "environment": self.environment,
            "version": self.version,
            "url": self.url,
        }
        # user fields are only sent when set
        if self.user_id:
            data["userId"] = self.user_id
        if self.user_name:
            data["userName"] = self.user_name
        if self.user_email:
            data["userEmail"] = self.user_email
        return data


@dataclass(frozen=True)
class StackFrame:
    """A single line of a backtrace."""
    file: str
    line: int
    function: str

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "function": self.function}


@dataclass
class ErrorEntry:
    """A single error within a notice.

    Attributes:
        type: Error class (e.g., "EOF", "panic")
        message: Short message describing the error
        backtrace: Stack frames, innermost (error site) first
    """
    type: str
    message: str = ""
    backtrace: list[StackFrame] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.message:
            data["message"] = self.message
        if self.backtrace:
            data["backtrace"] = [frame.to_dict() for frame in self.backtrace]
        return data


@dataclass
class NoticeData:
    """Structured data sent along with an error.

    Example:
        >>> NoticeData(
        ...     environment={"PATH": os.environ.get("PATH")},
        ...     session={"account_id": 1337},
        ...     params={"filename": "foo.bar"},
        ... )
    """
    environment: dict[str, Any] | None = None
    session: dict[str, Any] | None = None
    params: dict[str, Any] | None = None


@dataclass
class Notice:
    """The structured error report sent to the notices API.

    The wire format allows several errors per notice; ``Brake`` always
    builds exactly one.
    """
    notifier: NotifierInfo
    context: Context
    errors: list[ErrorEntry]
    environment: dict[str, Any] | None = None
    session: dict[str, Any] | None = None
    params: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "notifier": self.notifier.to_dict(),
            "context": self.context.to_dict(),
            "errors": [error.to_dict() for error in self.errors],
        }
        # empty maps are left out of the payload entirely
        if self.environment:
            data["environment"] = self.environment
        if self.session:
            data["session"] = self.session
        if self.params:
            data["params"] = self.params
        return data


@dataclass(frozen=True)
class NoticeResult:
    """Result returned by the notices API for an accepted notice."""
    id: int
    url: str
