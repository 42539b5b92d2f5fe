# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Notice construction and wire encoding."""

import json

from .exceptions import NoticeEncodingError
from .models import Context, ErrorEntry, Notice, NoticeData, NotifierInfo, StackFrame


def build_notice(
    notifier: NotifierInfo,
    context: Context,
    error_class: str,
    message: str,
    data: NoticeData | None = None,
    backtrace: list[StackFrame] | None = None,
) -> Notice:
    """Assemble a notice carrying a single error.

    Args:
        notifier: Identity of the submitting library
        context: Context snapshot to attach
        error_class: Error class/type string
        message: Error message
        data: Optional environment/session/params maps, copied verbatim
        backtrace: Stack frames for the error, innermost first

    Returns:
        Notice ready for transmission
    """
    data = data or NoticeData()
    return Notice(
        notifier=notifier,
        context=context,
        errors=[ErrorEntry(type=error_class, message=message, backtrace=list(backtrace or []))],
        environment=data.environment,
        session=data.session,
        params=data.params,
    )


def encode_notice(notice: Notice) -> bytes:
    """Serialize a notice to its JSON wire format.

    Args:
        notice: Notice to encode

    Returns:
        UTF-8 encoded JSON document terminated by a newline

    Raises:
        NoticeEncodingError: If the notice is empty or holds values that
            cannot be represented in JSON
    """
    if not notice.errors:
        raise NoticeEncodingError("error encoding airbrake notice: notice has no errors")
    try:
        payload = json.dumps(notice.to_dict())
    except (TypeError, ValueError) as e:
        raise NoticeEncodingError(f"error encoding airbrake notice: {e}") from e
    return (payload + "\n").encode("utf-8")
