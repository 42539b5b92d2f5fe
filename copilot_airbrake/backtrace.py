# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Stack trace capture for notices.

Backtraces are ordered innermost first, so the error site is the first
frame. Leading frames that belong to this library are hidden. A function
opts into hiding with the ``internal_frame`` decorator, which records its
code object; no function-name matching is involved.
"""

import inspect
from itertools import chain
from types import CodeType, FrameType, TracebackType
from typing import Callable, Iterable, Iterator, TypeVar

from .models import StackFrame

F = TypeVar("F", bound=Callable)

_INTERNAL_CODES: set[CodeType] = set()


def internal_frame(func: F) -> F:
    """Mark a function as library-internal.

    The function is returned unchanged. Its frames are skipped while they
    lead a captured backtrace.
    """
    _INTERNAL_CODES.add(func.__code__)
    return func


def is_internal(code: CodeType) -> bool:
    return code in _INTERNAL_CODES


def _function_name(code: CodeType) -> str:
    return getattr(code, "co_qualname", code.co_name)


def _walk_stack(frame: FrameType | None) -> Iterator[tuple[CodeType, int]]:
    while frame is not None:
        yield frame.f_code, frame.f_lineno
        frame = frame.f_back


def _walk_traceback(tb: TracebackType | None) -> list[tuple[CodeType, int]]:
    entries = []
    while tb is not None:
        entries.append((tb.tb_frame.f_code, tb.tb_lineno))
        tb = tb.tb_next
    return entries


def _collect(entries: Iterable[tuple[CodeType, int]]) -> list[StackFrame]:
    backtrace: list[StackFrame] = []
    for code, lineno in entries:
        # only leading frames are filtered
        if not backtrace and is_internal(code):
            continue
        backtrace.append(StackFrame(file=code.co_filename, line=lineno, function=_function_name(code)))
    return backtrace


@internal_frame
def capture_backtrace(start: FrameType | None = None) -> list[StackFrame]:
    """Capture the current call stack.

    Args:
        start: Frame to start walking from (defaults to the caller)

    Returns:
        Stack frames, innermost first; empty if the stack is unavailable
    """
    if start is None:
        current = inspect.currentframe()
        if current is None:
            return []
        start = current.f_back
        del current
    return _collect(_walk_stack(start))


@internal_frame
def backtrace_from_traceback(tb: TracebackType | None) -> list[StackFrame]:
    """Build a backtrace for an exception that has already unwound.

    The traceback frames come first, raise site first, followed by the
    frames that were still on the stack outside the handling scope.

    Args:
        tb: Traceback of the exception

    Returns:
        Stack frames, innermost first
    """
    if tb is None:
        return []
    inner = reversed(_walk_traceback(tb))
    outer = _walk_stack(tb.tb_frame.f_back)
    return _collect(chain(inner, outer))
