# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for backtrace capture."""

import sys
from unittest.mock import patch

from copilot_airbrake.backtrace import (
    backtrace_from_traceback,
    capture_backtrace,
    internal_frame,
    is_internal,
)


@internal_frame
def hidden_reporter():
    return capture_backtrace()


@internal_frame
def hidden_wrapper():
    return hidden_reporter()


def visible_caller():
    return hidden_wrapper()


def visible_then_hidden():
    return hidden_reporter()


def raise_error():
    raise ValueError("boom")


class TestCaptureBacktrace:
    """Test suite for capture_backtrace."""

    def test_first_frame_is_caller(self):
        """Test the capture function itself is not recorded."""
        frames = capture_backtrace()
        assert frames[0].function.endswith("test_first_frame_is_caller")
        assert frames[0].file == __file__ or frames[0].file.endswith("test_backtrace.py")

    def test_line_numbers(self):
        """Test the recorded line is the calling line."""
        expected = sys._getframe().f_lineno + 1
        frames = capture_backtrace()
        assert frames[0].line == expected

    def test_leading_internal_frames_are_skipped(self):
        """Test a chain of internal frames is skipped."""
        frames = visible_caller()
        assert frames[0].function == "visible_caller"
        assert frames[1].function.endswith("test_leading_internal_frames_are_skipped")

    def test_skips_zero_frames_from_application_code(self):
        """Test nothing is skipped when the caller is not internal."""
        frames = capture_backtrace()
        names = [f.function for f in frames]
        assert names[0].endswith("test_skips_zero_frames_from_application_code")

    def test_only_leading_frames_are_filtered(self):
        """Test internal frames after the first accepted frame are kept."""

        @internal_frame
        def internal_outer(callback):
            return callback()

        def application_inner():
            return capture_backtrace()

        frames = internal_outer(application_inner)
        names = [f.function for f in frames]
        assert names[0].endswith("application_inner")
        assert any(name.endswith("internal_outer") for name in names)

    def test_walk_reaches_outermost_frame(self):
        """Test no depth cap is applied."""

        def recurse(depth):
            if depth == 0:
                return capture_backtrace()
            return recurse(depth - 1)

        frames = recurse(200)
        assert len(frames) > 200

    def test_empty_when_stack_unavailable(self):
        """Test an unavailable stack yields an empty trace."""
        with patch("copilot_airbrake.backtrace.inspect.currentframe", return_value=None):
            assert capture_backtrace() == []

    def test_internal_marker(self):
        """Test internal_frame returns the function unchanged."""

        def func():
            return 1

        assert internal_frame(func) is func
        assert is_internal(func.__code__)
        assert not is_internal(visible_then_hidden.__code__)


class TestBacktraceFromTraceback:
    """Test suite for backtrace_from_traceback."""

    def test_raise_site_first(self):
        """Test traceback frames are ordered innermost first."""
        try:
            raise_error()
        except ValueError as e:
            frames = backtrace_from_traceback(e.__traceback__)

        assert frames[0].function == "raise_error"
        assert frames[1].function.endswith("test_raise_site_first")

    def test_includes_outer_frames(self):
        """Test frames outside the handling scope follow the traceback."""

        def handler():
            try:
                raise_error()
            except ValueError as e:
                return backtrace_from_traceback(e.__traceback__)

        frames = handler()
        names = [f.function for f in frames]
        assert names[0] == "raise_error"
        assert names[1].endswith("handler")
        assert names[2].endswith("test_includes_outer_frames")

    def test_none_traceback(self):
        """Test a missing traceback yields an empty trace."""
        assert backtrace_from_traceback(None) == []
