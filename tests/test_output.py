# SPDX-License-Identifier: MIT
"""Tests for barge.output."""

import io
import logging

from barge.output import ColorFormatter, OutputConfig


class Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


class TestOutputConfig:
    def test_terminal(self):
        assert OutputConfig.from_environment({}, Terminal()).color is True

    def test_no_color_set(self):
        """Test that a non-empty NO_COLOR disables color."""
        assert OutputConfig.from_environment({"NO_COLOR": "1"}, Terminal()).color is False

    def test_empty_no_color_is_ignored(self):
        assert OutputConfig.from_environment({"NO_COLOR": ""}, Terminal()).color is True

    def test_not_a_terminal(self):
        """Test that redirected output is never colored."""
        assert OutputConfig.from_environment({}, io.StringIO()).color is False


class TestColorFormatter:
    def make_record(self, level: int) -> logging.LogRecord:
        return logging.LogRecord("barge", level, __file__, 1, "hello", None, None)

    def test_wraps_in_color(self):
        text = ColorFormatter("%(levelname)s: %(message)s").format(
            self.make_record(logging.ERROR)
        )
        assert text.startswith("\033[")
        assert text.endswith("\033[0m")
        assert "ERROR: hello" in text

    def test_unknown_level_is_plain(self):
        text = ColorFormatter("%(message)s").format(self.make_record(25))
        assert text == "hello"
