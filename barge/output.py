# SPDX-License-Identifier: MIT
"""Output configuration.

Whether barge may color its output is decided once, at startup, and
passed explicitly to the code that prints or spawns user steps.
Build plan synthesis never looks at it.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

_LEVEL_COLORS = {
    logging.DEBUG: "\033[2m",
    logging.INFO: "\033[1;34m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[1;31m",
    logging.CRITICAL: "\033[1;31m",
}
_RESET = "\033[0m"


@dataclass(frozen=True)
class OutputConfig:
    """How user-facing output is rendered.

    Attributes:
        color: Emit ANSI colors.
    """

    color: bool = True

    @classmethod
    def from_environment(
        cls, environ: Mapping[str, str] | None = None, stream: TextIO | None = None
    ) -> OutputConfig:
        """Color only on a terminal, and only while NO_COLOR is unset or empty.

        See https://no-color.org. The stream defaults to stderr, where the
        log output goes.
        """
        environ = os.environ if environ is None else environ
        stream = sys.stderr if stream is None else stream
        if environ.get("NO_COLOR"):
            return cls(color=False)
        return cls(color=stream.isatty())


class ColorFormatter(logging.Formatter):
    """Formatter that wraps each record in a color chosen by level."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        if color is None:
            return text
        return f"{color}{text}{_RESET}"
