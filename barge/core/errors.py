# SPDX-License-Identifier: MIT
"""Custom exceptions for barge.

All barge exceptions inherit from BargeError, which carries a
human-readable message. Raw OSError and UnicodeError are not wrapped;
they propagate to the caller as-is.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class BargeError(Exception):
    """Base class for all barge exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(BargeError):
    """The project descriptor is missing, unreadable or malformed."""


class ProjectNotFoundError(ConfigError):
    """No barge.json was found in the directory or any of its parents."""


class InvalidValueError(BargeError):
    """A user-supplied enumeration token was not recognized."""


class LibraryResolutionError(BargeError):
    """An external library could not be resolved to flags.

    Attributes:
        library: Name of the library that failed to resolve.
    """

    def __init__(self, library: str, reason: str) -> None:
        self.library = library
        super().__init__(f"could not resolve library '{library}': {reason}")


class ToolInvocationError(BargeError):
    """A subprocess could not be spawned (e.g. the binary is missing).

    Attributes:
        command: The command that could not be started.
    """

    def __init__(self, command: Sequence[str], reason: str) -> None:
        self.command = list(command)
        name = self.command[0] if self.command else "<empty command>"
        super().__init__(f"failed to run {name}: {reason}")


class BuildFailedError(BargeError):
    """The build executor exited with a non-zero status.

    Attributes:
        returncode: Exit status of the build executor.
    """

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(
            f"one or more build rules failed (make exited with status {returncode})"
        )


class UnsupportedScriptKindError(BargeError):
    """A build step has a file extension barge cannot run.

    Attributes:
        path: Path of the offending build step.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"unsupported build step type: {self.path}")


class StepFailedError(BargeError):
    """A pre/post build step (or its compilation) exited non-zero.

    Attributes:
        path: Path of the failing build step.
        returncode: Exit status of the failing process.
    """

    def __init__(self, path: str | Path, returncode: int, what: str = "build step") -> None:
        self.path = Path(path)
        self.returncode = returncode
        super().__init__(f"{what} {self.path} failed with exit status {returncode}")
