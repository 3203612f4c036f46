# SPDX-License-Identifier: MIT
"""Command runner abstraction used for every subprocess barge starts.

All external tools (pkg-config, the compilers, make, git, build step
interpreters) go through a CommandRunner, so the whole synthesis
pipeline can be exercised with a RecordingCommandRunner instead of a
real toolchain.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from barge.core.errors import ToolInvocationError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of an executed command.

    stdout/stderr are empty strings when output was not captured.
    """

    command: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_command(command: Sequence[str]) -> str:
    """Render a command as a copy-pasteable shell string."""
    return " ".join(shlex.quote(str(part)) for part in command)


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
        capture: bool = True,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            command: Program and arguments.
            cwd: Working directory (default: current directory).
            env: Variables added on top of the inherited environment.
            input: Text written to the command's standard input.
            capture: Capture stdout/stderr instead of inheriting them.

        Returns:
            The command result; a non-zero exit status is not an error here.

        Raises:
            ToolInvocationError: If the command could not be started.
        """
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
        capture: bool = True,
    ) -> CommandResult:
        merged_env: dict[str, str] | None = None
        if env is not None:
            merged_env = os.environ.copy()
            merged_env.update(env)

        logger.debug("Running: %s", format_command(command))
        try:
            process = subprocess.run(
                [str(part) for part in command],
                cwd=str(cwd) if cwd else None,
                env=merged_env,
                input=input,
                capture_output=capture,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ToolInvocationError(command, e.strerror or str(e)) from e

        return CommandResult(
            command=list(command),
            returncode=process.returncode,
            stdout=process.stdout or "",
            stderr=process.stderr or "",
        )


Responder = Callable[[list[str]], CommandResult | None]


@dataclass
class RecordedCommand:
    """A command seen by a RecordingCommandRunner."""

    command: list[str]
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    input: str | None = None
    capture: bool = True


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    An optional responder decides the result of each command. It may
    return a CommandResult, return None for the default (exit 0, no
    output), or raise (e.g. ToolInvocationError to simulate a missing
    binary).

    Example:
        def responder(command):
            if command[0] == "pkg-config":
                return CommandResult(command, 0, stdout="-lz\\n")
            return None

        runner = RecordingCommandRunner(responder)
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.commands: list[RecordedCommand] = []
        self._responder = responder

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
        capture: bool = True,
    ) -> CommandResult:
        argv = [str(part) for part in command]
        self.commands.append(
            RecordedCommand(
                command=argv,
                cwd=cwd,
                env=dict(env) if env else {},
                input=input,
                capture=capture,
            )
        )
        if self._responder is not None:
            result = self._responder(argv)
            if result is not None:
                return result
        return CommandResult(command=argv, returncode=0)

    def programs(self) -> list[str]:
        """Names of the programs run, in order."""
        return [record.command[0] for record in self.commands]

    def iter_formatted(self) -> Iterator[str]:
        for record in self.commands:
            yield format_command(record.command)
