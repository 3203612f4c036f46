# SPDX-License-Identifier: MIT
"""Pre- and post-build steps.

A build step is a path listed under pre_build_steps / post_build_steps
in barge.json. Its extension picks how it runs:

    .sh   bash <path>
    .py   the script's #! interpreter, or `env python3 <path>`
    .pl   perl <path>
    .c    compiled with the toolchain's C compiler, then executed
    .cpp  compiled with the toolchain's C++ compiler, then executed

Compiled steps are rebuilt on every run into
build/<target>/<prebuild|postbuild>/<stem>.

Every step, whatever its kind, sees the same set of BARGE_* environment
variables (see step_environment). A step that exits non-zero raises
StepFailedError, which stops the rest of the build.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from barge.core.descriptor import ProjectDescriptor
from barge.core.errors import StepFailedError, UnsupportedScriptKindError
from barge.core.target import BuildTarget
from barge.output import OutputConfig
from barge.toolchains import resolve_toolchain
from barge.util.commands import CommandRunner
from barge.util.vcs import VcsInfo

logger = logging.getLogger(__name__)

# Bump when a variable is renamed or removed.
ENV_VERSION = "1"


class ScriptKind(Enum):
    SHELL = "sh"
    PYTHON = "py"
    PERL = "pl"
    C_SOURCE = "c"
    CPP_SOURCE = "cpp"

    @classmethod
    def from_path(cls, path: str | Path) -> ScriptKind:
        """Detect the kind of a step from its extension.

        Raises:
            UnsupportedScriptKindError: For any other extension.
        """
        suffix = Path(path).suffix
        for kind in cls:
            if suffix == f".{kind.value}":
                return kind
        raise UnsupportedScriptKindError(path)


class StepRole(Enum):
    PREBUILD = "prebuild"
    POSTBUILD = "postbuild"

    def __str__(self) -> str:
        return self.value


def now() -> datetime:
    """Current local time with UTC offset."""
    return datetime.now().astimezone()


@dataclass(frozen=True)
class StepContext:
    """Everything a build step needs to know about the running build.

    Attributes:
        descriptor: The project descriptor.
        target: Build target being built.
        build_started: When the build invocation started.
        vcs: Git metadata (empty strings when unavailable).
        output: Output configuration (NO_COLOR is forwarded to steps).
        root: Project root; steps run with it as working directory.
    """

    descriptor: ProjectDescriptor
    target: BuildTarget
    build_started: datetime = field(default_factory=now)
    vcs: VcsInfo = field(default_factory=VcsInfo)
    output: OutputConfig = field(default_factory=OutputConfig)
    root: Path = Path(".")


def step_environment(
    context: StepContext, role: StepRole, step_started: datetime | None = None
) -> dict[str, str]:
    """The environment variables injected into a build step."""
    descriptor = context.descriptor
    started = step_started or now()
    env = {
        "BARGE_ENV_VERSION": ENV_VERSION,
        "BARGE_PROJECT_NAME": descriptor.name,
        "BARGE_PROJECT_VERSION": descriptor.effective("version"),
        "BARGE_PROJECT_AUTHORS": ", ".join(descriptor.effective("authors")),
        "BARGE_PROJECT_DESCRIPTION": descriptor.effective("description"),
        "BARGE_BUILD_TARGET": context.target.value,
        "BARGE_OBJECTS_DIR": context.target.object_dir,
        "BARGE_BINARY_DIR": context.target.binary_dir,
        "BARGE_BUILD_STEP_KIND": role.value,
        "BARGE_TOOLSET": descriptor.effective_toolset.value,
        "BARGE_GIT_COMMIT": context.vcs.commit.strip(),
        "BARGE_GIT_BRANCH": context.vcs.branch.strip(),
        "BARGE_BUILD_START_TIMESTAMP": context.build_started.isoformat(),
        "BARGE_STEP_START_TIMESTAMP": started.isoformat(),
    }
    if not context.output.color:
        env["NO_COLOR"] = "1"
    return env


def python_command(path: str, root: Path) -> list[str]:
    """Interpreter command for a Python step, honoring its #! line."""
    try:
        with open(root / path, encoding="utf-8") as f:
            first_line = f.readline()
    except (OSError, UnicodeDecodeError):
        first_line = ""
    if first_line.startswith("#!"):
        interpreter = shlex.split(first_line[2:].strip())
        if interpreter:
            return [*interpreter, path]
    return ["env", "python3", path]


def compiled_step_binary(path: str, role: StepRole, target: BuildTarget) -> str:
    """Where a C/C++ step is compiled to, relative to the project root."""
    return f"{target.binary_dir}/{role.value}/{Path(path).stem}"


class StepRunner:
    """Runs build steps for one build invocation."""

    def __init__(self, context: StepContext, runner: CommandRunner) -> None:
        self._context = context
        self._runner = runner
        self._handlers: dict[ScriptKind, Callable[[str, StepRole, dict[str, str]], None]] = {
            ScriptKind.SHELL: self._run_shell,
            ScriptKind.PYTHON: self._run_python,
            ScriptKind.PERL: self._run_perl,
            ScriptKind.C_SOURCE: self._run_c,
            ScriptKind.CPP_SOURCE: self._run_cpp,
        }

    def run(self, path: str, role: StepRole) -> None:
        """Run one step.

        Raises:
            UnsupportedScriptKindError: The extension is not supported.
            StepFailedError: The step (or its compilation) exited non-zero.
            ToolInvocationError: The interpreter or compiler is missing.
        """
        kind = ScriptKind.from_path(path)
        logger.info("Running %s step %s", role, path)
        env = step_environment(self._context, role)
        self._handlers[kind](path, role, env)

    def _execute(self, command: list[str], path: str, env: dict[str, str], what: str) -> None:
        result = self._runner.run(command, cwd=self._context.root, env=env, capture=False)
        if not result.ok:
            raise StepFailedError(path, result.returncode, what)

    def _run_shell(self, path: str, role: StepRole, env: dict[str, str]) -> None:
        self._execute(["bash", path], path, env, "shell script")

    def _run_perl(self, path: str, role: StepRole, env: dict[str, str]) -> None:
        self._execute(["perl", path], path, env, "Perl script")

    def _run_python(self, path: str, role: StepRole, env: dict[str, str]) -> None:
        self._execute(python_command(path, self._context.root), path, env, "Python script")

    def _run_c(self, path: str, role: StepRole, env: dict[str, str]) -> None:
        toolchain = resolve_toolchain(self._context.descriptor.effective_toolset)
        std = self._context.descriptor.effective("c_standard")
        self._compile_and_execute(path, role, env, toolchain.c_compiler, std)

    def _run_cpp(self, path: str, role: StepRole, env: dict[str, str]) -> None:
        toolchain = resolve_toolchain(self._context.descriptor.effective_toolset)
        std = self._context.descriptor.effective("cpp_standard")
        self._compile_and_execute(path, role, env, toolchain.cpp_compiler, std)

    def _compile_and_execute(
        self, path: str, role: StepRole, env: dict[str, str], compiler: str, std: str
    ) -> None:
        root = self._context.root
        binary = compiled_step_binary(path, role, self._context.target)
        binary_path = root / binary
        binary_path.parent.mkdir(parents=True, exist_ok=True)
        if binary_path.exists():
            binary_path.unlink()

        compile_result = self._runner.run(
            [compiler, f"-std={std}", path, "-o", binary], cwd=root, capture=False
        )
        if not compile_result.ok:
            raise StepFailedError(path, compile_result.returncode, "compilation of build step")

        self._execute([str(binary_path.absolute())], path, env, "build step")


def run_step(
    path: str, role: StepRole, context: StepContext, runner: CommandRunner
) -> None:
    """Run a single pre/post build step."""
    StepRunner(context, runner).run(path, role)
