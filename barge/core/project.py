# SPDX-License-Identifier: MIT
"""Project orchestration.

A Project ties a loaded descriptor to a project root and a command
runner, and drives one build invocation through its states:

    RESOLVING -> SYNTHESIZING -> EXECUTING -> SUCCEEDED | FAILED

Pre-build steps run while resolving, before the plan is synthesized, so
they may generate sources. A failing pre-build step means make is never
started; a failing build means post-build steps never run. There are no
retries.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import time
from enum import Enum
from pathlib import Path

import psutil

from barge.core import descriptor as descriptor_io
from barge.core.descriptor import DESCRIPTOR_FILE, ArtifactKind, ProjectDescriptor
from barge.core.errors import BargeError, BuildFailedError, InvalidValueError
from barge.core.plan import BuildPlan
from barge.core.target import BUILD_ROOT, BuildTarget
from barge.generators.generator import Generator
from barge.generators.makefile import MakefileGenerator
from barge.output import OutputConfig
from barge.steps import StepContext, StepRole, StepRunner, now
from barge.toolchains import resolve_toolchain
from barge.util.commands import CommandRunner, SubprocessCommandRunner
from barge.util.vcs import get_vcs_info

logger = logging.getLogger(__name__)

MAKE = "make"
# Memory assumed to be needed by each parallel compile job.
JOB_MEMORY_BYTES = 2 * 1024 * 1024 * 1024


class BuildState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    SYNTHESIZING = "synthesizing"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def default_job_count(cpu_count: int | None = None, available_memory: int | None = None) -> int:
    """Parallel job count from CPU count and available memory.

    Each job is assumed to need JOB_MEMORY_BYTES; the result is never
    below 1.
    """
    if cpu_count is None:
        cpu_count = psutil.cpu_count() or 1
    if available_memory is None:
        available_memory = psutil.virtual_memory().available
    return max(1, min(cpu_count, available_memory // JOB_MEMORY_BYTES))


def make_options(descriptor: ProjectDescriptor) -> list[str]:
    """Options passed to make: the custom ones, or a computed -jN."""
    custom = descriptor.effective("custom_makeopts")
    if custom is not None:
        return shlex.split(custom)
    return [f"-j{default_job_count()}"]


class Project:
    """A barge project rooted at a directory containing barge.json.

    The runner starts every external program. The generator produces the
    plans fed to make and defaults to a MakefileGenerator sharing that runner.

    Example:
        project = Project.load(Path("."))
        project.build(BuildTarget.DEBUG)

    Attributes:
        descriptor: The loaded project descriptor.
        root: Project root directory.
        state: State of the current (or last) build invocation.
    """

    def __init__(
        self,
        descriptor: ProjectDescriptor,
        root: Path | str = ".",
        *,
        runner: CommandRunner | None = None,
        output: OutputConfig | None = None,
        generator: Generator | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.root = Path(root)
        self.state = BuildState.IDLE
        self._runner = runner or SubprocessCommandRunner()
        self._output = output or OutputConfig()
        self._generator = generator or MakefileGenerator(self._runner)

    @classmethod
    def load(
        cls,
        root: Path | str = ".",
        *,
        runner: CommandRunner | None = None,
        output: OutputConfig | None = None,
    ) -> Project:
        """Load <root>/barge.json and create a Project for it."""
        root = Path(root)
        descriptor = descriptor_io.load(root / DESCRIPTOR_FILE)
        return cls(descriptor, root, runner=runner, output=output)

    def artifact_path(self, target: BuildTarget) -> Path:
        return self.root / target.binary_dir / self.descriptor.artifact_name

    def plan(self, target: BuildTarget) -> BuildPlan:
        """Synthesize the build plan without executing it."""
        return self._generator.synthesize(self.descriptor, target, self.root)

    def build(self, target: BuildTarget) -> None:
        """Run pre-build steps, build with make, then run post-build steps.

        Raises:
            StepFailedError: A pre- or post-build step failed.
            BuildFailedError: make exited non-zero.
            BargeError: Any other resolution or synthesis failure.
            OSError: The build tree or a step file could not be written or read.
        """
        logger.info("Building project with %s configuration", target)
        start = time.monotonic()
        self.state = BuildState.RESOLVING
        try:
            options = make_options(self.descriptor)
            context = StepContext(
                descriptor=self.descriptor,
                target=target,
                build_started=now(),
                vcs=get_vcs_info(self._runner, self.root),
                output=self._output,
                root=self.root,
            )
            steps = StepRunner(context, self._runner)
            for step in self.descriptor.effective("pre_build_steps"):
                steps.run(step, StepRole.PREBUILD)

            self.state = BuildState.SYNTHESIZING
            plan = self.plan(target)

            self.state = BuildState.EXECUTING
            self._execute(plan, "all", options)

            for step in self.descriptor.effective("post_build_steps"):
                steps.run(step, StepRole.POSTBUILD)
        except (BargeError, OSError, UnicodeError):
            self.state = BuildState.FAILED
            logger.error("Build failed")
            raise

        self.state = BuildState.SUCCEEDED
        logger.info("Build finished in %.2f seconds", time.monotonic() - start)

    def _execute(self, plan: BuildPlan, rule: str, options: list[str]) -> None:
        command = [MAKE, "-s", "-f", "-", rule, *options]
        result = self._runner.run(command, cwd=self.root, input=plan.render(), capture=False)
        if not result.ok:
            raise BuildFailedError(result.returncode)

    def rebuild(self, target: BuildTarget) -> None:
        """Remove the target's build tree, then build."""
        logger.info("Removing build artifacts for %s", target)
        _remove_directory(self.root / target.binary_dir)
        self.build(target)

    def analyze(self) -> None:
        """Run static analysis over the C and C++ sources."""
        logger.info("Running static analysis on project")
        plan = self._generator.synthesize_analyze(self.descriptor, self.root)
        self._execute(plan, "analyze", [])

    def clean(self) -> None:
        """Remove every build artifact."""
        logger.info("Removing build artifacts")
        _remove_directory(self.root / BUILD_ROOT)

    def run(self, target: BuildTarget, arguments: list[str] | None = None) -> int:
        """Build, then run the executable. Returns its exit status."""
        self._require_executable()
        self.build(target)
        path = self.artifact_path(target)
        logger.info("Running executable %s", path)
        result = self._runner.run(
            [str(path.absolute()), *(arguments or [])], cwd=self.root, capture=False
        )
        return result.returncode

    def debug(self, target: BuildTarget, arguments: list[str] | None = None) -> int:
        """Build, then run the executable under the toolchain's debugger."""
        self._require_executable()
        self.build(target)
        path = self.artifact_path(target)
        toolchain = resolve_toolchain(self.descriptor.effective_toolset)
        logger.info("Running executable %s in the debugger", path)
        command = toolchain.debug_command(str(path.absolute()), list(arguments or []))
        result = self._runner.run(command, cwd=self.root, capture=False)
        return result.returncode

    def _require_executable(self) -> None:
        if self.descriptor.project_type is not ArtifactKind.EXECUTABLE:
            raise InvalidValueError("only executable projects can be run")

    def __repr__(self) -> str:
        return f"Project({self.descriptor.name!r}, root={str(self.root)!r})"


def _remove_directory(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
