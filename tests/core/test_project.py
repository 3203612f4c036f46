# SPDX-License-Identifier: MIT
"""Tests for barge.core.project module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from barge.core.descriptor import ArtifactKind, ProjectDescriptor
from barge.core.errors import (
    BuildFailedError,
    ConfigError,
    InvalidValueError,
    StepFailedError,
)
from barge.core.plan import BuildPlan, Rule
from barge.core.project import BuildState, Project, default_job_count, make_options
from barge.core.target import BuildTarget
from barge.generators import BaseGenerator
from barge.toolchains import Toolset
from barge.util.commands import CommandResult, RecordingCommandRunner


def make_project(
    root: Path,
    runner: RecordingCommandRunner,
    kind: ArtifactKind = ArtifactKind.EXECUTABLE,
    **kwargs,
) -> Project:
    (root / "src").mkdir(exist_ok=True)
    (root / "src" / "main.c").write_text("int main(void) { return 0; }\n")
    generator = kwargs.pop("generator", None)
    kwargs.setdefault("custom_makeopts", "-j1")
    descriptor = ProjectDescriptor(name="demo", project_type=kind, **kwargs)
    return Project(descriptor, root, runner=runner, generator=generator)


def fail_program(name: str, returncode: int = 1):
    def responder(command: list[str]) -> CommandResult | None:
        if command[0] == name:
            return CommandResult(command, returncode)
        return None

    return responder


class CannedGenerator(BaseGenerator):
    """Generator returning fixed plans and remembering what it was asked."""

    def __init__(self) -> None:
        super().__init__("canned")
        self.requests: list[tuple[str, BuildTarget | None]] = []

    def synthesize(self, descriptor, target, root):
        self.requests.append(("all", target))
        plan = BuildPlan(comment=f"canned {target}")
        plan.add_rule(Rule(["all"], recipe=["@true"], phony=True))
        return plan

    def synthesize_analyze(self, descriptor, root):
        self.requests.append(("analyze", None))
        plan = BuildPlan(comment="canned analysis")
        plan.add_rule(Rule(["analyze"], recipe=["@true"], phony=True))
        return plan


class TestJobs:
    """Tests for the default parallelism heuristic."""

    GIB = 1024 * 1024 * 1024

    def test_limited_by_cpus(self):
        assert default_job_count(cpu_count=4, available_memory=64 * self.GIB) == 4

    def test_limited_by_memory(self):
        assert default_job_count(cpu_count=16, available_memory=5 * self.GIB) == 2

    def test_never_below_one(self):
        assert default_job_count(cpu_count=8, available_memory=self.GIB // 2) == 1

    def test_custom_makeopts_are_split(self):
        d = ProjectDescriptor(
            name="demo",
            project_type=ArtifactKind.EXECUTABLE,
            custom_makeopts="-j3 --output-sync='target'",
        )
        assert make_options(d) == ["-j3", "--output-sync=target"]

    def test_default_makeopts(self):
        d = ProjectDescriptor(name="demo", project_type=ArtifactKind.EXECUTABLE)
        options = make_options(d)
        assert len(options) == 1
        assert options[0].startswith("-j")
        assert int(options[0][2:]) >= 1


class TestBuild:
    """Tests for the build state machine."""

    def test_make_receives_plan(self, tmp_path: Path):
        """Test that make is fed the rendered plan on stdin."""
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner)
        project.build(BuildTarget.DEBUG)

        make = [c for c in runner.commands if c.command[0] == "make"]
        assert len(make) == 1
        assert make[0].command == ["make", "-s", "-f", "-", "all", "-j1"]
        assert make[0].input == project.plan(BuildTarget.DEBUG).render()
        assert make[0].cwd == tmp_path
        assert not make[0].capture
        assert project.state is BuildState.SUCCEEDED

    def test_build_failure(self, tmp_path: Path):
        runner = RecordingCommandRunner(fail_program("make", 2))
        project = make_project(tmp_path, runner)
        with pytest.raises(BuildFailedError) as excinfo:
            project.build(BuildTarget.RELEASE)
        assert excinfo.value.returncode == 2
        assert project.state is BuildState.FAILED

    def test_failing_prebuild_step_prevents_make(self, tmp_path: Path):
        """Test that make never runs after a failed pre-build step."""
        runner = RecordingCommandRunner(fail_program("bash"))
        project = make_project(tmp_path, runner, pre_build_steps=("gen.sh",))
        with pytest.raises(StepFailedError):
            project.build(BuildTarget.DEBUG)
        assert "make" not in runner.programs()

    def test_unwritable_build_tree_fails(self, tmp_path: Path):
        """Test that a filesystem error during a step marks the build failed."""
        (tmp_path / "build").write_text("not a directory")
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner, pre_build_steps=("tools/gen.c",))
        with pytest.raises(OSError):
            project.build(BuildTarget.DEBUG)
        assert project.state is BuildState.FAILED
        assert "make" not in runner.programs()

    def test_postbuild_skipped_after_failed_build(self, tmp_path: Path):
        """Test that post-build steps never run after a failed build."""
        runner = RecordingCommandRunner(fail_program("make"))
        project = make_project(tmp_path, runner, post_build_steps=("pack.pl",))
        with pytest.raises(BuildFailedError):
            project.build(BuildTarget.DEBUG)
        assert "perl" not in runner.programs()

    def test_step_order(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        project = make_project(
            tmp_path, runner, pre_build_steps=("gen.sh",), post_build_steps=("pack.pl",)
        )
        project.build(BuildTarget.DEBUG)
        programs = [p for p in runner.programs() if p in ("bash", "make", "perl")]
        assert programs == ["bash", "make", "perl"]

    def test_load(self, tmp_path: Path):
        (tmp_path / "barge.json").write_text(
            json.dumps({"name": "demo", "project_type": "static_library"})
        )
        project = Project.load(tmp_path, runner=RecordingCommandRunner())
        assert project.descriptor.project_type is ArtifactKind.STATIC_LIBRARY
        assert project.artifact_path(BuildTarget.DEBUG) == tmp_path / "build/debug/libdemo.a"

    def test_load_without_descriptor(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            Project.load(tmp_path)


class TestOtherCommands:
    """Tests for rebuild, clean, analyze, run and debug."""

    def test_rebuild_removes_target_tree(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner)
        (tmp_path / "build" / "debug" / "obj").mkdir(parents=True)
        (tmp_path / "build" / "release").mkdir(parents=True)

        project.rebuild(BuildTarget.DEBUG)

        assert not (tmp_path / "build" / "debug").exists()
        assert (tmp_path / "build" / "release").exists()
        assert "make" in runner.programs()

    def test_clean(self, tmp_path: Path):
        project = make_project(tmp_path, RecordingCommandRunner())
        (tmp_path / "build" / "release").mkdir(parents=True)
        project.clean()
        assert not (tmp_path / "build").exists()
        project.clean()

    def test_analyze(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner)
        project.analyze()
        assert runner.commands[-1].command == ["make", "-s", "-f", "-", "analyze"]
        assert "clang-tidy" in runner.commands[-1].input

    def test_analyze_failure(self, tmp_path: Path):
        project = make_project(tmp_path, RecordingCommandRunner(fail_program("make")))
        with pytest.raises(BuildFailedError):
            project.analyze()

    def test_run(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner)
        assert project.run(BuildTarget.DEBUG, ["--flag"]) == 0
        last = runner.commands[-1].command
        assert last[0] == str((tmp_path / "build/debug/demo").absolute())
        assert last[1:] == ["--flag"]

    def test_run_exit_status(self, tmp_path: Path):
        artifact = str((tmp_path / "build/release/demo").absolute())
        runner = RecordingCommandRunner(fail_program(artifact, 3))
        project = make_project(tmp_path, runner)
        assert project.run(BuildTarget.RELEASE) == 3

    def test_debug_gnu(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner, toolset=Toolset.GNU)
        project.debug(BuildTarget.DEBUG, ["x"])
        program = str((tmp_path / "build/debug/demo").absolute())
        assert runner.commands[-1].command == ["gdb", "--args", program, "x"]

    def test_debug_llvm(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner)
        project.debug(BuildTarget.DEBUG, ["x"])
        program = str((tmp_path / "build/debug/demo").absolute())
        assert runner.commands[-1].command == ["lldb", program, "--", "x"]

    def test_run_requires_executable(self, tmp_path: Path):
        """Test that libraries cannot be run and nothing is built."""
        runner = RecordingCommandRunner()
        project = make_project(tmp_path, runner, ArtifactKind.SHARED_LIBRARY)
        with pytest.raises(InvalidValueError):
            project.run(BuildTarget.DEBUG)
        assert runner.commands == []


class TestGenerator:
    """Tests for plugging a different plan generator into a Project."""

    def test_build_uses_generator_plan(self, tmp_path: Path):
        """Test that make is fed exactly the plan the generator returns."""
        runner = RecordingCommandRunner()
        generator = CannedGenerator()
        project = make_project(tmp_path, runner, generator=generator)
        project.build(BuildTarget.RELEASE)

        make = [c for c in runner.commands if c.command[0] == "make"]
        assert make[0].input == "# canned release\n\n.PHONY: all\nall:\n\t@true\n"
        assert generator.requests == [("all", BuildTarget.RELEASE)]
        assert "clang" not in runner.programs()

    def test_analyze_uses_generator_plan(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        generator = CannedGenerator()
        project = make_project(tmp_path, runner, generator=generator)
        project.analyze()
        assert runner.commands[-1].input.startswith("# canned analysis\n")
        assert generator.requests == [("analyze", None)]
