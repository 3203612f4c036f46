# SPDX-License-Identifier: MIT
"""Tests for barge.steps (pre- and post-build steps)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from barge.core.descriptor import ArtifactKind, ProjectDescriptor
from barge.core.errors import StepFailedError, ToolInvocationError, UnsupportedScriptKindError
from barge.core.target import BuildTarget
from barge.output import OutputConfig
from barge.steps import (
    ENV_VERSION,
    ScriptKind,
    StepContext,
    StepRole,
    compiled_step_binary,
    python_command,
    run_step,
    step_environment,
)
from barge.toolchains import Toolset
from barge.util.commands import CommandResult, RecordingCommandRunner
from barge.util.vcs import VcsInfo

STARTED = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone(timedelta(hours=2)))


def make_context(root: Path, **kwargs) -> StepContext:
    descriptor = ProjectDescriptor(
        name="demo",
        project_type=ArtifactKind.EXECUTABLE,
        version="1.0.0",
        authors=("Ada", "Grace"),
        toolset=kwargs.pop("toolset", None),
        c_standard=kwargs.pop("c_standard", None),
    )
    return StepContext(
        descriptor=descriptor,
        target=kwargs.pop("target", BuildTarget.DEBUG),
        build_started=STARTED,
        vcs=kwargs.pop("vcs", VcsInfo(commit="abc123\n", branch="main\n")),
        output=kwargs.pop("output", OutputConfig()),
        root=root,
    )


class TestScriptKind:
    """Script kind dispatch by extension."""

    @pytest.mark.parametrize(
        "path,kind",
        [
            ("scripts/gen.sh", ScriptKind.SHELL),
            ("scripts/gen.py", ScriptKind.PYTHON),
            ("scripts/gen.pl", ScriptKind.PERL),
            ("scripts/gen.c", ScriptKind.C_SOURCE),
            ("scripts/gen.cpp", ScriptKind.CPP_SOURCE),
        ],
    )
    def test_known(self, path, kind):
        assert ScriptKind.from_path(path) is kind

    @pytest.mark.parametrize("path", ["gen.rb", "gen", "gen.SH", "gen.cc"])
    def test_unsupported(self, path):
        with pytest.raises(UnsupportedScriptKindError) as excinfo:
            ScriptKind.from_path(path)
        assert excinfo.value.path == Path(path)


class TestStepEnvironment:
    """Tests for the BARGE_* variables given to steps."""

    def test_variables(self, tmp_path: Path):
        context = make_context(tmp_path, toolset=Toolset.GNU)
        env = step_environment(context, StepRole.PREBUILD, step_started=STARTED)
        assert env == {
            "BARGE_ENV_VERSION": ENV_VERSION,
            "BARGE_PROJECT_NAME": "demo",
            "BARGE_PROJECT_VERSION": "1.0.0",
            "BARGE_PROJECT_AUTHORS": "Ada, Grace",
            "BARGE_PROJECT_DESCRIPTION": "",
            "BARGE_BUILD_TARGET": "debug",
            "BARGE_OBJECTS_DIR": "build/debug/obj",
            "BARGE_BINARY_DIR": "build/debug",
            "BARGE_BUILD_STEP_KIND": "prebuild",
            "BARGE_TOOLSET": "gnu",
            "BARGE_GIT_COMMIT": "abc123",
            "BARGE_GIT_BRANCH": "main",
            "BARGE_BUILD_START_TIMESTAMP": "2024-05-01T12:30:00+02:00",
            "BARGE_STEP_START_TIMESTAMP": "2024-05-01T12:30:00+02:00",
        }

    def test_no_vcs(self, tmp_path: Path):
        context = make_context(tmp_path, vcs=VcsInfo(), target=BuildTarget.RELEASE)
        env = step_environment(context, StepRole.POSTBUILD)
        assert env["BARGE_GIT_COMMIT"] == ""
        assert env["BARGE_GIT_BRANCH"] == ""
        assert env["BARGE_BUILD_STEP_KIND"] == "postbuild"
        assert env["BARGE_BINARY_DIR"] == "build/release"
        assert env["BARGE_TOOLSET"] == "llvm"

    def test_no_color(self, tmp_path: Path):
        """Test that disabled color output is forwarded as NO_COLOR."""
        plain = make_context(tmp_path, output=OutputConfig(color=False))
        colored = make_context(tmp_path)
        assert step_environment(plain, StepRole.PREBUILD)["NO_COLOR"] == "1"
        assert "NO_COLOR" not in step_environment(colored, StepRole.PREBUILD)

    def test_step_timestamp_has_offset(self, tmp_path: Path):
        env = step_environment(make_context(tmp_path), StepRole.PREBUILD)
        stamp = datetime.fromisoformat(env["BARGE_STEP_START_TIMESTAMP"])
        assert stamp.utcoffset() is not None


class TestPythonCommand:
    def test_shebang(self, tmp_path: Path):
        (tmp_path / "gen.py").write_text("#!/usr/bin/env python3 -u\nprint('hi')\n")
        assert python_command("gen.py", tmp_path) == ["/usr/bin/env", "python3", "-u", "gen.py"]

    def test_without_shebang(self, tmp_path: Path):
        (tmp_path / "gen.py").write_text("print('hi')\n")
        assert python_command("gen.py", tmp_path) == ["env", "python3", "gen.py"]

    def test_missing_file(self, tmp_path: Path):
        assert python_command("gone.py", tmp_path) == ["env", "python3", "gone.py"]


class TestRunStep:
    """Tests for running each kind of step."""

    def test_shell(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        run_step("scripts/gen.sh", StepRole.PREBUILD, make_context(tmp_path), runner)
        record = runner.commands[0]
        assert record.command == ["bash", "scripts/gen.sh"]
        assert record.cwd == tmp_path
        assert record.env["BARGE_BUILD_STEP_KIND"] == "prebuild"
        assert not record.capture

    def test_perl(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        run_step("pack.pl", StepRole.POSTBUILD, make_context(tmp_path), runner)
        assert runner.commands[0].command == ["perl", "pack.pl"]
        assert runner.commands[0].env["BARGE_BUILD_STEP_KIND"] == "postbuild"

    def test_python(self, tmp_path: Path):
        (tmp_path / "gen.py").write_text("print('hi')\n")
        runner = RecordingCommandRunner()
        run_step("gen.py", StepRole.PREBUILD, make_context(tmp_path), runner)
        assert runner.commands[0].command == ["env", "python3", "gen.py"]

    def test_compiled_c(self, tmp_path: Path):
        """Test that a C step is compiled into the target tree, then run."""
        runner = RecordingCommandRunner()
        context = make_context(tmp_path, toolset=Toolset.GNU, c_standard="c99")
        binary = tmp_path / "build/debug/prebuild/version"
        binary.parent.mkdir(parents=True)
        binary.write_text("stale")

        run_step("tools/version.c", StepRole.PREBUILD, context, runner)

        assert not binary.exists()
        compile_cmd, run_cmd = runner.commands
        assert compile_cmd.command == [
            "gcc",
            "-std=c99",
            "tools/version.c",
            "-o",
            "build/debug/prebuild/version",
        ]
        assert compile_cmd.cwd == tmp_path
        assert run_cmd.command == [str(binary.absolute())]
        assert run_cmd.env["BARGE_PROJECT_NAME"] == "demo"

    def test_compiled_cpp(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        context = make_context(tmp_path, target=BuildTarget.RELEASE)
        run_step("tools/stamp.cpp", StepRole.POSTBUILD, context, runner)
        assert runner.commands[0].command == [
            "clang++",
            "-std=c++17",
            "tools/stamp.cpp",
            "-o",
            "build/release/postbuild/stamp",
        ]

    def test_compiled_step_binary(self):
        assert (
            compiled_step_binary("a/b/gen.c", StepRole.POSTBUILD, BuildTarget.DEBUG)
            == "build/debug/postbuild/gen"
        )

    def test_failing_step(self, tmp_path: Path):
        runner = RecordingCommandRunner(lambda command: CommandResult(command, 4))
        with pytest.raises(StepFailedError) as excinfo:
            run_step("gen.sh", StepRole.PREBUILD, make_context(tmp_path), runner)
        assert excinfo.value.returncode == 4
        assert excinfo.value.path == Path("gen.sh")

    def test_failing_compilation_skips_execution(self, tmp_path: Path):
        runner = RecordingCommandRunner(lambda command: CommandResult(command, 1))
        with pytest.raises(StepFailedError, match="compilation"):
            run_step("gen.c", StepRole.PREBUILD, make_context(tmp_path), runner)
        assert len(runner.commands) == 1

    def test_missing_interpreter(self, tmp_path: Path):
        def responder(command: list[str]) -> CommandResult:
            raise ToolInvocationError(command, "No such file or directory")

        with pytest.raises(ToolInvocationError):
            run_step(
                "gen.pl",
                StepRole.PREBUILD,
                make_context(tmp_path),
                RecordingCommandRunner(responder),
            )

    def test_unsupported_runs_nothing(self, tmp_path: Path):
        runner = RecordingCommandRunner()
        with pytest.raises(UnsupportedScriptKindError):
            run_step("gen.rb", StepRole.PREBUILD, make_context(tmp_path), runner)
        assert runner.commands == []
