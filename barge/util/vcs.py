# SPDX-License-Identifier: MIT
"""Best-effort git metadata for build steps.

Missing git, a directory that is not a repository, or a detached HEAD
all produce empty strings. None of these ever fail a build.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from barge.core.errors import ToolInvocationError
from barge.util.commands import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VcsInfo:
    commit: str = ""
    branch: str = ""


def _git(runner: CommandRunner, args: list[str], cwd: Path | None) -> str:
    try:
        result = runner.run(["git", *args], cwd=cwd)
    except ToolInvocationError as e:
        logger.debug("git unavailable: %s", e)
        return ""
    if not result.ok:
        return ""
    return result.stdout.strip()


def get_vcs_info(runner: CommandRunner, cwd: Path | None = None) -> VcsInfo:
    """Current commit hash and branch name, empty when unknown."""
    return VcsInfo(
        commit=_git(runner, ["rev-parse", "HEAD"], cwd),
        branch=_git(runner, ["branch", "--show-current"], cwd),
    )
