# SPDX-License-Identifier: MIT
"""What a Project needs from a build plan backend.

A Project never builds a plan itself. It asks its generator for the
plan of the 'all' rule (one per build target) and for the plan of the
'analyze' rule, and pipes the rendered text into make. Tests hand a
Project a generator returning canned plans.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from barge.core.descriptor import ProjectDescriptor
from barge.core.plan import BuildPlan
from barge.core.target import BuildTarget


@runtime_checkable
class Generator(Protocol):
    """Source of the build and analysis plans of a project."""

    @property
    def name(self) -> str: ...

    def synthesize(
        self, descriptor: ProjectDescriptor, target: BuildTarget, root: Path
    ) -> BuildPlan:
        """Plan whose 'all' rule produces the artifact for a target."""
        ...

    def synthesize_analyze(self, descriptor: ProjectDescriptor, root: Path) -> BuildPlan:
        """Plan whose 'analyze' rule runs static analysis."""
        ...


class BaseGenerator:
    """Named generator; subclasses supply both plans."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def synthesize(
        self, descriptor: ProjectDescriptor, target: BuildTarget, root: Path
    ) -> BuildPlan:
        raise NotImplementedError(f"{self._name} cannot synthesize a build plan")

    def synthesize_analyze(self, descriptor: ProjectDescriptor, root: Path) -> BuildPlan:
        raise NotImplementedError(f"{self._name} cannot synthesize an analysis plan")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"
