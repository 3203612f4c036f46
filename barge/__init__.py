# SPDX-License-Identifier: MIT
"""
Barge: a build orchestrator for native C/C++/Fortran/COBOL projects.

Barge reads a declarative project descriptor (barge.json), synthesizes a
toolchain-specific Makefile build plan from it, feeds that plan to make,
and runs user supplied pre- and post-build steps around the build.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export commonly used classes for convenient imports
from barge.core.descriptor import ProjectDescriptor  # noqa: E402
from barge.core.project import Project  # noqa: E402
from barge.core.target import BuildTarget  # noqa: E402
from barge.toolchains import Toolset  # noqa: E402

__all__ = [
    "BuildTarget",
    "Project",
    "ProjectDescriptor",
    "Toolset",
    "__version__",
]
