# SPDX-License-Identifier: MIT
"""External library resolution.

Declared libraries become compile and link flag fragments. pkg-config
entries are queried twice (--cflags, --libs); manual entries are used
verbatim. Fragments are concatenated in declaration order, which
matters for static link order.

Example:
    libraries = [PackageLookup("zlib"), ManualLibrary("-Ivendor", "-lfoo")]
    cflags, ldflags = resolve_libraries(libraries, runner)
    # cflags  == "<zlib cflags> -Ivendor"
    # ldflags == "-lz -lfoo"
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from barge.core.descriptor import LibraryDependency, ManualLibrary, PackageLookup
from barge.core.errors import LibraryResolutionError, ToolInvocationError
from barge.core.flags import join_flags
from barge.util.commands import CommandRunner

logger = logging.getLogger(__name__)

PKG_CONFIG = "pkg-config"


def query_pkg_config(name: str, mode: str, runner: CommandRunner) -> str:
    """Run `pkg-config <name> <mode>` and return its stripped output.

    Raises:
        LibraryResolutionError: If pkg-config is missing or does not
            know the package.
    """
    command = [PKG_CONFIG, name, mode]
    try:
        result = runner.run(command)
    except ToolInvocationError as e:
        raise LibraryResolutionError(name, f"{PKG_CONFIG} is not available ({e})") from e

    if not result.ok:
        reason = result.stderr.strip() or f"{PKG_CONFIG} exited with status {result.returncode}"
        raise LibraryResolutionError(name, reason)
    return result.stdout.strip()


def resolve_library(library: LibraryDependency, runner: CommandRunner) -> tuple[str, str]:
    """Compile and link flags for a single library."""
    if isinstance(library, PackageLookup):
        cflags = query_pkg_config(library.name, "--cflags", runner)
        ldflags = query_pkg_config(library.name, "--libs", runner)
        logger.debug("pkg-config %s: cflags=%r ldflags=%r", library.name, cflags, ldflags)
        return cflags, ldflags
    if isinstance(library, ManualLibrary):
        return library.cflags.strip(), library.ldflags.strip()
    raise TypeError(f"unknown library dependency: {library!r}")


def resolve_libraries(
    libraries: Iterable[LibraryDependency], runner: CommandRunner
) -> tuple[str, str]:
    """Resolve all libraries to (compile_flags, link_flags)."""
    cflags: list[str] = []
    ldflags: list[str] = []
    for library in libraries:
        library_cflags, library_ldflags = resolve_library(library, runner)
        cflags.append(library_cflags)
        ldflags.append(library_ldflags)
    return join_flags(*cflags), join_flags(*ldflags)
