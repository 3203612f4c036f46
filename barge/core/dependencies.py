# SPDX-License-Identifier: MIT
"""Header dependency extraction.

barge does not parse C or C++. For each compiled unit it asks the
compiler for make-compatible dependency rules (-MM) with the object
path retargeted into the build tree (-MT), and pastes the resulting
fragments into the build plan.

Extraction is best-effort: a source whose dependencies cannot be
extracted simply has no dependency line, which makes it rebuild only
when the source itself changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from barge.core.errors import InvalidValueError, ToolInvocationError
from barge.core.sources import Language, SourceFile
from barge.core.target import BuildTarget
from barge.toolchains.toolchain import Toolchain
from barge.util.commands import CommandRunner

logger = logging.getLogger(__name__)

INCLUDE_FLAGS = ("-Iinclude", "-Isrc")


def dependency_command(
    source: SourceFile, target: BuildTarget, toolchain: Toolchain
) -> list[str]:
    """Compiler invocation printing the dependency rule for one source."""
    if not source.is_compiled or source.language is None:
        raise InvalidValueError(f"{source.path} is not a compiled source")
    compiler = toolchain.compiler_for(source.language.value)
    return [
        compiler,
        "-MM",
        "-MT",
        target.object_path(source.path),
        *INCLUDE_FLAGS,
        source.path,
    ]


def extract_dependencies(
    sources: Iterable[SourceFile],
    target: BuildTarget,
    language: Language,
    toolchain: Toolchain,
    runner: CommandRunner,
    cwd: Path | None = None,
) -> str:
    """Dependency rules for all compiled units of one language.

    Args:
        sources: Discovered sources; units of other languages are skipped.
        target: Build target whose object directory the rules point at.
        language: Language.C or Language.CPP.
        toolchain: Resolved toolchain providing the compiler.
        runner: Command runner.
        cwd: Project root the source paths are relative to.

    Returns:
        The concatenated make rules, with trailing whitespace removed.
    """
    units = [s for s in sources if s.is_compiled and s.language is language]
    fragments: list[str] = []
    spawned = 0

    for source in units:
        command = dependency_command(source, target, toolchain)
        try:
            result = runner.run(command, cwd=cwd)
        except ToolInvocationError as e:
            logger.debug("Skipping dependencies of %s: %s", source.path, e)
            continue
        except UnicodeDecodeError as e:
            spawned += 1
            logger.debug("Skipping dependencies of %s: undecodable output (%s)", source.path, e)
            continue
        spawned += 1
        if not result.ok:
            logger.debug(
                "Skipping dependencies of %s: %s exited with status %d",
                source.path,
                command[0],
                result.returncode,
            )
            continue
        fragments.append(result.stdout)

    if units and spawned == 0:
        logger.warning(
            "Could not run %s for any %s source; header dependencies are not tracked",
            toolchain.compiler_for(language.value),
            language.value,
        )

    return "".join(fragments).rstrip()
