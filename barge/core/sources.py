# SPDX-License-Identifier: MIT
"""Source discovery.

Sources are found by scanning the conventional src/ directory and
classifying files by extension. The result is recomputed on every
build and is always sorted, so synthesis never depends on the order
the filesystem happens to list directories in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from barge.core.target import SOURCE_DIR

logger = logging.getLogger(__name__)


class SourceRole(Enum):
    COMPILED = "compiled"
    HEADER = "header"
    LINKER_SCRIPT = "linker_script"


class Language(Enum):
    C = "c"
    CPP = "cpp"
    ASSEMBLY = "assembly"
    FORTRAN = "fortran"
    COBOL = "cobol"


class DiscoveryMode(Enum):
    ALL = "all"
    COMPILED_ONLY = "compiled_only"
    LINKER_SCRIPTS_ONLY = "linker_scripts_only"


# Extension -> (role, language). Matching is case-sensitive.
EXTENSIONS: dict[str, tuple[SourceRole, Language | None]] = {
    ".c": (SourceRole.COMPILED, Language.C),
    ".cpp": (SourceRole.COMPILED, Language.CPP),
    ".s": (SourceRole.COMPILED, Language.ASSEMBLY),
    ".f90": (SourceRole.COMPILED, Language.FORTRAN),
    ".cob": (SourceRole.COMPILED, Language.COBOL),
    ".h": (SourceRole.HEADER, None),
    ".hpp": (SourceRole.HEADER, None),
    ".ld": (SourceRole.LINKER_SCRIPT, None),
}

_MODE_ROLES: dict[DiscoveryMode, frozenset[SourceRole]] = {
    DiscoveryMode.ALL: frozenset(SourceRole),
    DiscoveryMode.COMPILED_ONLY: frozenset([SourceRole.COMPILED]),
    DiscoveryMode.LINKER_SCRIPTS_ONLY: frozenset([SourceRole.LINKER_SCRIPT]),
}


@dataclass(frozen=True)
class SourceFile:
    """A discovered file, relative to the project root ('src/main.c').

    Attributes:
        path: POSIX-style path relative to the project root.
        role: What the file is used for.
        language: Language of a compiled unit, None otherwise.
    """

    path: str
    role: SourceRole
    language: Language | None = None

    @property
    def is_compiled(self) -> bool:
        return self.role is SourceRole.COMPILED


def classify(path: str) -> SourceFile | None:
    """Classify a path by extension; None if barge does not use it."""
    entry = EXTENSIONS.get(Path(path).suffix)
    if entry is None:
        return None
    role, language = entry
    return SourceFile(path=path, role=role, language=language)


def discover(
    mode: DiscoveryMode = DiscoveryMode.ALL, root: Path | str = "."
) -> list[SourceFile]:
    """Find project source files.

    Args:
        mode: Which roles to return.
        root: Project root; the scan starts at <root>/src.

    Returns:
        Matching files sorted lexicographically by path. A missing src
        directory yields an empty list.
    """
    root = Path(root)
    source_dir = root / SOURCE_DIR
    if not source_dir.is_dir():
        logger.debug("No %s directory under %s", SOURCE_DIR, root)
        return []

    wanted = _MODE_ROLES[mode]
    found: list[SourceFile] = []
    for path in source_dir.rglob("*"):
        if not path.is_file():
            continue
        source = classify(path.relative_to(root).as_posix())
        if source is not None and source.role in wanted:
            found.append(source)

    found.sort(key=lambda s: s.path)
    return found


def of_language(sources: Iterable[SourceFile], language: Language) -> list[SourceFile]:
    """Compiled units of one language, order preserved."""
    return [s for s in sources if s.is_compiled and s.language is language]


def has_language(sources: Iterable[SourceFile], language: Language) -> bool:
    return any(s.language is language for s in sources)


def linker_scripts(sources: Iterable[SourceFile]) -> list[SourceFile]:
    return [s for s in sources if s.role is SourceRole.LINKER_SCRIPT]
