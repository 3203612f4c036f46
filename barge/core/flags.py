# SPDX-License-Identifier: MIT
"""Flag assembly for compiler and linker command lines.

Flags are composed in a fixed, declared order. Later flags may override
earlier ones at the compiler's discretion, so the contract is "declared
order" rather than "correct regardless of order":

    C / C++:  -std=<std>  warnings+includes  library  target  custom  [-fPIC]
    Fortran:  -std=<std>  custom  [-fPIC]
    COBOL:    -std=<std>  custom
    Link:     target  library  custom  [-lgfortran]  [cobol runtime]  [-T script ...]

Every fragment is stripped and empty fragments are dropped, so a user
flag string with stray whitespace never runs into its neighbours.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from barge.core.descriptor import ArtifactKind, ProjectDescriptor
from barge.core.sources import Language, SourceFile, has_language, linker_scripts
from barge.core.target import BuildTarget

COMMON_CFLAGS = (
    "-Wall -Wextra -Wpedantic -Wshadow -Wconversion "
    "-Wdouble-promotion -Wformat=2 -Iinclude -Isrc"
)
PIC_FLAG = "-fPIC"
FORTRAN_RUNTIME_FLAG = "-lgfortran"

# (compile flags, link flags) per build target
TARGET_FLAGS: dict[BuildTarget, tuple[str, str]] = {
    BuildTarget.DEBUG: ("-Og -g -fsanitize=undefined -fsanitize-trap", "-ggdb"),
    BuildTarget.RELEASE: ("-DNDEBUG -O2 -ffast-math", "-s"),
}


def join_flags(*fragments: str) -> str:
    """Join flag fragments with single spaces, skipping empty ones.

    Examples:
        >>> join_flags("-O2 ", "", "  -g")
        '-O2 -g'
    """
    return " ".join(f.strip() for f in fragments if f and f.strip())


@dataclass(frozen=True)
class FlagSet:
    """Final flag strings for each language and for the linker."""

    c: str
    cpp: str
    fortran: str
    cobol: str
    link: str


def pic_flag(kind: ArtifactKind) -> str:
    """Position-independent code is needed for anything but executables."""
    return "" if kind is ArtifactKind.EXECUTABLE else PIC_FLAG


def assemble(
    descriptor: ProjectDescriptor,
    target: BuildTarget,
    library_flags: tuple[str, str] = ("", ""),
    sources: Sequence[SourceFile] = (),
    runtime_link_flags: str = "",
) -> FlagSet:
    """Compose the flag strings for one build.

    Args:
        descriptor: The project descriptor.
        target: Debug or release.
        library_flags: (compile, link) flags from the library resolver.
        sources: Discovered sources; used for the Fortran runtime and
            linker script decisions.
        runtime_link_flags: Extra runtime libraries (the COBOL runtime)
            appended after the Fortran runtime.

    Returns:
        The assembled FlagSet.
    """
    library_cflags, library_ldflags = library_flags
    target_cflags, target_ldflags = TARGET_FLAGS[target]
    pic = pic_flag(descriptor.project_type)

    cflags = join_flags(
        f"-std={descriptor.effective('c_standard')}",
        COMMON_CFLAGS,
        library_cflags,
        target_cflags,
        descriptor.effective("custom_cflags"),
        pic,
    )
    cxxflags = join_flags(
        f"-std={descriptor.effective('cpp_standard')}",
        COMMON_CFLAGS,
        library_cflags,
        target_cflags,
        descriptor.effective("custom_cxxflags"),
        pic,
    )
    fortranflags = join_flags(
        f"-std={descriptor.effective('fortran_standard')}",
        descriptor.effective("custom_fortranflags"),
        pic,
    )
    cobolflags = join_flags(
        f"-std={descriptor.effective('cobol_standard')}",
        descriptor.effective("custom_cobolflags"),
    )

    fortran_runtime = FORTRAN_RUNTIME_FLAG if has_language(sources, Language.FORTRAN) else ""
    scripts = [f"-T {script.path}" for script in linker_scripts(sources)]
    ldflags = join_flags(
        target_ldflags,
        library_ldflags,
        descriptor.effective("custom_ldflags"),
        fortran_runtime,
        runtime_link_flags,
        *scripts,
    )

    return FlagSet(c=cflags, cpp=cxxflags, fortran=fortranflags, cobol=cobolflags, link=ldflags)
