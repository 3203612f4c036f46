# SPDX-License-Identifier: MIT
"""Toolchain description shared by the GNU and LLVM toolsets.

A Toolchain is the coordinated set of executables a project is built
with. Switching the toolset switches every executable at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from barge.core.errors import InvalidValueError


class Toolset(Enum):
    """Named family of compiler/linker/debugger executables."""

    GNU = "gnu"
    LLVM = "llvm"

    @classmethod
    def parse(cls, text: str) -> Toolset:
        for toolset in cls:
            if toolset.value == text:
                return toolset
        choices = ", ".join(t.value for t in cls)
        raise InvalidValueError(f"invalid toolset '{text}', valid choices are: {choices}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Toolchain:
    """Concrete executable names for a toolset.

    Attributes:
        toolset: The toolset this row belongs to.
        c_compiler: C compiler driver.
        cpp_compiler: C++ compiler driver.
        fortran_compiler: Fortran compiler driver.
        cobol_compiler: COBOL compiler driver.
        assembler: Driver used to assemble '.s' files.
        linker: Driver used to link executables and shared libraries.
        archiver: Static library archiver.
        debugger: Interactive debugger.
    """

    toolset: Toolset
    c_compiler: str
    cpp_compiler: str
    fortran_compiler: str
    cobol_compiler: str
    assembler: str
    linker: str
    archiver: str
    debugger: str

    def compiler_for(self, language: str) -> str:
        """Compiler driver for a language name ('c', 'cpp', ...)."""
        compilers = {
            "c": self.c_compiler,
            "cpp": self.cpp_compiler,
            "assembly": self.assembler,
            "fortran": self.fortran_compiler,
            "cobol": self.cobol_compiler,
        }
        try:
            return compilers[language]
        except KeyError:
            raise InvalidValueError(f"no compiler for language '{language}'") from None

    def debug_command(self, program: str, arguments: list[str]) -> list[str]:
        """Command line that starts `program` under the debugger."""
        if self.toolset is Toolset.GNU:
            return [self.debugger, "--args", program, *arguments]
        return [self.debugger, program, "--", *arguments]
