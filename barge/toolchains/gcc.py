# SPDX-License-Identifier: MIT
"""GNU toolchain.

- C compiler (gcc), C++ compiler (g++), Fortran compiler (gfortran)
- COBOL compiler (cobc, GnuCOBOL)
- Linker (g++ as the driver, so C++ runtimes are always available)
- Archiver (ar), debugger (gdb)
"""

from __future__ import annotations

from barge.toolchains.toolchain import Toolchain, Toolset

GCC_TOOLCHAIN = Toolchain(
    toolset=Toolset.GNU,
    c_compiler="gcc",
    cpp_compiler="g++",
    fortran_compiler="gfortran",
    cobol_compiler="cobc",
    assembler="gcc",
    linker="g++",
    archiver="ar",
    debugger="gdb",
)
