# SPDX-License-Identifier: MIT
"""LLVM/Clang toolchain.

LLVM has no Fortran or COBOL front end of its own that barge relies
on, so those languages still go through gfortran and cobc. Static
libraries are archived with the system ar, as with GCC.
"""

from __future__ import annotations

from barge.toolchains.toolchain import Toolchain, Toolset

LLVM_TOOLCHAIN = Toolchain(
    toolset=Toolset.LLVM,
    c_compiler="clang",
    cpp_compiler="clang++",
    fortran_compiler="gfortran",
    cobol_compiler="cobc",
    assembler="clang",
    linker="clang++",
    archiver="ar",
    debugger="lldb",
)
