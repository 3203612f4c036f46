# SPDX-License-Identifier: MIT
"""Toolchain definitions (GNU and LLVM)."""

from __future__ import annotations

from barge.toolchains.gcc import GCC_TOOLCHAIN
from barge.toolchains.llvm import LLVM_TOOLCHAIN
from barge.toolchains.toolchain import Toolchain, Toolset

_TOOLCHAINS: dict[Toolset, Toolchain] = {
    Toolset.GNU: GCC_TOOLCHAIN,
    Toolset.LLVM: LLVM_TOOLCHAIN,
}


def resolve_toolchain(toolset: Toolset) -> Toolchain:
    """Map a toolset to its concrete executables."""
    return _TOOLCHAINS[toolset]


__all__ = [
    "GCC_TOOLCHAIN",
    "LLVM_TOOLCHAIN",
    "Toolchain",
    "Toolset",
    "resolve_toolchain",
]
