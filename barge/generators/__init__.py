# SPDX-License-Identifier: MIT
"""Build plan generators for barge."""

from barge.generators.generator import BaseGenerator, Generator
from barge.generators.makefile import MakefileGenerator, synthesize, synthesize_analyze

__all__ = [
    "BaseGenerator",
    "Generator",
    "MakefileGenerator",
    "synthesize",
    "synthesize_analyze",
]
