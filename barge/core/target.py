# SPDX-License-Identifier: MIT
"""Build targets and the build output layout.

A build target (debug or release) selects a fixed bundle of
optimization, sanitizer and strip flags, and scopes every artifact
under its own directory so the two trees never collide:

    build/<target>/<artifact>
    build/<target>/obj/<path under src>.o
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath

from barge.core.errors import InvalidValueError

BUILD_ROOT = "build"
SOURCE_DIR = "src"


class BuildTarget(Enum):
    """Build target selected on the command line."""

    DEBUG = "debug"
    RELEASE = "release"

    @classmethod
    def parse(cls, text: str) -> BuildTarget:
        """Parse a case-sensitive target name.

        Raises:
            InvalidValueError: If the name is not 'debug' or 'release'.
        """
        for target in cls:
            if target.value == text:
                return target
        choices = ", ".join(t.value for t in cls)
        raise InvalidValueError(
            f"invalid build target '{text}', valid choices are: {choices}"
        )

    @property
    def binary_dir(self) -> str:
        """Directory holding the final artifact (e.g. 'build/debug')."""
        return f"{BUILD_ROOT}/{self.value}"

    @property
    def object_dir(self) -> str:
        """Directory holding object files (e.g. 'build/debug/obj')."""
        return f"{self.binary_dir}/obj"

    def object_path(self, source: str) -> str:
        """Object file path for a source path relative to the project root.

        The path below src/ is mirrored and '.o' appended, so
        'src/net/io.c' becomes 'build/<target>/obj/net/io.c.o'.
        """
        path = PurePosixPath(source)
        if path.parts and path.parts[0] == SOURCE_DIR:
            path = PurePosixPath(*path.parts[1:])
        return f"{self.object_dir}/{path}.o"

    def __str__(self) -> str:
        return self.value
