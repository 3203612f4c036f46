# SPDX-License-Identifier: MIT
"""External library (package) resolution."""

from barge.packages.pkgconfig import query_pkg_config, resolve_libraries, resolve_library

__all__ = ["query_pkg_config", "resolve_libraries", "resolve_library"]
