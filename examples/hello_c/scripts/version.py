#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Pre-build step: write src/version.h from the BARGE_* environment."""

import os
from pathlib import Path

commit = os.environ.get("BARGE_GIT_COMMIT") or "unknown"
header = f'#define HELLO_COMMIT "{commit[:12]}"\n'

path = Path("src") / "version.h"
if not path.exists() or path.read_text() != header:
    path.write_text(header)
