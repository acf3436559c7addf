"""Pytest bootstrap for local source imports and isolated user directories.

The ``pytest`` console script can run with a sys.path that excludes the
repository root, so the root is prepended to make ``import lineviewer``
resolve locally. Config and log locations come from platformdirs at import
time; pointing the XDG variables at a scratch directory first keeps tests
away from the real user config.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_SCRATCH_HOME = Path(tempfile.mkdtemp(prefix="lineviewer-tests-"))
for _var, _subdir in (("XDG_CONFIG_HOME", "config"), ("XDG_STATE_HOME", "state"), ("XDG_CACHE_HOME", "cache")):
    os.environ[_var] = str(_SCRATCH_HOME / _subdir)
