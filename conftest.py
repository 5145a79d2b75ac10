"""Root conftest.py: ensures the local statefuzz package takes precedence over any installed version."""

from __future__ import annotations

import sys
from pathlib import Path

# Insert the project root at the front of sys.path so that
# `import statefuzz` always resolves to the local source tree.
_project_root = str(Path(__file__).parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)
