"""Pytest configuration.

The package lives under `src/`. This conftest ensures tests can import `aql_filter` when running
`pytest` from a checkout without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure `import aql_filter` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
