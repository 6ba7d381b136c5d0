# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest configuration for the suite",
#   "sections": [
#     {"id": "globals", "name": "Globals", "anchor": "GLB", "kind": "constants"}
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Makes the ``src`` layout importable without an editable install so the suite
exercises the working tree rather than a stale site-packages copy.

Usage:
    pytest tests/
"""

from __future__ import annotations

import sys
from pathlib import Path

# --- Globals ---

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
