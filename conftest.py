"""Pytest configuration: ensure the local src/ takes priority over any
installed copy of speakable."""

from __future__ import annotations

import sys
from pathlib import Path

_src = str(Path(__file__).parent / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)
