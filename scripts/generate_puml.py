#!/usr/bin/env python3
"""CLI: Generate PlantUML diagrams for NgRx effects files (without installing the package)."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from effectuml.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
