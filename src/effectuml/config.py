"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR: Path = Path(__file__).resolve().parent


def _optional_int(name: str) -> int | None:
    val = os.getenv(name)
    if not val:
        return None
    return int(val)


# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()

# Rendering
TEMPLATES_DIR: Path = Path(os.getenv("EFFECTUML_TEMPLATES_DIR", str(PACKAGE_DIR / "templates")))
DEFAULT_DIAGRAM: str = os.getenv("EFFECTUML_DIAGRAM", "activity")

# File I/O
SOURCE_ENCODING: str = os.getenv("EFFECTUML_SOURCE_ENCODING", "utf-8")
TARGET_ENCODING: str = os.getenv("EFFECTUML_TARGET_ENCODING", "utf-8")
TARGET_EXT: str = "puml"

# Batch processing (None lets the executor pick)
MAX_WORKERS: int | None = _optional_int("EFFECTUML_MAX_WORKERS")
