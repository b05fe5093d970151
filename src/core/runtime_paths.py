from __future__ import annotations

import sys
from pathlib import Path


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def runtime_root() -> Path:
    if is_frozen():
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def logs_dir() -> Path:
    return runtime_root() / "logs"


def config_path_default() -> Path:
    return runtime_root() / "config.json"
