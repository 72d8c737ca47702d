"""IO utilities for safe JSON file operations.

Provides:
- ``ensure_dir(path)``: create directories if missing (no error if exists).
- ``read_json(path, default=None)``: read JSON file; return default on missing.
- ``write_json(path, data)``: atomic write of JSON to file.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Optional


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def read_json(path: str, default: Optional[Any] = None) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default


def write_json(path: str, data: Any) -> None:
    ensure_dir(os.path.dirname(path) or ".")
    fd, tmp = tempfile.mkstemp(prefix=".tmp_", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)
