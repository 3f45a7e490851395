#!/usr/bin/env python3
"""
JSON Utilities Module

Centralized JSON reading and writing with consistent formatting. Engine-owned
state (model weights, skip events, the JSON repository) is written through
write_json_atomic so a crash never leaves a half-written file behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def write_json_atomic(filepath: str | Path, data: Any, default: Any = None) -> None:
    """
    Write JSON to a temporary sibling file, then swap it into place.

    os.replace is atomic on POSIX and Windows, so readers see either the old
    document or the new one.

    Args:
        filepath: Destination path
        data: Data to write
        default: Function to serialize non-JSON types (default: None)
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=default)
        os.replace(tmp_name, filepath)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_json(filepath: str | Path) -> Any:
    """
    Read data from a JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        The parsed JSON data
    """
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)
