"""JSON persistence utilities for GEOConvergence.

Provides atomic file writes (write-to-temp-then-rename) and safe JSON
load/save operations. No business logic, file I/O only.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import tempfile
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from geoconvergence.utils.date_utils import to_iso

logger = logging.getLogger(__name__)


class _DataclassEncoder(json.JSONEncoder):
    """JSON encoder that handles dataclasses, enums, datetimes, sets and Path objects."""

    def default(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return to_iso(obj)
        if isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Atomically write data to a JSON file.

    Uses a write-to-temp-then-rename strategy to prevent partial writes.
    Creates parent directories if they do not exist.

    Args:
        data: Data to serialize. Supports dicts, lists, dataclasses, enums,
            datetimes, sets and Path objects.
        path: Output file path.
        indent: JSON indentation level (default: 2).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        serialized = json.dumps(data, indent=indent, ensure_ascii=False, cls=_DataclassEncoder)
    except (TypeError, ValueError) as exc:
        logger.error("JSON serialization failed for %s: %s", path, exc)
        raise

    # Atomic write: write to temp file in same directory, then rename
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp.write(serialized)
        tmp_path = tmp.name

    try:
        os.replace(tmp_path, path)
    except OSError as exc:
        os.unlink(tmp_path)
        logger.error("Atomic rename failed for %s: %s", path, exc)
        raise

    logger.debug("Saved JSON to %s (%d bytes)", path, len(serialized))


def load_json(path: str | Path) -> Optional[Any]:
    """Load and parse a JSON file.

    Returns None if the file does not exist or cannot be parsed.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed Python object, or None on error.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("JSON file not found: %s", path)
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to load JSON from %s: %s", path, exc)
        return None


def ensure_output_dir(output_root: str | Path, cycle_id: str) -> Path:
    """Create and return the output directory for a cycle.

    Args:
        output_root: Root directory for all cycle exports.
        cycle_id: Cycle identifier used as the subdirectory name.

    Returns:
        Path to ``<output_root>/<cycle_id>``.
    """
    output_dir = Path(output_root) / cycle_id
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir
