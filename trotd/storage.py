"""
Atomic JSON persistence shared by the cache, seen and starred stores.

Writes go to a temporary file in the target directory followed by
``os.replace``, so a concurrent reader sees either the old document or the
new one, never a partial write.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from trotd.exceptions import CacheUnavailableError
from trotd.logging import get_logger

logger = get_logger("store")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def read_json(path: Path) -> Any | None:
    """
    Read a JSON document.

    Returns:
        The decoded document, or None if the file is missing or corrupt

    Raises:
        CacheUnavailableError: If the file exists but cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise CacheUnavailableError(f"Failed to read {path}: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring corrupt state file %s: %s", path, e)
        return None


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write a JSON document atomically.

    Raises:
        CacheUnavailableError: If the directory or file cannot be written
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise CacheUnavailableError(f"Failed to write {path}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_name)


def remove_file(path: Path) -> None:
    """Delete a state file if it exists."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise CacheUnavailableError(f"Failed to remove {path}: {e}") from e
