"""
JSON I/O helpers for the file-backed truck stores.

Documents are always rewritten whole: the payload goes to a temporary file
next to the target which then replaces it, so a failed write leaves the
previous document untouched.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from errors import StoreUnavailableError


def read_json(path: Path) -> Optional[Any]:
    """
    Read a JSON document from disk.

    Args:
        path: File to read

    Returns:
        The decoded document, or None if the file does not exist

    Raises:
        StoreUnavailableError: If the file cannot be read or is not valid JSON
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as e:
        raise StoreUnavailableError(f"Invalid JSON data in {path}: {e}") from e
    except OSError as e:
        raise StoreUnavailableError(f"Cannot read {path}: {e}") from e


def dump_json(data: Any) -> str:
    """Serialize a document the way it is stored on disk."""
    return json.dumps(data, ensure_ascii=False, indent=2)


def atomic_write_text(path: Path, data: str) -> None:
    """Atomically write text into path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise StoreUnavailableError(f"Failed to save data to {path}: {e}") from e


def write_json(path: Path, data: Any) -> None:
    """
    Write a JSON document atomically.

    Raises:
        StoreUnavailableError: If the document cannot be written
    """
    atomic_write_text(path, dump_json(data))
