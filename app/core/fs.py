# File: app/core/fs.py

import logging
import shutil
from pathlib import Path

from app.core.exceptions import CleanupFailure

logger = logging.getLogger(__name__)


def remove_file(path: Path) -> None:
    """Deletes a file if present. Raises CleanupFailure if it is there but cannot be removed."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise CleanupFailure(f"Failed to remove {path}: {e}") from e


def remove_tree(path: Path) -> None:
    """Deletes a directory and everything in it. Missing directories are fine."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise CleanupFailure(f"Failed to remove directory {path}: {e}") from e


def discard(path: Path) -> None:
    """Best-effort removal of a file or directory: failures are logged, never raised."""
    try:
        if path.is_dir():
            remove_tree(path)
        else:
            remove_file(path)
    except CleanupFailure as e:
        logger.warning(f"⚠️ {e}")
