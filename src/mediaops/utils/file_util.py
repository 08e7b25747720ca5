"""
File helpers for the processing pipeline: human readable sizes, best-effort
MIME detection and empty directory pruning.
"""
import mimetypes
import os
from pathlib import Path
from typing import List

from mediaops.utils import logger, system_util
from mediaops.utils.constants import DEFAULT_MIME_TYPE, SIZE_UNITS
from mediaops.utils.logger import LogLevel


def format_size(num_bytes: int) -> str:
    """
    Format a byte count with base-1024 units.

    Plain bytes are printed as an integer; once scaled, the value keeps one
    decimal place. Each step rounds to one decimal before the next division,
    so 1048575 bytes reads as "1.0 MB" rather than "1024.0 KB".
    """
    value: float = num_bytes
    unit = 0
    while round(value) >= 1024 and unit < len(SIZE_UNITS) - 1:
        value = round(value / 1024, 1)
        unit += 1
    if unit == 0:
        return f"{int(value)} {SIZE_UNITS[0]}"
    return f"{value:.1f} {SIZE_UNITS[unit]}"


def file_size(path: Path) -> int:
    """Size of a regular file in bytes, 0 if it cannot be read."""
    try:
        return path.stat().st_size
    except OSError:
        return 0


def mime_type(path: Path) -> str:
    """Best-effort MIME type: `file --mime-type`, then the extension, then a generic default."""
    if path.is_file() and system_util.have_cmd("file"):
        code, out, _ = system_util.run_cmd(["file", "--mime-type", "-b", str(path)])
        if code == 0 and out.strip():
            return out.strip()
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MIME_TYPE


def prune_empty_dirs(root: Path) -> List[Path]:
    """
    Remove empty directories below `root`, deepest first.

    The root itself is never removed. Directories that cannot be removed are
    logged and left in place. Returns the directories that were removed.
    """
    removed: List[Path] = []
    if not root.is_dir():
        return removed

    for dirpath, _dirnames, _filenames in os.walk(root, topdown=False):
        current = Path(dirpath)
        if current == root:
            continue
        try:
            if any(current.iterdir()):
                continue
            current.rmdir()
            removed.append(current)
        except OSError as e:
            logger.log("prune.failed", LogLevel.WARN, path=str(current), error=str(e))

    if removed:
        logger.log("prune.complete", LogLevel.INFO, root=str(root), removed=len(removed))
    return removed
