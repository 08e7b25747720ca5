"""
Discovery of recently downloaded files.

Only regular files count (symlinks and directories are skipped). A file is
picked up when it was modified within `max_age`, its name does not match the
`exclude_name` glob (case-sensitive, like `find -name`), and its full path
does not contain `exclude_path`. Results are ordered by path.
"""
import fnmatch
import time
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from mediaops.utils import LogLevel, logger


def is_candidate(path: Path, *, max_age: timedelta, exclude_name: str = "", exclude_path: str = "",
                 now: Optional[float] = None) -> bool:
    if path.is_symlink() or not path.is_file():
        return False
    if exclude_name and fnmatch.fnmatchcase(path.name, exclude_name):
        return False
    if exclude_path and exclude_path in str(path):
        return False
    now = time.time() if now is None else now
    try:
        age = now - path.stat().st_mtime
    except OSError:
        return False
    return age < max_age.total_seconds()


def discover_files(search_dir: Path, *, max_age: timedelta, exclude_name: str = "", exclude_path: str = "",
                   now: Optional[float] = None) -> List[Path]:
    """Find processable files under `search_dir`, sorted lexicographically by path."""
    root = Path(search_dir)
    if not root.is_dir():
        logger.log("discover.missing_root", LogLevel.WARN, path=str(root))
        return []

    found = [
        p for p in root.rglob("*")
        if is_candidate(p, max_age=max_age, exclude_name=exclude_name, exclude_path=exclude_path, now=now)
    ]
    found.sort(key=str)
    logger.log("discover.complete", LogLevel.INFO, root=str(root), files=len(found))
    return found
