"""Local backup of the Sonarr data directory and its systemd unit."""
import os
import tarfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from mediaops.config import SonarrConfig
from mediaops.utils import LogLevel, logger, time_util


def archive_name(moment: Optional[datetime] = None) -> str:
    return f"sonarr-backup-{time_util.archive_stamp(moment)}.tar.gz"


def _log_skip(path, error: OSError) -> None:
    logger.log("backup.skip", LogLevel.WARN, path=str(path), error=str(error))


def _add_entry(tar: tarfile.TarFile, path: Path) -> None:
    try:
        tar.add(str(path), arcname=str(path).lstrip("/") or path.name, recursive=False)
    except OSError as e:
        _log_skip(path, e)


def _add_tree(tar: tarfile.TarFile, root: Path) -> None:
    """Add `root` and everything below it one entry at a time; unreadable entries are skipped alone."""
    _add_entry(tar, root)
    if root.is_symlink() or not root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(root, onerror=lambda e: _log_skip(e.filename, e)):
        dirnames.sort()
        for name in dirnames + sorted(filenames):
            _add_entry(tar, Path(dirpath) / name)


def create_backup(config: SonarrConfig, dest_dir: Optional[Path] = None,
                  moment: Optional[datetime] = None) -> Path:
    """
    Archive the configured data directory and service file into a timestamped
    .tar.gz under `dest_dir` (default: the configured backup dir).

    Inputs that are missing or unreadable are skipped with a warning; some
    hosts have no systemd unit file at all. The archive is written either way.
    """
    backup_dir = Path(dest_dir or config.backup_dir).expanduser()
    backup_dir.mkdir(parents=True, exist_ok=True)
    archive = backup_dir / archive_name(moment)

    with tarfile.open(archive, "w:gz") as tar:
        _add_tree(tar, Path(config.config_dir))
        _add_entry(tar, Path(config.service_file))

    logger.log("backup.created", LogLevel.INFO, archive=str(archive))
    return archive
