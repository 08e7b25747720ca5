"""
The media organizer as a replaceable capability.

`FileBotOrganizer` runs FileBot's `amc` script on a single file. Tests use
their own `Organizer` implementation instead of shelling out.
"""
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import FILEBOT_MISSING_EXIT


class Organizer(ABC):
    """Renames/relocates one media file into the library layout."""

    @abstractmethod
    def organize(self, path: Path) -> int:
        """Process `path` and return the tool's exit status (0 is success)."""

    def describe(self, path: Path) -> str:
        """Human readable form of what `organize` would run, for dry runs."""
        return f"organize {path}"


class FileBotOrganizer(Organizer):

    def __init__(self, output_dir: Path, action: str = "copy", format_args: str = "",
                 exclude_list: Optional[Path] = None, binary: str = "filebot"):
        self.output_dir = output_dir
        self.action = action
        self.format_args = format_args
        self.exclude_list = exclude_list
        self.binary = binary

    def build_cmd(self, path: Path) -> List[str]:
        cmd = [
            self.binary, str(path),
            "-script", "fn:amc",
            "--output", str(self.output_dir),
            "--action", self.action,
        ]
        if self.exclude_list:
            cmd += ["--def", f"excludeList={self.exclude_list}"]
        cmd += shlex.split(self.format_args)
        return cmd

    def describe(self, path: Path) -> str:
        return shlex.join(self.build_cmd(path))

    def organize(self, path: Path) -> int:
        cmd = self.build_cmd(path)
        logger.log("filebot.start", LogLevel.DEBUG, file=path.name, cmd=shlex.join(cmd))
        try:
            # Output passes straight through so FileBot's own log stays visible.
            completed = subprocess.run(cmd)
        except OSError as e:
            logger.log("filebot.unavailable", LogLevel.ERROR, binary=self.binary, error=str(e))
            return FILEBOT_MISSING_EXIT
        return completed.returncode
