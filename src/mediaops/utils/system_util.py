"""
Utility functions for running system commands and verifying binary availability.

Every external collaborator of these tools (FileBot, smartctl, nvme-cli,
mdadm, lsblk, journalctl, file) is reached through this module so the seams
are easy to replace in tests.

Functions:
    - run_cmd: Executes a command and returns its exit code along with its
      standard output and error streams.
    - have_cmd: Reports whether a binary is on PATH.
    - require_binary: Raises ToolMissingError when a binary is not on PATH.
    - hostname: Best-effort host name for report headers and footers.
"""
import shutil
import socket
import subprocess
from typing import Tuple, List

from mediaops.errors import ToolMissingError


def run_cmd(cmd: List[str]) -> Tuple[int, str, str]:
    """Run a command and return (code, stdout, stderr)."""
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    return p.returncode, p.stdout, p.stderr


def have_cmd(binary: str) -> bool:
    """Check if a binary exists on PATH."""
    return shutil.which(binary) is not None


def require_binary(binary: str) -> None:
    """Raise ToolMissingError if a binary is not on PATH."""
    if not have_cmd(binary):
        raise ToolMissingError(binary)


def hostname(default: str = "localhost") -> str:
    """Return the machine's host name, or `default` if it cannot be determined."""
    try:
        return socket.gethostname() or default
    except OSError:
        return default
