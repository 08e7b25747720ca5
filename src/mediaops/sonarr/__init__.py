"""
Sonarr control: trigger commands, list series/missing/health, back up config.

- client: `SonarrClient`, one HTTP call per method, no retries.
- formatter: projections of API records into printable lines.
- commands: one function per CLI subcommand.
- backup: timestamped tar.gz of the data dir and service file.
"""

from .backup import create_backup
from .client import SonarrClient
from .commands import TRIGGER_COMMANDS, health, list_missing, list_series, trigger
from .formatter import episode_code, format_missing_record

__all__ = [
    "create_backup",
    "SonarrClient",
    "TRIGGER_COMMANDS",
    "health",
    "list_missing",
    "list_series",
    "trigger",
    "episode_code",
    "format_missing_record",
]
