#!/usr/bin/env python3
"""
sonarr-ctl: trigger Sonarr commands, list series/missing/health, back up config.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import requests

import mediaops
from mediaops import sonarr
from mediaops.config import SonarrConfig
from mediaops.errors import MediaOpsError
from mediaops.utils import LogLevel, logger

COMMANDS = {
    "missing-search": "Trigger search for all missing episodes",
    "refresh": "Refresh all series & rescan disk",
    "rss-sync": "Trigger RSS sync",
    "list-series": "List all series (id + title)",
    "list-missing": "List missing episodes (first page)",
    "health": "Show Sonarr health issues",
    "backup": "Backup Sonarr config (local files); optional [dest]",
    "help": "Show this help",
}

EPILOG = "Commands:\n" + "\n".join(f"  {name:<20}{desc}" for name, desc in COMMANDS.items()) + """

Environment:
  SONARR_URL            Default: http://localhost:8989
  SONARR_API_KEY        (required for API commands)
  SONARR_CONFIG_DIR     Used by 'backup' (default: /var/lib/sonarr)
  SONARR_SERVICE_FILE   Used by 'backup' (default: /etc/systemd/system/sonarr.service)
  BACKUP_DIR            Used by 'backup' (default: $HOME/sonarr-backups)
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sonarr-ctl",
        description="Control a Sonarr server from the command line.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", default="help", metavar="command")
    parser.add_argument("args", nargs="*", help="Command arguments (backup: destination directory)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {mediaops.__version__}")
    return parser


def run_command(command: str, args: List[str], config: SonarrConfig,
                session: Optional[requests.Session] = None) -> List[str]:
    """Execute one subcommand and return the lines to print."""
    if command == "backup":
        dest = Path(args[0]) if args else None
        archive = sonarr.create_backup(config, dest)
        return [f"Sonarr backup created: {archive}"]

    client = sonarr.SonarrClient(config, session=session)
    if command in sonarr.TRIGGER_COMMANDS:
        return sonarr.trigger(client, command)
    if command == "list-series":
        return sonarr.list_series(client)
    if command == "list-missing":
        return sonarr.list_missing(client)
    if command == "health":
        return sonarr.health(client)
    raise KeyError(command)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger.set_log_level(LogLevel.DEBUG if args.debug else LogLevel.INFO)

    if args.command == "help":
        parser.print_help()
        return 0
    if args.command not in COMMANDS:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1

    config = SonarrConfig.from_env()
    try:
        lines = run_command(args.command, args.args, config)
    except MediaOpsError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        logger.log("sonarr.request_failed", LogLevel.ERROR, command=args.command, error=str(e))
        print(f"ERROR: request to Sonarr failed: {e}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
