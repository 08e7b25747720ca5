#!/usr/bin/env python3
"""
torrent-processor: hand recent downloads to FileBot, then keep, trash or
delete the originals. Every processed file is reported to Discord.
"""

import argparse
import dataclasses
import os
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

import mediaops
from mediaops.config import NotifyConfig, OriginalAction, ProcessorConfig
from mediaops.errors import ConfigurationError
from mediaops.notify import DiscordWebhook, PushoverClient
from mediaops.processor import FileBotOrganizer, FileProcessor
from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import FILEBOT_ACTIONS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torrent-processor",
        description="Find recent downloads, organize them with FileBot, and handle the originals "
                    "(KEEP/TRASH/DELETE). Sends a Discord embed for every file processed.",
        epilog='Example: torrent-processor -s /mnt/media -o /mnt/organized --dry-run',
    )
    parser.add_argument("-s", "--search-dir", type=Path, help="Directory to scan for new files")
    parser.add_argument("-o", "--output-dir", type=Path, help="FileBot output directory")
    parser.add_argument("-f", "--format", dest="filebot_format", help="FileBot format/option string")
    parser.add_argument("-a", "--original-action", type=str.upper, choices=OriginalAction.ALL,
                        help="What to do with the original after FileBot succeeds: DELETE, TRASH or KEEP")
    parser.add_argument("-t", "--trash-dir", type=Path, help="Trash directory used when the action is TRASH")
    parser.add_argument("--filebot-action", choices=FILEBOT_ACTIONS, help="FileBot's internal action")
    parser.add_argument("--exclude-list", type=Path, help="FileBot amc exclude list file")
    parser.add_argument("--max-age-days", type=int, help="Only process files modified within this many days")
    parser.add_argument("--webhook", help="Discord webhook URL (default: $DISCORD_WEBHOOK_URL)")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="Do not run FileBot or touch originals; notifications are marked DRY-RUN")
    parser.add_argument("--auto-confirm", action=argparse.BooleanOptionalAction, default=None,
                        help="Skip the per-file confirmation before DELETE/TRASH")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {mediaops.__version__}")
    return parser


def config_from_args(args: argparse.Namespace, env=None) -> ProcessorConfig:
    notify = NotifyConfig.from_env(env)
    if args.webhook:
        notify = dataclasses.replace(notify, discord_webhook_url=args.webhook)
    return ProcessorConfig.from_env(
        env,
        search_dir=args.search_dir,
        output_dir=args.output_dir,
        filebot_format=args.filebot_format,
        original_action=args.original_action,
        trash_dir=args.trash_dir.expanduser() if args.trash_dir else None,
        filebot_action=args.filebot_action,
        exclude_list=args.exclude_list,
        max_age=timedelta(days=args.max_age_days) if args.max_age_days is not None else None,
        dry_run=args.dry_run,
        auto_confirm=args.auto_confirm,
        notify=notify,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = LogLevel.DEBUG if args.debug else logger.level_from_name(os.getenv("MEDIAOPS_LOG_LEVEL"))
    logger.set_log_level(level)

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    organizer = FileBotOrganizer(
        output_dir=config.output_dir,
        action=config.filebot_action,
        format_args=config.filebot_format,
        exclude_list=config.exclude_list,
        binary=config.filebot_bin,
    )
    processor = FileProcessor(
        config,
        organizer=organizer,
        webhook=DiscordWebhook(config.notify.discord_webhook_url),
        pushover=PushoverClient(config.notify.pushover_token, config.notify.pushover_user),
    )
    processor.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
