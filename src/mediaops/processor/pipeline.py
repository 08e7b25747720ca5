"""
Post-download processing: organize each new file, handle the original,
report every outcome.

Per file the pipeline ends in exactly one of these states, and each of them
produces exactly one Discord notification:

- simulated (dry run, organizer not invoked)
- organize failed (original untouched)
- organized, original kept / deleted / trashed / skipped by the user

A failure on one file never stops the run; the next file is processed.
"""
import shutil
import time
from pathlib import Path
from typing import Callable, List, Optional

from tqdm import tqdm

from mediaops.config import OriginalAction, ProcessorConfig
from mediaops.notify import DiscordWebhook, PushoverClient
from mediaops.processor.discovery import discover_files
from mediaops.processor.organizer import Organizer
from mediaops.processor.report import FileOutcome, build_file_message
from mediaops.utils import STATUS_DRY_RUN, STATUS_FAIL, STATUS_OK, LogLevel, logger, system_util
from mediaops.utils.file_util import file_size, mime_type, prune_empty_dirs

ConfirmFn = Callable[[str, Path], bool]


def prompt_confirm(action: str, path: Path) -> bool:
    """Ask on the terminal before deleting or trashing an original. Anything but y/Y declines."""
    try:
        answer = input(f"Process successful. {action} original '{path}'? (y/N): ")
    except EOFError:
        return False
    return answer.strip() in {"y", "Y"}


class FileProcessor:
    """Runs the organizer over discovered files and reports each outcome."""

    def __init__(
            self,
            config: ProcessorConfig,
            organizer: Organizer,
            webhook: DiscordWebhook,
            pushover: Optional[PushoverClient] = None,
            confirm: ConfirmFn = prompt_confirm,
            clock: Callable[[], float] = time.time,
            host: Optional[str] = None,
    ):
        self.config = config
        self.organizer = organizer
        self.webhook = webhook
        self.pushover = pushover
        self.confirm = confirm
        self.clock = clock
        self.host = host or system_util.hostname(default="file-processor")

    def run(self) -> List[FileOutcome]:
        cfg = self.config
        self._log_config()
        self._prepare_dirs()
        self._announce_start()

        if cfg.dry_run:
            logger.log("prune.skipped", LogLevel.INFO, reason="dry-run", root=str(cfg.search_dir))
        else:
            prune_empty_dirs(cfg.search_dir)

        files = discover_files(
            cfg.search_dir,
            max_age=cfg.max_age,
            exclude_name=cfg.exclude_name,
            exclude_path=cfg.exclude_path,
            now=self.clock(),
        )

        outcomes = [self.process_file(path) for path in tqdm(files, desc="Processing files", unit="file")]

        logger.log(
            "processor.complete",
            LogLevel.INFO,
            files=len(outcomes),
            ok=sum(1 for o in outcomes if o.ok),
            failed=sum(1 for o in outcomes if not o.ok),
            dry_run=cfg.dry_run,
        )
        return outcomes

    def process_file(self, path: Path) -> FileOutcome:
        cfg = self.config
        started = self.clock()
        logger.log("processor.file.start", LogLevel.INFO, file=path.name, path=str(path))

        # Captured up front: the original may be gone by the time we report.
        size_bytes = file_size(path)
        mime = mime_type(path)

        if cfg.dry_run:
            logger.log("processor.file.dry_run", LogLevel.INFO, file=path.name, cmd=self.organizer.describe(path))
            ok = True
            notes = f"Would run FileBot with action={cfg.filebot_action} and then {cfg.original_action} original."
            status = STATUS_DRY_RUN
        else:
            code = self.organizer.organize(path)
            if code == 0:
                ok = True
                notes = "FileBot ok." + self._handle_original(path)
                status = STATUS_OK
            else:
                ok = False
                notes = f"FileBot failed (exit {code}). Original untouched."
                status = STATUS_FAIL

        outcome = FileOutcome(
            path=path,
            ok=ok,
            started=started,
            ended=self.clock(),
            notes=notes,
            size_bytes=size_bytes,
            mime=mime,
            dry_run=cfg.dry_run,
        )
        logger.log("processor.file.done", LogLevel.INFO if ok else LogLevel.ERROR,
                   file=path.name, status=status, notes=notes, duration=outcome.duration_seconds)
        self._notify(outcome)
        return outcome

    def _handle_original(self, path: Path) -> str:
        """Apply the original-file policy; returns the note suffix describing what happened."""
        action = self.config.original_action
        if action == OriginalAction.KEEP:
            logger.log("original.kept", LogLevel.DEBUG, path=str(path))
            return ""

        if not self.config.auto_confirm and not self.confirm(action, path):
            logger.log("original.skipped", LogLevel.INFO, action=action, path=str(path))
            return f" Skipped {action} by user."

        if action == OriginalAction.DELETE:
            try:
                path.unlink()
            except OSError as e:
                logger.log("original.delete_failed", LogLevel.WARN, path=str(path), error=str(e))
                return " Failed to delete original."
            logger.log("original.deleted", LogLevel.INFO, path=str(path))
            return " Deleted original."

        target = self.config.trash_dir / path.name
        try:
            shutil.move(str(path), str(target))
        except OSError as e:
            logger.log("original.trash_failed", LogLevel.WARN, path=str(path), error=str(e))
            return " Failed to move to trash."
        logger.log("original.trashed", LogLevel.INFO, path=str(path), dst=str(target))
        return " Moved original to trash."

    def _notify(self, outcome: FileOutcome) -> None:
        if not self.webhook.enabled:
            return
        if not self.webhook.send(build_file_message(outcome, self.host)):
            logger.log("processor.notify_failed", LogLevel.WARN, file=outcome.path.name)

    def _log_config(self) -> None:
        cfg = self.config
        logger.log(
            "processor.config",
            LogLevel.INFO,
            search_dir=str(cfg.search_dir),
            output_dir=str(cfg.output_dir),
            filebot_format=cfg.filebot_format,
            filebot_action=cfg.filebot_action,
            original_action=cfg.original_action,
            trash_dir=str(cfg.trash_dir) if cfg.original_action == OriginalAction.TRASH else None,
            max_age_days=cfg.max_age.total_seconds() / 86400,
            dry_run=cfg.dry_run,
            auto_confirm=cfg.auto_confirm,
            webhook="configured" if self.webhook.enabled else "MISSING",
        )

    def _prepare_dirs(self) -> None:
        cfg = self.config
        if cfg.dry_run:
            return
        dirs = [cfg.output_dir]
        if cfg.original_action == OriginalAction.TRASH:
            dirs.append(cfg.trash_dir)
        for directory in dirs:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.log("processor.mkdir_failed", LogLevel.ERROR, path=str(directory), error=str(e))

    def _announce_start(self) -> None:
        if self.pushover is not None and self.pushover.enabled:
            self.pushover.send(f"[{self.host}] Torrent processor", "Running the torrent clean up script")
