"""Per-file outcome record and its Discord embed."""
from dataclasses import dataclass
from pathlib import Path

from mediaops.notify import Embed, EmbedField, WebhookMessage
from mediaops.utils import COLOR_FAILURE, COLOR_SUCCESS, time_util
from mediaops.utils.constants import PROCESSOR_USERNAME
from mediaops.utils.file_util import format_size

DRY_RUN_MARKER = "(DRY-RUN) "


@dataclass
class FileOutcome:
    """What happened to one discovered file. Size and MIME are captured before any delete/trash."""
    path: Path
    ok: bool
    started: float
    ended: float
    notes: str
    size_bytes: int = 0
    mime: str = ""
    dry_run: bool = False

    @property
    def duration_seconds(self) -> int:
        return time_util.whole_seconds(self.started, self.ended)


def build_file_message(outcome: FileOutcome, host: str, timestamp: str | None = None) -> WebhookMessage:
    name = outcome.path.name
    if outcome.ok:
        title, color = f"✅ Processed: {name}", COLOR_SUCCESS
    else:
        title, color = f"❌ Failed: {name}", COLOR_FAILURE

    description = outcome.notes
    if outcome.dry_run:
        description = f"{DRY_RUN_MARKER}{description}"

    embed = Embed(
        title=title,
        description=description,
        color=color,
        timestamp=timestamp or time_util.iso_timestamp(),
        fields=[
            EmbedField("File", name, inline=False),
            EmbedField("Size", format_size(outcome.size_bytes), inline=True),
            EmbedField("MIME", f"`{outcome.mime}`", inline=True),
            EmbedField("Duration", f"{outcome.duration_seconds}s", inline=True),
        ],
        footer=host,
    )
    return WebhookMessage(username=PROCESSOR_USERNAME, embeds=[embed])
