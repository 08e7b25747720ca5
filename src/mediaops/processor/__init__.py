"""
Post-download file processing.

- discovery: find recent regular files under the search root.
- organizer: `Organizer` capability and the FileBot implementation.
- report: `FileOutcome` and the per-file Discord embed.
- pipeline: `FileProcessor`, one notification per file, never aborting.
"""

from .discovery import discover_files
from .organizer import FileBotOrganizer, Organizer
from .pipeline import FileProcessor, prompt_confirm
from .report import FileOutcome, build_file_message

__all__ = [
    "discover_files",
    "FileBotOrganizer",
    "Organizer",
    "FileProcessor",
    "prompt_confirm",
    "FileOutcome",
    "build_file_message",
]
