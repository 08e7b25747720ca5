"""
Constants and default settings shared by the media server tools.

This module holds the defaults every tool falls back to when an environment
variable is not set, the thresholds used by the disk health classifiers, the
status strings written to logs, and the fixed endpoints and limits of the
notification services. A `.env` file in the working directory is loaded on
import so local overrides apply to every tool.
"""

import re

from dotenv import load_dotenv

load_dotenv()

# Sonarr API
SONARR_DEFAULT_URL = "http://localhost:8989"
SONARR_API_PATH = "/api/v3"
SONARR_DEFAULT_CONFIG_DIR = "/var/lib/sonarr"
SONARR_DEFAULT_SERVICE_FILE = "/etc/systemd/system/sonarr.service"
SONARR_DEFAULT_BACKUP_DIR = "~/sonarr-backups"
SONARR_MISSING_PAGE = 1
SONARR_MISSING_PAGE_SIZE = 200
HTTP_TIMEOUT = 15

# Notification delivery
MAX_DELIVERY_ATTEMPTS = 5
INITIAL_BACKOFF_SECONDS = 1
MAX_BACKOFF_SECONDS = 20
PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"
PUSHOVER_MESSAGE_LIMIT = 1024
DISCORD_CONTENT_LIMIT = 2000

# File processing pipeline
PROCESSOR_DEFAULT_SEARCH_DIR = "/srv/Share/torrents/"
PROCESSOR_DEFAULT_OUTPUT_DIR = "/srv/TVShows/"
PROCESSOR_DEFAULT_TRASH_DIR = "~/FileBot_Processed_Trash"
PROCESSOR_DEFAULT_MAX_AGE_DAYS = 3
PROCESSOR_DEFAULT_EXCLUDE_NAME = "*qB*"
PROCESSOR_DEFAULT_EXCLUDE_PATH = "xattr"
PROCESSOR_USERNAME = "File Processor"
FILEBOT_DEFAULT_BIN = "filebot"
FILEBOT_DEFAULT_FORMAT = "-non-strict --order Airdate --conflict auto --def movieDB=TheMovieDB seriesDB=TheTVDB"
FILEBOT_DEFAULT_ACTION = "copy"
FILEBOT_ACTIONS = ("copy", "move")
FILEBOT_MISSING_EXIT = 127
COLOR_SUCCESS = 0x35C759
COLOR_FAILURE = 0xFF3B30
DEFAULT_MIME_TYPE = "application/octet-stream"
SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

# Disk health thresholds
LOG_LOOKBACK_HOURS = 18
REALLOCATED_BAD_THRESHOLD = 10
NVME_PCT_USED_WARN = 80
LOG_TAIL_LINES = 10
SMART_PASSING_HEALTH = {"PASSED", "OK"}
RAID_BAD_STATE_REGEX = re.compile(r"degraded|faulty|recovering", re.IGNORECASE)
IO_ERROR_REGEX = re.compile(r"I/O error|unrecovered read error|failed command: READ", re.IGNORECASE)
MDSTAT_PATH = "/proc/mdstat"
REPORT_RULE_HEAVY = "=" * 52
REPORT_RULE_LIGHT = "-" * 52

# Processing status codes
STATUS_OK = "OK"
STATUS_FAIL = "FAIL"
STATUS_DRY_RUN = "DRY-RUN"
