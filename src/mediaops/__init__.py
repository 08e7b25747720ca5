"""
Operational tooling for a home media server.

This package backs three standalone command-line tools that share nothing at
runtime except the helpers in this package:

- sonarr: a thin control client for the Sonarr v3 REST API plus a local
  configuration backup.
- processor: a post-download pipeline that hands each new file to FileBot and
  reports every outcome to a Discord webhook.
- health: a disk health reporter covering SMART, NVMe, software RAID and
  kernel/system logs, with Pushover paging on failures.

Shared pieces:
- notify: Discord and Pushover delivery with retry and capped backoff.
- utils: constants, structured logging, subprocess and file helpers.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
