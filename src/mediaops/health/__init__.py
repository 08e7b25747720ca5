"""
Disk health reporting.

- severity: `Severity` (OK < WARN < BAD) and the `escalate` reducer.
- probes: capability interfaces over lsblk, smartctl, nvme-cli, mdadm and the
  system logs, with subprocess-backed implementations.
- checks: per-device/per-source checks and classification rules.
- reporter: `HealthReporter`, which builds the report and sends notifications.
"""

from .checks import CheckResult, classify_nvme, classify_smart
from .reporter import HealthReport, HealthReporter
from .severity import Severity, escalate, overall

__all__ = [
    "CheckResult",
    "classify_nvme",
    "classify_smart",
    "HealthReport",
    "HealthReporter",
    "Severity",
    "escalate",
    "overall",
]
