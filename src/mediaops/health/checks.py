"""
Individual health checks and their classification rules.

Every check returns a `CheckResult`: the report lines it contributes and the
severity it asks for. Checks never raise for a missing or failing tool; the
two cases get different report lines (`not installed` vs `unable to read`)
but contribute the same severity.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from mediaops.errors import ProbeError, ToolMissingError
from mediaops.health.probes import (
    ArrayStatusProbe,
    DeviceHealthProbe,
    LogProbe,
    NvmeReading,
    SmartReading,
)
from mediaops.health.severity import Severity
from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import (
    NVME_PCT_USED_WARN,
    RAID_BAD_STATE_REGEX,
    REALLOCATED_BAD_THRESHOLD,
    SMART_PASSING_HEALTH,
)


@dataclass
class CheckResult:
    lines: List[str] = field(default_factory=list)
    severity: Severity = Severity.OK


def classify_smart(reading: SmartReading, reallocated_threshold: int = REALLOCATED_BAD_THRESHOLD) -> Severity:
    """
    BAD when the drive does not report a passing health flag, or when any
    counter is nonzero and either reallocations exceed the threshold or any
    sector is pending/uncorrectable. WARN for a few reallocations only.
    """
    status = Severity.OK
    if reading.health not in SMART_PASSING_HEALTH:
        status = Severity.BAD

    if reading.reallocated > 0 or reading.pending > 0 or reading.uncorrectable > 0:
        if reading.reallocated > reallocated_threshold or reading.pending > 0 or reading.uncorrectable > 0:
            status = Severity.BAD
        elif status != Severity.BAD:
            status = Severity.WARN
    return status


def classify_nvme(reading: NvmeReading, pct_used_warn: int = NVME_PCT_USED_WARN) -> Severity:
    if reading.critical_warning != 0 or reading.media_errors > 0:
        return Severity.BAD
    if reading.pct_used >= pct_used_warn or reading.err_log_entries > 0:
        return Severity.WARN
    return Severity.OK


def classify_array_state(state: str) -> Severity:
    return Severity.BAD if RAID_BAD_STATE_REGEX.search(state or "") else Severity.OK


def check_smart(device: str, probe: DeviceHealthProbe,
                reallocated_threshold: int = REALLOCATED_BAD_THRESHOLD) -> CheckResult:
    try:
        reading = probe.read(device)
    except ToolMissingError:
        return CheckResult([f"SMART: smartctl not installed, skipping {device}"], Severity.WARN)
    except ProbeError as e:
        logger.log("health.smart.unreadable", LogLevel.WARN, device=device, error=str(e))
        return CheckResult([f"SMART {device}: unable to read SMART data"], Severity.WARN)

    line = (f"SMART {device}: health={reading.health}, reallocated={reading.reallocated}, "
            f"pending={reading.pending}, uncorrectable={reading.uncorrectable}")
    return CheckResult([line], classify_smart(reading, reallocated_threshold))


def check_nvme(device: str, probe: DeviceHealthProbe, pct_used_warn: int = NVME_PCT_USED_WARN) -> CheckResult:
    try:
        reading = probe.read(device)
    except ToolMissingError:
        return CheckResult([f"NVMe: nvme-cli not installed, skipping {device}"], Severity.WARN)
    except ProbeError as e:
        logger.log("health.nvme.unreadable", LogLevel.WARN, device=device, error=str(e))
        return CheckResult([f"NVMe {device}: unable to read smart-log"], Severity.WARN)

    line = (f"NVMe {device}: media_errors={reading.media_errors}, err_logs={reading.err_log_entries}, "
            f"pct_used={reading.pct_used}, critical={reading.critical_warning}, temp={reading.temperature}")
    return CheckResult([line], classify_nvme(reading, pct_used_warn))


def check_arrays(probe: ArrayStatusProbe) -> CheckResult:
    """Software RAID. A missing or failing mdadm is noted but does not escalate."""
    try:
        arrays = probe.list_arrays()
    except ToolMissingError:
        return CheckResult(["RAID: mdadm not installed, skipping md arrays"])
    except ProbeError as e:
        logger.log("health.raid.unreadable", LogLevel.WARN, error=str(e))
        return CheckResult(["RAID: unable to read array status"])

    result = CheckResult()
    for array in arrays:
        result.lines.append(f"RAID {array.path}: state={array.state}")
        result.severity = max(result.severity, classify_array_state(array.state))
    return result


def _read_log(label: str, read, *args) -> Tuple[List[str], Optional[str]]:
    """(matching lines, report line when the source could not be read)."""
    try:
        return read(*args), None
    except ProbeError as e:
        logger.log("health.logs.unreadable", LogLevel.WARN, source=label, error=str(e))
        return [], f"Logs: unable to read {label}"


def check_logs(probe: LogProbe, since: datetime, lookback_hours: int) -> CheckResult:
    """
    Kernel ring buffer then journal. A source that could not be read is
    reported on its own line and counts as WARN.
    """
    kernel, kernel_failure = _read_log("kernel log (dmesg)", probe.kernel_errors)
    journal, journal_failure = _read_log("journal (journalctl)", probe.journal_errors, since)
    failures = [line for line in (kernel_failure, journal_failure) if line]

    if not kernel and not journal:
        if failures:
            return CheckResult(failures, Severity.WARN)
        return CheckResult([f"Logs: no obvious I/O errors in last {lookback_hours} hours."])

    lines = [f"Recent I/O-related errors in logs (last {lookback_hours} hours):"]
    lines.extend(kernel)
    lines.extend(journal)
    lines.extend(failures)
    return CheckResult(lines, Severity.WARN)
