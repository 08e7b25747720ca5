"""
Hardware and log probes behind small capability interfaces.

Each interface has one implementation that shells out to the real tool
(lsblk, smartctl, nvme-cli, mdadm, dmesg, journalctl). Implementations raise
`ToolMissingError` when the binary is not installed and `ProbeError` when it
ran but gave nothing usable, so callers can report the two differently.
"""
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from mediaops.errors import ProbeError
from mediaops.utils import system_util
from mediaops.utils.constants import IO_ERROR_REGEX, LOG_TAIL_LINES, MDSTAT_PATH

_DIGITS = re.compile(r"-?\d+")


def parse_int(text: str | None, default: int = 0) -> int:
    """First integer in `text`, ignoring thousands separators ('1,234' -> 1234, '23%' -> 23)."""
    if not text:
        return default
    match = _DIGITS.search(text.replace(",", ""))
    return int(match.group()) if match else default


@dataclass
class BlockDevice:
    name: str
    type: str

    @property
    def path(self) -> str:
        return f"/dev/{self.name}"

    @property
    def is_disk(self) -> bool:
        return self.type == "disk"

    @property
    def is_nvme(self) -> bool:
        return self.name.startswith("nvme")


@dataclass
class SmartReading:
    health: str
    reallocated: int = 0
    pending: int = 0
    uncorrectable: int = 0


@dataclass
class NvmeReading:
    critical_warning: int = 0
    media_errors: int = 0
    err_log_entries: int = 0
    pct_used: int = 0
    temperature: str = ""


@dataclass
class ArrayStatus:
    name: str
    state: str

    @property
    def path(self) -> str:
        return f"/dev/{self.name}"


class _Privileged:
    """Prefix commands with `sudo -n` when asked to and not already root."""

    def __init__(self, use_sudo: bool = True):
        self.use_sudo = use_sudo

    def _cmd(self, *args: str) -> List[str]:
        if self.use_sudo and os.geteuid() != 0 and system_util.have_cmd("sudo"):
            return ["sudo", "-n", *args]
        return list(args)


class BlockDeviceLister(ABC):
    @abstractmethod
    def list_devices(self) -> List[BlockDevice]:
        """All block devices with their lsblk TYPE."""


class DeviceHealthProbe(ABC):
    binary: str = ""

    @abstractmethod
    def read(self, device: str):
        """Read diagnostic counters for one device path."""


class ArrayStatusProbe(ABC):
    @abstractmethod
    def list_arrays(self) -> List[ArrayStatus]:
        """Active software RAID arrays and their reported state."""


class LogProbe(ABC):
    @abstractmethod
    def kernel_errors(self) -> List[str]:
        """Kernel ring buffer lines that look like I/O errors."""

    @abstractmethod
    def journal_errors(self, since: datetime) -> List[str]:
        """Journal error-priority lines since `since` that look like I/O errors."""


class LsblkLister(BlockDeviceLister):

    def list_devices(self) -> List[BlockDevice]:
        system_util.require_binary("lsblk")
        code, out, err = system_util.run_cmd(["lsblk", "-ndo", "NAME,TYPE"])
        if code != 0:
            raise ProbeError(f"lsblk failed: {err.strip()}")
        devices = []
        for line in out.splitlines():
            parts = line.split()
            if len(parts) >= 2:
                devices.append(BlockDevice(parts[0], parts[1]))
        return devices


class SmartctlProbe(_Privileged, DeviceHealthProbe):
    binary = "smartctl"

    def read(self, device: str) -> SmartReading:
        system_util.require_binary(self.binary)
        # smartctl's exit status is a bitmask that is nonzero for plenty of
        # healthy drives, so only the output is trusted.
        _, health_out, health_err = system_util.run_cmd(self._cmd(self.binary, "-H", device))
        _, attr_out, attr_err = system_util.run_cmd(self._cmd(self.binary, "-A", device))
        health = parse_smart_health(health_out)
        if health == "UNKNOWN" and not has_smart_attributes(attr_out):
            raise ProbeError(health_err.strip() or attr_err.strip() or f"smartctl returned no data for {device}")
        return SmartReading(
            health=health,
            **parse_smart_attributes(attr_out),
        )


def parse_smart_health(output: str) -> str:
    for line in output.splitlines():
        if "overall-health" in line or "SMART Health Status:" in line:
            tokens = line.split()
            if tokens:
                return tokens[-1]
    return "UNKNOWN"


_SMART_ATTRIBUTES = {
    "Reallocated_Sector_Ct": "reallocated",
    "Current_Pending_Sector": "pending",
    "Offline_Uncorrectable": "uncorrectable",
}


def parse_smart_attributes(output: str) -> Dict[str, int]:
    """RAW_VALUE (10th column) of the attributes we classify on; absent ones read as 0."""
    values = {field: 0 for field in _SMART_ATTRIBUTES.values()}
    for line in output.splitlines():
        tokens = line.split()
        if len(tokens) >= 10 and tokens[1] in _SMART_ATTRIBUTES:
            values[_SMART_ATTRIBUTES[tokens[1]]] = parse_int(tokens[9])
    return values


def has_smart_attributes(output: str) -> bool:
    """True when `smartctl -A` printed its attribute table."""
    return any(line.split()[1:2] == ["ATTRIBUTE_NAME"] for line in output.splitlines())


class NvmeProbe(_Privileged, DeviceHealthProbe):
    binary = "nvme"

    def read(self, device: str) -> NvmeReading:
        system_util.require_binary(self.binary)
        code, out, err = system_util.run_cmd(self._cmd(self.binary, "smart-log", device))
        if not out.strip():
            raise ProbeError(err.strip() or f"nvme smart-log exited with {code}")
        return parse_nvme_smart_log(out)


def parse_nvme_smart_log(output: str) -> NvmeReading:
    fields: Dict[str, str] = {}
    for line in output.splitlines():
        if ":" not in line:
            continue
        key, _, value = line.partition(":")
        key = key.strip().lower().replace(" ", "_")
        # First occurrence wins ('temperature' also prefixes sensor lines).
        fields.setdefault(key, value.strip())
    return NvmeReading(
        critical_warning=parse_int(fields.get("critical_warning")),
        media_errors=parse_int(fields.get("media_errors")),
        err_log_entries=parse_int(fields.get("num_err_log_entries")),
        pct_used=parse_int(fields.get("percentage_used")),
        temperature=fields.get("temperature", ""),
    )


class MdadmProbe(_Privileged, ArrayStatusProbe):

    def __init__(self, use_sudo: bool = True, mdstat: Path = Path(MDSTAT_PATH)):
        super().__init__(use_sudo)
        self.mdstat = mdstat

    def list_arrays(self) -> List[ArrayStatus]:
        system_util.require_binary("mdadm")
        try:
            text = self.mdstat.read_text()
        except OSError as e:
            raise ProbeError(f"cannot read {self.mdstat}: {e}") from e

        arrays = []
        for name in parse_mdstat_arrays(text):
            _, detail, err = system_util.run_cmd(self._cmd("mdadm", "--detail", f"/dev/{name}"))
            if not detail.strip():
                raise ProbeError(f"mdadm --detail /dev/{name} gave no output: {err.strip()}")
            arrays.append(ArrayStatus(name, parse_mdadm_state(detail)))
        return arrays


def parse_mdstat_arrays(text: str) -> List[str]:
    return [line.split()[0] for line in text.splitlines() if re.match(r"^md\d+", line)]


def parse_mdadm_state(detail: str) -> str:
    for line in detail.splitlines():
        if "State :" in line:
            return line.split(": ", 1)[-1].strip()
    return ""


class SystemLogProbe(_Privileged, LogProbe):
    """
    dmesg runs unprivileged; journalctl goes through sudo like the other
    probes. A tool that is not installed yields no lines. A tool that exits
    nonzero without output raises `ProbeError`.
    """

    def kernel_errors(self) -> List[str]:
        if not system_util.have_cmd("dmesg"):
            return []
        return self._scan("dmesg", ["dmesg"])

    def journal_errors(self, since: datetime) -> List[str]:
        if not system_util.have_cmd("journalctl"):
            return []
        stamp = since.strftime("%Y-%m-%d %H:%M:%S")
        return self._scan("journalctl", self._cmd("journalctl", f"--since={stamp}", "-p", "err", "--no-pager"))

    @staticmethod
    def _scan(label: str, cmd: List[str]) -> List[str]:
        code, out, err = system_util.run_cmd(cmd)
        if code != 0 and not out.strip():
            raise ProbeError(f"{label} failed: {err.strip() or f'exit {code}'}")
        return match_io_errors(out)


def match_io_errors(output: str, tail: int = LOG_TAIL_LINES) -> List[str]:
    hits = [line for line in output.splitlines() if IO_ERROR_REGEX.search(line)]
    return hits[-tail:]
