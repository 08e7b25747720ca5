import os
from datetime import datetime, timezone

import pytest

import disk_health
from mediaops.config import HealthConfig
from mediaops.errors import ProbeError, ToolMissingError
from mediaops.health import HealthReporter, Severity, checks
from mediaops.health.probes import (
    BlockDevice,
    LsblkLister,
    MdadmProbe,
    NvmeProbe,
    SmartctlProbe,
    SystemLogProbe,
)
from mediaops.utils import system_util

from conftest import FakeArrayProbe, FakeDeviceProbe, FakeLister, FakeLogProbe


class FakeShell:
    """Canned (code, stdout, stderr) per exact command line; unknown commands fail."""

    def __init__(self):
        self.installed = {"sudo", "lsblk", "smartctl", "nvme", "mdadm", "dmesg", "journalctl"}
        self.outputs = {}
        self.calls = []

    def on(self, *cmd, code=0, out="", err=""):
        self.outputs[cmd] = (code, out, err)

    def run_cmd(self, cmd):
        self.calls.append(list(cmd))
        return self.outputs.get(tuple(cmd), (1, "", f"unexpected command: {cmd}"))

    def have_cmd(self, binary):
        return binary in self.installed


@pytest.fixture
def shell(monkeypatch):
    fake = FakeShell()
    monkeypatch.setattr(system_util, "run_cmd", fake.run_cmd)
    monkeypatch.setattr(system_util, "have_cmd", fake.have_cmd)
    return fake


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 0)


class TestPrivilege:

    def test_non_root_uses_sudo_without_prompting(self, shell, as_user):
        assert SmartctlProbe()._cmd("smartctl", "-H", "/dev/sda") == ["sudo", "-n", "smartctl", "-H", "/dev/sda"]

    def test_root_runs_directly(self, shell, as_root):
        assert SmartctlProbe()._cmd("smartctl", "-H", "/dev/sda") == ["smartctl", "-H", "/dev/sda"]

    def test_sudo_disabled(self, shell, as_user):
        assert SmartctlProbe(use_sudo=False)._cmd("nvme", "smart-log") == ["nvme", "smart-log"]

    def test_sudo_not_installed(self, shell, as_user):
        shell.installed.discard("sudo")
        assert NvmeProbe()._cmd("nvme", "smart-log") == ["nvme", "smart-log"]


class TestLsblkLister:

    def test_lists_devices(self, shell):
        shell.on("lsblk", "-ndo", "NAME,TYPE", out="sda   disk\nsda1  part\nnvme0n1 disk\nsr0 rom\n")

        devices = LsblkLister().list_devices()

        assert devices == [BlockDevice("sda", "disk"), BlockDevice("sda1", "part"),
                           BlockDevice("nvme0n1", "disk"), BlockDevice("sr0", "rom")]

    def test_missing(self, shell):
        shell.installed.discard("lsblk")
        with pytest.raises(ToolMissingError):
            LsblkLister().list_devices()

    def test_failure(self, shell):
        shell.on("lsblk", "-ndo", "NAME,TYPE", code=32, err="lsblk: bad usage")
        with pytest.raises(ProbeError, match="bad usage"):
            LsblkLister().list_devices()


class TestSmartctlProbe:

    ATTRS = (
        "ID# ATTRIBUTE_NAME          FLAG     VALUE WORST THRESH TYPE      UPDATED  WHEN_FAILED RAW_VALUE\n"
        "  5 Reallocated_Sector_Ct   0x0033   100   100   010    Pre-fail  Always       -       12\n"
    )

    def test_reads_health_and_attributes(self, shell, as_root):
        # Nonzero exit bits are ignored when the output is usable.
        shell.on("smartctl", "-H", "/dev/sda", code=4,
                 out="SMART overall-health self-assessment test result: PASSED\n")
        shell.on("smartctl", "-A", "/dev/sda", code=4, out=self.ATTRS)

        reading = SmartctlProbe().read("/dev/sda")

        assert (reading.health, reading.reallocated, reading.pending) == ("PASSED", 12, 0)

    def test_attribute_table_without_health_line(self, shell, as_root):
        shell.on("smartctl", "-H", "/dev/sda", out="")
        shell.on("smartctl", "-A", "/dev/sda", out=self.ATTRS)

        assert SmartctlProbe().read("/dev/sda").health == "UNKNOWN"

    def test_refused_sudo_is_unreadable_not_failing(self, shell, as_user):
        shell.on("sudo", "-n", "smartctl", "-H", "/dev/sda", code=1, err="sudo: a password is required")
        shell.on("sudo", "-n", "smartctl", "-A", "/dev/sda", code=1, err="sudo: a password is required")
        probe = SmartctlProbe()

        with pytest.raises(ProbeError, match="password is required"):
            probe.read("/dev/sda")

        result = checks.check_smart("/dev/sda", probe)
        assert result.lines == ["SMART /dev/sda: unable to read SMART data"]
        assert result.severity == Severity.WARN

    def test_missing(self, shell):
        shell.installed.discard("smartctl")

        result = checks.check_smart("/dev/sda", SmartctlProbe())

        assert result.lines == ["SMART: smartctl not installed, skipping /dev/sda"]
        assert shell.calls == []


class TestNvmeProbe:

    def test_reads_smart_log(self, shell, as_root):
        shell.on("nvme", "smart-log", "/dev/nvme0n1",
                 out="critical_warning : 0\nmedia_errors : 2\npercentage_used : 7%\n")

        reading = NvmeProbe().read("/dev/nvme0n1")

        assert (reading.media_errors, reading.pct_used) == (2, 7)

    def test_empty_output(self, shell, as_user):
        shell.on("sudo", "-n", "nvme", "smart-log", "/dev/nvme0n1", code=1, err="sudo: a password is required")

        with pytest.raises(ProbeError, match="password is required"):
            NvmeProbe().read("/dev/nvme0n1")


class TestMdadmProbe:

    @pytest.fixture
    def mdstat(self, tmp_path):
        path = tmp_path / "mdstat"
        path.write_text("Personalities : [raid1]\nmd0 : active raid1 sdb1[1] sda1[0]\nunused devices: <none>\n")
        return path

    def test_reads_state(self, shell, as_root, mdstat):
        shell.on("mdadm", "--detail", "/dev/md0", out="/dev/md0:\n    State : clean, degraded\n")

        arrays = MdadmProbe(mdstat=mdstat).list_arrays()

        assert [(a.name, a.state) for a in arrays] == [("md0", "clean, degraded")]
        assert shell.calls == [["mdadm", "--detail", "/dev/md0"]]

    def test_refused_detail(self, shell, as_user, mdstat):
        shell.on("sudo", "-n", "mdadm", "--detail", "/dev/md0", code=1,
                 err="sudo: a password is required")

        result = checks.check_arrays(MdadmProbe(mdstat=mdstat))

        assert result.lines == ["RAID: unable to read array status"]

    def test_missing_mdstat(self, shell, tmp_path):
        with pytest.raises(ProbeError):
            MdadmProbe(mdstat=tmp_path / "absent").list_arrays()

    def test_missing_mdadm(self, shell, mdstat):
        shell.installed.discard("mdadm")
        with pytest.raises(ToolMissingError):
            MdadmProbe(mdstat=mdstat).list_arrays()


class TestSystemLogProbe:

    SINCE = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    JOURNAL = ("sudo", "-n", "journalctl", "--since=2024-05-01 12:00:00", "-p", "err", "--no-pager")

    def test_dmesg_runs_without_sudo(self, shell, as_user):
        shell.on("dmesg", out="[  1.0] usb ok\n[  2.0] blk_update_request: I/O error, dev sdb\n")
        shell.on(*self.JOURNAL, out="-- No entries --\n")

        probe = SystemLogProbe()

        assert probe.kernel_errors() == ["[  2.0] blk_update_request: I/O error, dev sdb"]
        assert probe.journal_errors(self.SINCE) == []
        assert shell.calls == [["dmesg"], list(self.JOURNAL)]

    def test_refused_journal_is_reported(self, shell, as_user):
        shell.on("dmesg", out="ata1: failed command: READ FPDMA QUEUED\n")
        shell.on(*self.JOURNAL, code=1, err="sudo: a password is required")

        result = checks.check_logs(SystemLogProbe(), self.SINCE, 18)

        assert result.lines == [
            "Recent I/O-related errors in logs (last 18 hours):",
            "ata1: failed command: READ FPDMA QUEUED",
            "Logs: unable to read journal (journalctl)",
        ]
        assert result.severity == Severity.WARN

    def test_unreadable_kernel_log_is_not_clean(self, shell, as_root):
        shell.on("dmesg", code=1, err="dmesg: read kernel buffer failed: Operation not permitted")
        shell.on("journalctl", "--since=2024-05-01 12:00:00", "-p", "err", "--no-pager", out="")

        result = checks.check_logs(SystemLogProbe(), self.SINCE, 18)

        assert result.lines == ["Logs: unable to read kernel log (dmesg)"]
        assert result.severity == Severity.WARN

    def test_absent_tools_yield_nothing(self, shell, as_root):
        shell.installed -= {"dmesg", "journalctl"}
        probe = SystemLogProbe()

        assert probe.kernel_errors() == []
        assert probe.journal_errors(self.SINCE) == []
        assert shell.calls == []


class TestDiskHealthMain:

    def test_prints_report(self, monkeypatch, capsys, webhook, pushover, fixed_now):
        reporter = HealthReporter(
            HealthConfig(),
            lister=FakeLister([("sda", "disk")]),
            smart_probe=FakeDeviceProbe(missing=True),
            nvme_probe=FakeDeviceProbe(),
            array_probe=FakeArrayProbe(),
            log_probe=FakeLogProbe(),
            webhook=webhook,
            pushover=pushover,
            host="nas",
            clock=lambda: fixed_now,
        )
        monkeypatch.setattr(HealthReporter, "from_config", lambda config: reporter)

        assert disk_health.main() == 0

        out = capsys.readouterr().out
        assert out.startswith("Disk Health Report for nas at 2024-05-01T12:00:00+00:00\n")
        assert "SMART: smartctl not installed, skipping /dev/sda" in out
        assert out.endswith("Overall status: WARN\n")

    def test_bad_config(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_LOOKBACK_HOURS", "lots")

        assert disk_health.main() == 1
        assert "LOG_LOOKBACK_HOURS" in capsys.readouterr().err
