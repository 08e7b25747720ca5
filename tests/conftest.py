from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from mediaops.errors import ProbeError, ToolMissingError
from mediaops.health.probes import (
    ArrayStatus,
    ArrayStatusProbe,
    BlockDevice,
    BlockDeviceLister,
    DeviceHealthProbe,
    LogProbe,
)
from mediaops.notify import DiscordWebhook, PushoverClient
from mediaops.processor.organizer import Organizer


class FakeOrganizer(Organizer):
    """Records every call; returns exit codes from `codes` in order (0 once exhausted)."""

    def __init__(self, codes: List[int] = None):
        self.codes = list(codes or [])
        self.calls: List[Path] = []

    def organize(self, path: Path) -> int:
        self.calls.append(path)
        return self.codes.pop(0) if self.codes else 0


class FakeLister(BlockDeviceLister):
    def __init__(self, devices=None, error: Exception = None):
        self.devices = devices or []
        self.error = error

    def list_devices(self):
        if self.error:
            raise self.error
        return [BlockDevice(name, kind) for name, kind in self.devices]


class FakeDeviceProbe(DeviceHealthProbe):
    """Maps device path -> reading, or -> exception instance to raise."""

    def __init__(self, readings: Dict[str, object] = None, missing: bool = False):
        self.readings = readings or {}
        self.missing = missing
        self.calls: List[str] = []

    def read(self, device: str):
        self.calls.append(device)
        if self.missing:
            raise ToolMissingError("probe")
        value = self.readings.get(device)
        if value is None:
            raise ProbeError(f"no data for {device}")
        if isinstance(value, Exception):
            raise value
        return value


class FakeArrayProbe(ArrayStatusProbe):
    def __init__(self, arrays=None, error: Exception = None):
        self.arrays = arrays or []
        self.error = error

    def list_arrays(self):
        if self.error:
            raise self.error
        return [ArrayStatus(name, state) for name, state in self.arrays]


class FakeLogProbe(LogProbe):
    """`kernel`/`journal` are line lists, or exception instances to raise."""

    def __init__(self, kernel=None, journal=None):
        self.kernel = kernel or []
        self.journal = journal or []
        self.since = None

    @staticmethod
    def _lines(value):
        if isinstance(value, Exception):
            raise value
        return list(value)

    def kernel_errors(self):
        return self._lines(self.kernel)

    def journal_errors(self, since):
        self.since = since
        return self._lines(self.journal)


def response(status_code: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    return resp


@pytest.fixture
def webhook():
    """A configured DiscordWebhook stand-in that always delivers."""
    hook = MagicMock(spec=DiscordWebhook)
    hook.enabled = True
    hook.send.return_value = True
    return hook


@pytest.fixture
def pushover():
    client = MagicMock(spec=PushoverClient)
    client.enabled = True
    client.send.return_value = True
    return client


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
