"""
Disk health report: run every check in a fixed order, fold the severities,
send the summary and page on BAD.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from mediaops.config import HealthConfig
from mediaops.errors import ProbeError, ToolMissingError
from mediaops.health import checks
from mediaops.health.probes import (
    ArrayStatusProbe,
    BlockDeviceLister,
    DeviceHealthProbe,
    LogProbe,
    LsblkLister,
    MdadmProbe,
    NvmeProbe,
    SmartctlProbe,
    SystemLogProbe,
)
from mediaops.health.severity import Severity, escalate
from mediaops.notify import DiscordWebhook, PushoverClient, WebhookMessage
from mediaops.utils import LogLevel, logger, system_util, time_util
from mediaops.utils.constants import REPORT_RULE_HEAVY, REPORT_RULE_LIGHT


@dataclass
class HealthReport:
    lines: List[str] = field(default_factory=list)
    severity: Severity = Severity.OK

    def append(self, line: str) -> None:
        self.lines.append(line)

    def add(self, result: checks.CheckResult) -> None:
        self.lines.extend(result.lines)
        self.severity = escalate(self.severity, result.severity)

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


class HealthReporter:

    def __init__(
            self,
            config: HealthConfig,
            lister: BlockDeviceLister,
            smart_probe: DeviceHealthProbe,
            nvme_probe: DeviceHealthProbe,
            array_probe: ArrayStatusProbe,
            log_probe: LogProbe,
            webhook: DiscordWebhook,
            pushover: PushoverClient,
            host: Optional[str] = None,
            clock: Callable[[], datetime] = time_util.now_local,
    ):
        self.config = config
        self.lister = lister
        self.smart_probe = smart_probe
        self.nvme_probe = nvme_probe
        self.array_probe = array_probe
        self.log_probe = log_probe
        self.webhook = webhook
        self.pushover = pushover
        self.host = host or system_util.hostname()
        self.clock = clock

    @classmethod
    def from_config(cls, config: HealthConfig) -> "HealthReporter":
        """Reporter wired to the real system tools and notification services."""
        return cls(
            config,
            lister=LsblkLister(),
            smart_probe=SmartctlProbe(config.use_sudo),
            nvme_probe=NvmeProbe(config.use_sudo),
            array_probe=MdadmProbe(config.use_sudo),
            log_probe=SystemLogProbe(config.use_sudo),
            webhook=DiscordWebhook(config.notify.discord_webhook_url),
            pushover=PushoverClient(config.notify.pushover_token, config.notify.pushover_user),
        )

    def build(self) -> HealthReport:
        cfg = self.config
        now = self.clock()
        report = HealthReport()
        report.append(f"Disk Health Report for {self.host} at {time_util.iso_timestamp(now)}")
        report.append(REPORT_RULE_HEAVY)

        self._check_devices(report)
        report.append(REPORT_RULE_LIGHT)

        report.add(checks.check_arrays(self.array_probe))
        report.append(REPORT_RULE_LIGHT)

        since = time_util.lookback_start(cfg.log_lookback_hours, now)
        report.add(checks.check_logs(self.log_probe, since, cfg.log_lookback_hours))
        report.append(REPORT_RULE_LIGHT)

        report.append(f"Overall status: {report.severity}")
        logger.log("health.report.built", LogLevel.INFO, host=self.host, status=str(report.severity))
        return report

    def _check_devices(self, report: HealthReport) -> None:
        cfg = self.config
        try:
            devices = [d for d in self.lister.list_devices() if d.is_disk]
        except ToolMissingError:
            report.add(checks.CheckResult(["lsblk not available; cannot enumerate drives."], Severity.WARN))
            return
        except ProbeError as e:
            logger.log("health.lsblk.failed", LogLevel.WARN, error=str(e))
            report.add(checks.CheckResult(["lsblk failed; cannot enumerate drives."], Severity.WARN))
            return

        for device in devices:
            if not device.is_nvme:
                report.add(checks.check_smart(device.path, self.smart_probe, cfg.reallocated_threshold))
        for device in devices:
            if device.is_nvme:
                report.add(checks.check_nvme(device.path, self.nvme_probe, cfg.nvme_pct_used_warn))

    def send(self, report: HealthReport) -> None:
        """Post the summary; page as well when the run ended BAD."""
        content = f"[{self.host}] Disk Health Report ({report.severity})\n\n{report.text}"
        if self.webhook.enabled and not self.webhook.send(WebhookMessage(content=content)):
            logger.log("health.notify_failed", LogLevel.WARN, target="discord")

        if report.severity == Severity.BAD and self.pushover.enabled:
            if not self.pushover.send(f"[{self.host}] DISK ALERT", report.text):
                logger.log("health.notify_failed", LogLevel.WARN, target="pushover")

    def run(self) -> HealthReport:
        report = self.build()
        self.send(report)
        return report
