"""
Immutable run configuration for each tool.

Each tool builds its config exactly once at startup (from the environment,
plus CLI flags for the processor) and passes it down explicitly. Nothing in
the package reads configuration from module globals after that point.
"""
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from mediaops.errors import ConfigurationError
from mediaops.utils import constants


class OriginalAction:
    """What to do with the source file after a successful organize."""
    KEEP = "KEEP"
    DELETE = "DELETE"
    TRASH = "TRASH"

    ALL = (KEEP, DELETE, TRASH)

    @classmethod
    def parse(cls, value: str) -> str:
        action = (value or "").strip().upper()
        if action not in cls.ALL:
            raise ConfigurationError(f"Invalid original file action '{value}' (expected one of {', '.join(cls.ALL)})")
        return action


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


@dataclass(frozen=True)
class NotifyConfig:
    discord_webhook_url: str = ""
    pushover_token: str = ""
    pushover_user: str = ""

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "NotifyConfig":
        env = os.environ if env is None else env
        return cls(
            discord_webhook_url=env.get("DISCORD_WEBHOOK_URL", ""),
            pushover_token=env.get("PUSHOVER_TOKEN", ""),
            pushover_user=env.get("PUSHOVER_USER", ""),
        )


@dataclass(frozen=True)
class SonarrConfig:
    url: str = constants.SONARR_DEFAULT_URL
    api_key: str = ""
    config_dir: Path = Path(constants.SONARR_DEFAULT_CONFIG_DIR)
    service_file: Path = Path(constants.SONARR_DEFAULT_SERVICE_FILE)
    backup_dir: Path = Path(constants.SONARR_DEFAULT_BACKUP_DIR).expanduser()

    @property
    def api_base(self) -> str:
        return f"{self.url.rstrip('/')}{constants.SONARR_API_PATH}"

    def require_api(self) -> None:
        """Raise ConfigurationError unless both the URL and API key are set."""
        if not self.url:
            raise ConfigurationError("SONARR_URL is not set.")
        if not self.api_key:
            raise ConfigurationError("SONARR_API_KEY is not set.")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SonarrConfig":
        env = os.environ if env is None else env
        return cls(
            url=env.get("SONARR_URL") or constants.SONARR_DEFAULT_URL,
            api_key=env.get("SONARR_API_KEY", ""),
            config_dir=Path(env.get("SONARR_CONFIG_DIR") or constants.SONARR_DEFAULT_CONFIG_DIR),
            service_file=Path(env.get("SONARR_SERVICE_FILE") or constants.SONARR_DEFAULT_SERVICE_FILE),
            backup_dir=Path(env.get("BACKUP_DIR") or constants.SONARR_DEFAULT_BACKUP_DIR).expanduser(),
        )


@dataclass(frozen=True)
class ProcessorConfig:
    search_dir: Path
    output_dir: Path
    trash_dir: Path
    filebot_bin: str = constants.FILEBOT_DEFAULT_BIN
    filebot_format: str = constants.FILEBOT_DEFAULT_FORMAT
    filebot_action: str = constants.FILEBOT_DEFAULT_ACTION
    exclude_list: Optional[Path] = None
    original_action: str = OriginalAction.KEEP
    max_age: timedelta = timedelta(days=constants.PROCESSOR_DEFAULT_MAX_AGE_DAYS)
    exclude_name: str = constants.PROCESSOR_DEFAULT_EXCLUDE_NAME
    exclude_path: str = constants.PROCESSOR_DEFAULT_EXCLUDE_PATH
    dry_run: bool = False
    auto_confirm: bool = True
    notify: NotifyConfig = NotifyConfig()

    def __post_init__(self):
        if self.filebot_action not in constants.FILEBOT_ACTIONS:
            raise ConfigurationError(
                f"Invalid FileBot action '{self.filebot_action}' (expected one of {', '.join(constants.FILEBOT_ACTIONS)})"
            )
        if self.original_action not in OriginalAction.ALL:
            raise ConfigurationError(f"Invalid original file action '{self.original_action}'")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides) -> "ProcessorConfig":
        """Build from the environment; keyword overrides (e.g. parsed CLI flags) win when not None."""
        env = os.environ if env is None else env
        exclude_list = env.get("FILEBOT_EXCLUDE_LIST")
        values = dict(
            search_dir=Path(env.get("PROCESSOR_SEARCH_DIR") or constants.PROCESSOR_DEFAULT_SEARCH_DIR),
            output_dir=Path(env.get("PROCESSOR_OUTPUT_DIR") or constants.PROCESSOR_DEFAULT_OUTPUT_DIR),
            trash_dir=Path(env.get("TRASH_DIR") or constants.PROCESSOR_DEFAULT_TRASH_DIR).expanduser(),
            filebot_bin=env.get("FILEBOT_BIN") or constants.FILEBOT_DEFAULT_BIN,
            filebot_format=env.get("FILEBOT_FORMAT") or constants.FILEBOT_DEFAULT_FORMAT,
            filebot_action=(env.get("FILEBOT_ACTION") or constants.FILEBOT_DEFAULT_ACTION).lower(),
            exclude_list=Path(exclude_list) if exclude_list else None,
            original_action=env.get("ORIGINAL_FILE_ACTION") or OriginalAction.KEEP,
            max_age=timedelta(days=_env_int(env, "PROCESSOR_MAX_AGE_DAYS", constants.PROCESSOR_DEFAULT_MAX_AGE_DAYS)),
            exclude_name=env.get("PROCESSOR_EXCLUDE_NAME", constants.PROCESSOR_DEFAULT_EXCLUDE_NAME),
            exclude_path=env.get("PROCESSOR_EXCLUDE_PATH", constants.PROCESSOR_DEFAULT_EXCLUDE_PATH),
            auto_confirm=_env_bool(env, "PROCESSOR_AUTO_CONFIRM", True),
            notify=NotifyConfig.from_env(env),
        )
        values.update({key: value for key, value in overrides.items() if value is not None})
        # Parsed after overrides so a valid flag wins over a bad environment value.
        values["original_action"] = OriginalAction.parse(values["original_action"])
        return cls(**values)


@dataclass(frozen=True)
class HealthConfig:
    log_lookback_hours: int = constants.LOG_LOOKBACK_HOURS
    reallocated_threshold: int = constants.REALLOCATED_BAD_THRESHOLD
    nvme_pct_used_warn: int = constants.NVME_PCT_USED_WARN
    use_sudo: bool = True
    notify: NotifyConfig = NotifyConfig()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "HealthConfig":
        env = os.environ if env is None else env
        return cls(
            log_lookback_hours=_env_int(env, "LOG_LOOKBACK_HOURS", constants.LOG_LOOKBACK_HOURS),
            use_sudo=_env_bool(env, "DISK_HEALTH_SUDO", True),
            notify=NotifyConfig.from_env(env),
        )
