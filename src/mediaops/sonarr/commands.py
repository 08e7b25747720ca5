"""
Sonarr subcommands. Each maps to exactly one API call and returns the lines
to print; the CLI owns stdout and exit codes.
"""
from typing import Dict, List, Tuple

import requests

from mediaops.errors import ApiError
from mediaops.sonarr import formatter
from mediaops.sonarr.client import SonarrClient
from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import SONARR_MISSING_PAGE, SONARR_MISSING_PAGE_SIZE

# CLI name -> (Sonarr command name, confirmation line)
TRIGGER_COMMANDS: Dict[str, Tuple[str, str]] = {
    "missing-search": ("missingEpisodeSearch", "Triggered missing episode search."),
    "refresh": ("refreshSeries", "Triggered refresh for all series."),
    "rss-sync": ("rssSync", "Triggered RSS sync."),
}


def trigger(client: SonarrClient, cli_name: str) -> List[str]:
    """Fire-and-forget a named Sonarr command."""
    command, message = TRIGGER_COMMANDS[cli_name]
    client.run_command(command)
    return [message]


def list_series(client: SonarrClient) -> List[str]:
    data = client.get_json("/series")
    if not isinstance(data, list):
        raise ApiError("Unexpected /series response shape")
    return formatter.series_lines(data)


def list_missing(client: SonarrClient) -> List[str]:
    """First page of wanted/missing episodes. Failures yield an empty listing."""
    params = {"page": SONARR_MISSING_PAGE, "pageSize": SONARR_MISSING_PAGE_SIZE}
    try:
        data = client.get_json("/wanted/missing", params=params)
    except (ApiError, requests.RequestException) as e:
        logger.log("sonarr.missing.failed", LogLevel.WARN, error=str(e))
        return []
    if not isinstance(data, dict):
        return []
    return formatter.missing_lines(data)


def health(client: SonarrClient) -> List[str]:
    data = client.get_json("/health")
    if not isinstance(data, list):
        raise ApiError("Unexpected /health response shape")
    return formatter.health_lines(data)
