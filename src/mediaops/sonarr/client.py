"""
Minimal Sonarr v3 API client.

One method per HTTP verb, no retries: a transport error propagates to the
caller, an HTTP error status is returned as-is for the caller to judge.
"""
from typing import Any, Dict, Optional

import requests

from mediaops.config import SonarrConfig
from mediaops.errors import ApiError
from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import HTTP_TIMEOUT


class SonarrClient:
    """Client for the Sonarr REST API."""

    def __init__(self, config: SonarrConfig, session: Optional[requests.Session] = None):
        config.require_api()
        self.base_url = config.api_base
        self.session = session or requests.Session()
        self.session.headers.update({"X-Api-Key": config.api_key})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        logger.log("sonarr.get", LogLevel.DEBUG, path=path)
        return self.session.get(self._url(path), params=params, timeout=HTTP_TIMEOUT)

    def post(self, path: str, payload: Dict[str, Any]) -> requests.Response:
        logger.log("sonarr.post", LogLevel.DEBUG, path=path)
        return self.session.post(self._url(path), json=payload, timeout=HTTP_TIMEOUT)

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET and decode the body, raising ApiError if it is not JSON."""
        response = self.get(path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Sonarr returned a non-JSON response for {path} (HTTP {response.status_code})") from e

    def run_command(self, name: str) -> requests.Response:
        """Queue a named Sonarr command. The response body is not inspected."""
        response = self.post("/command", {"name": name})
        if not response.ok:
            logger.log("sonarr.command.rejected", LogLevel.WARN, command=name, status=response.status_code)
        return response
