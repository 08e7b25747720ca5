"""Pushover paging for alerts that need more attention than a channel post."""
from typing import Optional

import requests

from mediaops.notify.delivery import deliver
from mediaops.notify.discord import truncate
from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import HTTP_TIMEOUT, PUSHOVER_API_URL, PUSHOVER_MESSAGE_LIMIT


class PushoverClient:

    def __init__(self, token: str, user: str, session: Optional[requests.Session] = None,
                 api_url: str = PUSHOVER_API_URL, **delivery_options):
        self.token = token
        self.user = user
        self.api_url = api_url
        self.session = session or requests.Session()
        self.delivery_options = delivery_options

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.user)

    def send(self, title: str, message: str) -> bool:
        """Send a page (form-encoded POST). Returns False if not configured or delivery failed."""
        if not self.enabled:
            logger.log("notify.pushover.disabled", LogLevel.DEBUG)
            return False

        form = {
            "token": self.token,
            "user": self.user,
            "title": title,
            "message": truncate(message, PUSHOVER_MESSAGE_LIMIT),
        }
        return deliver(
            lambda: self.session.post(self.api_url, data=form, timeout=HTTP_TIMEOUT),
            label="pushover",
            **self.delivery_options,
        )
