"""
Discord webhook messages and delivery.

Messages are plain dataclasses turned into a dict by `to_payload()` and
serialized by `requests`, so titles, notes and filenames never need manual
escaping.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from mediaops.notify.delivery import deliver
from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import DISCORD_CONTENT_LIMIT, HTTP_TIMEOUT


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value, "inline": self.inline}


@dataclass
class Embed:
    title: str
    description: str = ""
    color: Optional[int] = None
    timestamp: Optional[str] = None
    fields: List[EmbedField] = field(default_factory=list)
    footer: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"title": self.title, "description": self.description}
        if self.color is not None:
            payload["color"] = self.color
        if self.timestamp:
            payload["timestamp"] = self.timestamp
        if self.fields:
            payload["fields"] = [f.to_payload() for f in self.fields]
        if self.footer:
            payload["footer"] = {"text": self.footer}
        return payload


@dataclass
class WebhookMessage:
    """A Discord webhook payload: plain `content`, rich `embeds`, or both."""
    content: Optional[str] = None
    username: Optional[str] = None
    embeds: List[Embed] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.username:
            payload["username"] = self.username
        if self.content is not None:
            payload["content"] = truncate(self.content, DISCORD_CONTENT_LIMIT)
        if self.embeds:
            payload["embeds"] = [e.to_payload() for e in self.embeds]
        return payload


def truncate(text: str, limit: int, marker: str = "\n…(truncated)") -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(marker)] + marker


class DiscordWebhook:
    """Posts WebhookMessages to one Discord webhook URL."""

    def __init__(self, url: str, session: Optional[requests.Session] = None, **delivery_options):
        self.url = url
        self.session = session or requests.Session()
        self.delivery_options = delivery_options

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def send(self, message: WebhookMessage) -> bool:
        if not self.enabled:
            logger.log("notify.discord.disabled", LogLevel.DEBUG)
            return False

        payload = message.to_payload()
        return deliver(
            lambda: self.session.post(self.url, json=payload, timeout=HTTP_TIMEOUT),
            label="discord",
            **self.delivery_options,
        )
