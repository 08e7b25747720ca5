"""
Notification delivery for Discord webhooks and Pushover.

- delivery: `deliver()` retry loop with capped exponential backoff.
- discord: `WebhookMessage`/`Embed`/`EmbedField` payload model and
  `DiscordWebhook`.
- pushover: `PushoverClient` for form-encoded pages.
"""

from .delivery import deliver, is_transient
from .discord import DiscordWebhook, Embed, EmbedField, WebhookMessage
from .pushover import PushoverClient

__all__ = [
    "deliver",
    "is_transient",
    "DiscordWebhook",
    "Embed",
    "EmbedField",
    "WebhookMessage",
    "PushoverClient",
]
