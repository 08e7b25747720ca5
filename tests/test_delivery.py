from unittest.mock import MagicMock

import pytest
import requests

from mediaops.notify import DiscordWebhook, PushoverClient, WebhookMessage, deliver, is_transient
from mediaops.notify.discord import Embed, EmbedField, truncate
from mediaops.utils.constants import DISCORD_CONTENT_LIMIT, PUSHOVER_API_URL

from conftest import response


def sender(*outcomes):
    """A send() mock yielding responses for ints and raising for exceptions."""
    return MagicMock(side_effect=[o if isinstance(o, Exception) else response(o) for o in outcomes])


class TestIsTransient:

    @pytest.mark.parametrize("code", [429, 500, 502, 503, 599, None])
    def test_transient(self, code):
        assert is_transient(code) is True

    @pytest.mark.parametrize("code", [400, 401, 403, 404, 413])
    def test_not_transient(self, code):
        assert is_transient(code) is False


class TestDeliver:

    def test_success_first_try(self):
        send = sender(204)
        sleep = MagicMock()

        assert deliver(send, sleep=sleep) is True
        assert send.call_count == 1
        sleep.assert_not_called()

    def test_four_transient_failures_then_success(self):
        send = sender(503, 429, 500, 502, 200)
        sleep = MagicMock()

        assert deliver(send, sleep=sleep) is True
        assert send.call_count == 5
        assert [c.args[0] for c in sleep.call_args_list] == [1, 2, 4, 8]

    def test_five_transient_failures_gives_up(self):
        send = sender(500, 500, 429, 503, 500)
        sleep = MagicMock()

        assert deliver(send, sleep=sleep) is False
        assert send.call_count == 5
        # No wait after the final attempt.
        assert sleep.call_count == 4

    def test_unauthorized_is_not_retried(self):
        send = sender(401)
        sleep = MagicMock()

        assert deliver(send, sleep=sleep) is False
        assert send.call_count == 1
        sleep.assert_not_called()

    def test_transport_errors_are_retried(self):
        send = sender(requests.ConnectionError("refused"), requests.Timeout("slow"), 204)

        assert deliver(send, sleep=MagicMock()) is True
        assert send.call_count == 3

    def test_backoff_is_capped(self):
        send = sender(*([503] * 8))
        sleep = MagicMock()

        assert deliver(send, max_attempts=8, sleep=sleep) is False
        assert [c.args[0] for c in sleep.call_args_list] == [1, 2, 4, 8, 16, 20, 20]


class TestWebhookMessage:

    def test_embed_payload(self):
        message = WebhookMessage(
            username="File Processor",
            embeds=[Embed(
                title="✅ Processed: a.mkv",
                description='notes with "quotes"\nand newline',
                color=0x35C759,
                timestamp="2024-05-01T12:00:00+00:00",
                fields=[EmbedField("File", "a.mkv"), EmbedField("Size", "1.0 KB", inline=True)],
                footer="nas",
            )],
        )

        payload = message.to_payload()

        assert payload["username"] == "File Processor"
        embed = payload["embeds"][0]
        assert embed["description"] == 'notes with "quotes"\nand newline'
        assert embed["color"] == 3524441
        assert embed["fields"][1] == {"name": "Size", "value": "1.0 KB", "inline": True}
        assert embed["footer"] == {"text": "nas"}
        assert "content" not in payload

    def test_content_is_truncated_to_discord_limit(self):
        payload = WebhookMessage(content="x" * 5000).to_payload()

        assert len(payload["content"]) == DISCORD_CONTENT_LIMIT
        assert payload["content"].endswith("(truncated)")

    def test_truncate_leaves_short_text(self):
        assert truncate("short", 10) == "short"


class TestDiscordWebhook:

    def test_posts_json(self):
        session = MagicMock()
        session.post.return_value = response(204)
        hook = DiscordWebhook("https://discord.test/hook", session=session, sleep=MagicMock())

        assert hook.send(WebhookMessage(content="hello")) is True
        args, kwargs = session.post.call_args
        assert args[0] == "https://discord.test/hook"
        assert kwargs["json"] == {"content": "hello"}

    def test_not_configured_makes_no_request(self):
        session = MagicMock()
        hook = DiscordWebhook("", session=session)

        assert hook.enabled is False
        assert hook.send(WebhookMessage(content="hello")) is False
        session.post.assert_not_called()


class TestPushoverClient:

    def test_form_encoded_post(self):
        session = MagicMock()
        session.post.return_value = response(200)
        client = PushoverClient("tok", "usr", session=session, sleep=MagicMock())

        assert client.send("[nas] DISK ALERT", "body") is True
        args, kwargs = session.post.call_args
        assert args[0] == PUSHOVER_API_URL
        assert kwargs["data"] == {"token": "tok", "user": "usr", "title": "[nas] DISK ALERT", "message": "body"}
        assert "json" not in kwargs

    @pytest.mark.parametrize("token,user", [("", "usr"), ("tok", "")])
    def test_requires_token_and_user(self, token, user):
        session = MagicMock()
        client = PushoverClient(token, user, session=session)

        assert client.send("t", "m") is False
        session.post.assert_not_called()
