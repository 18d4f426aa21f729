"""Unit tests for Discord Publisher."""

import json
import urllib.error
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest

from rss_announcer.config import DiscordConfig
from rss_announcer.discord import DiscordPublisher
from rss_announcer.errors import DeliveryError
from rss_announcer.models import NotificationPayload

CHANNEL = "1443647723038572566"


def http_response(body):
    response = MagicMock()
    response.read.return_value = json.dumps(body).encode("utf-8") if body is not None else b""
    response.__enter__.return_value = response
    return response


def http_error(code, reason):
    return urllib.error.HTTPError("https://discord.com", code, reason, {}, None)


def sample_payload():
    return NotificationPayload(
        content="@Labs_Role a new lab has been posted to the website!",
        title="Lab 3",
        url="https://weber-cyber-club.github.io/labs/lab-3/",
        author_name="Lab Update | Weber State Cyber Club",
        description="Smash the stack.",
        timestamp=datetime(2024, 1, 3, 10, 0, tzinfo=UTC),
        footer_text="New Lab Available!",
        color="#492365",
        image_url="https://weber-cyber-club.github.io/img/lab3.png",
    )


class TestDiscordPublisherUnit:
    """Unit tests for DiscordPublisher."""

    def setup_method(self):
        self.publisher = DiscordPublisher(DiscordConfig(bot_token="test_token"))

    def test_send_posts_message_with_embed(self):
        with patch("urllib.request.urlopen", return_value=http_response({"id": "1"})) as urlopen:
            self.publisher.send(CHANNEL, sample_payload())

        request = urlopen.call_args.args[0]
        assert request.full_url == f"https://discord.com/api/v10/channels/{CHANNEL}/messages"
        assert request.get_method() == "POST"
        assert request.get_header("Authorization") == "Bot test_token"

        body = json.loads(request.data)
        assert body["content"] == "@Labs_Role a new lab has been posted to the website!"
        embed = body["embeds"][0]
        assert embed["title"] == "Lab 3"
        assert embed["color"] == 0x492365
        assert embed["image"]["url"] == "https://weber-cyber-club.github.io/img/lab3.png"
        assert embed["footer"]["text"] == "New Lab Available!"

    def test_send_rejected_raises_delivery_error(self):
        with patch("urllib.request.urlopen", side_effect=http_error(403, "Forbidden")):
            with pytest.raises(DeliveryError) as exc_info:
                self.publisher.send(CHANNEL, sample_payload())

        assert exc_info.value.channel_id == CHANNEL
        assert "403" in exc_info.value.reason

    def test_send_network_error_raises_delivery_error(self):
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("unreachable")):
            with pytest.raises(DeliveryError):
                self.publisher.send(CHANNEL, sample_payload())

    def test_send_timeout_raises_delivery_error(self):
        with patch("urllib.request.urlopen", side_effect=TimeoutError("timed out")):
            with pytest.raises(DeliveryError):
                self.publisher.send(CHANNEL, sample_payload())

    def test_resolve_returns_channel(self):
        channel = {"id": CHANNEL, "name": "announcements"}
        with patch("urllib.request.urlopen", return_value=http_response(channel)) as urlopen:
            assert self.publisher.resolve(CHANNEL) == channel

        request = urlopen.call_args.args[0]
        assert request.get_method() == "GET"
        assert request.full_url.endswith(f"/channels/{CHANNEL}")

    @pytest.mark.parametrize("code", [403, 404])
    def test_resolve_unknown_channel_returns_none(self, code):
        with patch("urllib.request.urlopen", side_effect=http_error(code, "Not Found")):
            assert self.publisher.resolve(CHANNEL) is None

    def test_resolve_server_error_raises_delivery_error(self):
        with patch("urllib.request.urlopen", side_effect=http_error(502, "Bad Gateway")):
            with pytest.raises(DeliveryError):
                self.publisher.resolve(CHANNEL)

    def test_bot_avatar_url(self):
        user = {"id": "80351110224678912", "avatar": "8342729096ea3675442027381ff50dfe"}
        with patch("urllib.request.urlopen", return_value=http_response(user)):
            url = self.publisher.get_bot_avatar_url()

        assert url == (
            "https://cdn.discordapp.com/avatars/80351110224678912/"
            "8342729096ea3675442027381ff50dfe.png"
        )

    def test_bot_default_avatar_url(self):
        user = {"id": "80351110224678912", "avatar": None}
        with patch("urllib.request.urlopen", return_value=http_response(user)):
            url = self.publisher.get_bot_avatar_url()

        index = (80351110224678912 >> 22) % 6
        assert url == f"https://cdn.discordapp.com/embed/avatars/{index}.png"

    def test_bot_avatar_failure_returns_none(self):
        with patch("urllib.request.urlopen", side_effect=http_error(401, "Unauthorized")):
            assert self.publisher.get_bot_avatar_url() is None
