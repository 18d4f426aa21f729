"""Discord Publisher for RSS Discord Announcer."""

import json
import urllib.error
import urllib.request
from typing import Any

from . import __version__
from .config import DiscordConfig
from .errors import DeliveryError
from .logging_config import create_execution_logger
from .models import NotificationPayload

# Channel lookups answering with these codes mean "not visible to the bot"
CHANNEL_NOT_FOUND_CODES = (403, 404)


class DiscordPublisher:
    """Handles channel lookup and message delivery over the Discord REST API."""

    def __init__(self, config: DiscordConfig, execution_id: str | None = None):
        """Initialize Discord publisher with configuration."""
        self.config = config
        self.logger = create_execution_logger("discord_publisher", execution_id)
        self.base_url = config.api_base.rstrip("/")

    def resolve(self, channel_id: str) -> dict[str, Any] | None:
        """
        Look up a channel by id.

        Returns:
            The channel object, or None if the bot cannot see the channel

        Raises:
            DeliveryError: If the lookup fails for any other reason
        """
        try:
            return self._request("GET", f"/channels/{channel_id}")
        except urllib.error.HTTPError as e:
            if e.code in CHANNEL_NOT_FOUND_CODES:
                self.logger.error(
                    f"Could not find channel {channel_id} (HTTP {e.code}). "
                    "Check the id and that the bot can view the channel.",
                    channel_id=channel_id,
                )
                return None
            raise DeliveryError(channel_id, f"HTTP {e.code} - {e.reason}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            raise DeliveryError(channel_id, str(getattr(e, "reason", e))) from e

    def send(self, channel_id: str, payload: NotificationPayload) -> None:
        """
        Post ``payload`` to ``channel_id`` as a message with one embed.

        Raises:
            DeliveryError: If Discord rejects the message or is unreachable
        """
        body = {"content": payload.content, "embeds": [payload.to_embed()]}
        try:
            self._request("POST", f"/channels/{channel_id}/messages", body)
        except urllib.error.HTTPError as e:
            raise DeliveryError(channel_id, f"HTTP {e.code} - {e.reason}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            raise DeliveryError(channel_id, str(getattr(e, "reason", e))) from e

        self.logger.info(
            f"Message sent to channel {channel_id}",
            channel_id=channel_id,
            item_title=payload.title,
        )

    def get_bot_avatar_url(self) -> str | None:
        """Return the bot user's avatar URL, or None if it cannot be determined."""
        try:
            user = self._request("GET", "/users/@me")
        except (urllib.error.URLError, TimeoutError, ValueError) as e:
            self.logger.warning(f"Could not fetch bot user: {e}")
            return None

        if not user or not user.get("id"):
            return None
        if user.get("avatar"):
            return f"https://cdn.discordapp.com/avatars/{user['id']}/{user['avatar']}.png"
        # Users without a custom avatar get one of the default embed avatars
        index = (int(user["id"]) >> 22) % 6
        return f"https://cdn.discordapp.com/embed/avatars/{index}.png"

    def _request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Perform one authenticated API call and decode the JSON response."""
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=data,
            method=method,
            headers={
                "Authorization": f"Bot {self.config.bot_token}",
                "Content-Type": "application/json",
                "User-Agent": f"DiscordBot (https://weber-cyber-club.github.io, {__version__})",
            },
        )

        self.logger.debug(f"Discord API {method} {path}")
        with urllib.request.urlopen(req, timeout=self.config.timeout) as response:
            raw = response.read()

        if not raw:
            return None
        return json.loads(raw)
