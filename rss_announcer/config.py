"""Configuration management for RSS Discord Announcer."""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from .logging_config import create_execution_logger
from .models import FeedConfig

REQUIRED_FEED_KEYS = ("name", "url", "channel_id", "color", "tag", "footer_text")
COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass
class DiscordConfig:
    """Configuration for the Discord REST API."""

    bot_token: str
    api_base: str = "https://discord.com/api/v10"
    timeout: int = 30


@dataclass
class ComposerSettings:
    """Settings for building announcement payloads."""

    news_tag: str = "@Cyber_News"
    author_suffix: str = "Weber State Cyber Club"
    author_icon_url: str | None = None
    excerpt_length: int = 200


@dataclass
class ScheduleConfig:
    """Configuration for the polling schedule."""

    interval_ms: int = 1800000

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000


class Config:
    """Main configuration manager."""

    # Default feeds file path
    FEEDS_FILE = "feeds.json"

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.feeds_file = os.getenv("FEEDS_FILE", self.FEEDS_FILE)
        self.bot_token = os.getenv("DISCORD_BOT_TOKEN", "")
        self.secret_name = os.getenv("DISCORD_SECRET_NAME", "")
        self.aws_region = os.getenv("AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1"))
        self.poll_interval_ms = _int_env("POLL_INTERVAL_MS", 1800000)
        self.news_tag = os.getenv("NEWS_TAG", "@Cyber_News")
        self.author_suffix = os.getenv("AUTHOR_SUFFIX", "Weber State Cyber Club")
        self.image_timeout = _int_env("IMAGE_TIMEOUT", 10)
        self.feed_timeout = _int_env("FEED_TIMEOUT", 30)
        self.metrics_namespace = os.getenv("METRICS_NAMESPACE", "")

    def get_feeds(self) -> list[FeedConfig]:
        """Load the ordered list of enabled feeds from the feeds file."""
        feeds_file = Path(self.feeds_file)
        if not feeds_file.exists():
            raise FileNotFoundError(f"Feeds file not found: {self.feeds_file}")

        try:
            with open(feeds_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in feeds file: {e}") from e

        return parse_feeds(data)

    def get_discord_config(self, bot_token: str) -> DiscordConfig:
        """Get Discord configuration."""
        return DiscordConfig(bot_token=bot_token)

    def get_composer_settings(self, author_icon_url: str | None = None) -> ComposerSettings:
        """Get payload composition settings."""
        return ComposerSettings(
            news_tag=self.news_tag,
            author_suffix=self.author_suffix,
            author_icon_url=author_icon_url,
        )

    def get_schedule_config(self) -> ScheduleConfig:
        """Get schedule configuration."""
        if self.poll_interval_ms <= 0:
            raise ValueError("POLL_INTERVAL_MS must be positive")
        return ScheduleConfig(interval_ms=self.poll_interval_ms)


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def parse_feeds(data: dict) -> list[FeedConfig]:
    """Build FeedConfig records from the decoded feeds document.

    Feeds keep their declaration order; entries with ``"enabled": false``
    are skipped.
    """
    if not isinstance(data, dict) or not isinstance(data.get("feeds"), list):
        raise ValueError("Feeds file must contain a 'feeds' list")

    feeds = []
    for index, entry in enumerate(data["feeds"]):
        if not isinstance(entry, dict):
            raise ValueError(f"Feed #{index} must be an object")
        if not entry.get("enabled", True):
            continue

        missing = [key for key in REQUIRED_FEED_KEYS if not entry.get(key)]
        if missing:
            raise ValueError(
                f"Feed #{index} is missing required keys: {', '.join(missing)}"
            )

        if not COLOR_PATTERN.match(str(entry["color"])):
            raise ValueError(
                f"Feed #{index} ({entry['name']}) has invalid color {entry['color']!r}, expected #rrggbb"
            )

        feeds.append(
            FeedConfig(
                name=entry["name"],
                url=entry["url"],
                channel_id=str(entry["channel_id"]),
                color=entry["color"],
                tag=entry["tag"],
                footer_text=entry["footer_text"],
                base_url=entry.get("base_url") or None,
            )
        )

    if not feeds:
        raise ValueError("No enabled feeds found in feeds file")

    return feeds


def get_bot_token(config: Config, execution_id: str | None = None) -> str:
    """
    Resolve the Discord bot token.

    The ``DISCORD_BOT_TOKEN`` environment variable wins; otherwise the token
    is read from AWS Secrets Manager using ``DISCORD_SECRET_NAME``. Both plain
    string and JSON secrets are supported. The token value is never logged.

    Raises:
        RuntimeError: If no token can be resolved
    """
    secrets_logger = create_execution_logger("config", execution_id)

    if config.bot_token and config.bot_token.strip():
        secrets_logger.info("Using bot token from environment")
        return config.bot_token.strip()

    secret_name = config.secret_name
    if not secret_name or not secret_name.strip():
        raise RuntimeError(
            "No bot token configured: set DISCORD_BOT_TOKEN or DISCORD_SECRET_NAME"
        )

    try:
        secrets_logger.info(f"Retrieving bot token from Secrets Manager: {secret_name}")
        secrets_client = boto3.client("secretsmanager", region_name=config.aws_region)
        response = secrets_client.get_secret_value(SecretId=secret_name)

        if "SecretString" not in response:
            raise ValueError(f"Secret {secret_name} does not contain a string value")

        return _extract_token(response["SecretString"], secret_name)

    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        secrets_logger.error(
            f"AWS Secrets Manager error retrieving {secret_name}: {error_code}"
        )
        raise RuntimeError(f"Failed to retrieve secret {secret_name}") from e
    except ValueError as e:
        secrets_logger.error(f"Invalid secret format for {secret_name}: {e}")
        raise RuntimeError(f"Invalid secret format for {secret_name}") from e


def _extract_token(secret_value: str, secret_name: str) -> str:
    if not secret_value or not secret_value.strip():
        raise ValueError(f"Secret {secret_name} contains empty value")

    try:
        secret_data = json.loads(secret_value)
    except json.JSONDecodeError:
        return secret_value.strip()

    if not isinstance(secret_data, dict):
        raise ValueError(f"JSON secret {secret_name} must be an object")

    for key in ["token", "bot_token", "discord_token", "discord_bot_token"]:
        value = secret_data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()

    raise ValueError(f"No token found in JSON secret {secret_name}")
