"""Data models for RSS Discord Announcer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class FeedConfig:
    """Static configuration for one monitored feed."""

    name: str
    url: str
    channel_id: str
    color: str
    tag: str
    footer_text: str
    base_url: str | None = None


@dataclass
class FeedItem:
    """Represents a single RSS/Atom feed item."""

    title: str
    link: str | None = None
    summary: str | None = None
    published: datetime | None = None


@dataclass
class NotificationPayload:
    """Represents an outbound announcement for one feed item."""

    content: str
    title: str
    url: str | None
    author_name: str
    description: str
    timestamp: datetime
    footer_text: str
    color: str
    image_url: str | None = None
    author_icon_url: str | None = None

    def to_embed(self) -> dict[str, Any]:
        """Render the payload as a Discord embed object."""
        embed: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
            "color": color_to_int(self.color),
            "footer": {"text": self.footer_text},
            "author": {"name": self.author_name},
        }
        if self.url:
            embed["url"] = self.url
        if self.author_icon_url:
            embed["author"]["icon_url"] = self.author_icon_url
        if self.image_url:
            embed["image"] = {"url": self.image_url}
        return embed


@dataclass
class PassResult:
    """Counters collected during one polling pass."""

    feeds_checked: int = 0
    feeds_failed: int = 0
    items_announced: int = 0
    deliveries_failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def color_to_int(color: str) -> int:
    """Convert a ``#rrggbb`` color string to the integer Discord expects."""
    return int(color.lstrip("#"), 16)
