"""Announcement payload composition for RSS Discord Announcer."""

import asyncio
from datetime import UTC, datetime

from .config import ComposerSettings
from .images import ImageResolver
from .logging_config import create_execution_logger
from .models import FeedConfig, FeedItem, NotificationPayload

PLACEHOLDER_DESCRIPTION = "Click the link to read the full update!"
ELLIPSIS = "..."


def build_excerpt(summary: str | None, length: int = 200) -> str:
    """Truncate ``summary`` to ``length`` characters, marking cuts with an ellipsis."""
    if not summary:
        return PLACEHOLDER_DESCRIPTION
    if len(summary) <= length:
        return summary
    return summary[:length] + ELLIPSIS


def build_message_content(feed: FeedConfig, settings: ComposerSettings) -> str:
    """Pick the message text for ``feed`` based on its tag."""
    if feed.tag == settings.news_tag:
        return f"{feed.tag} new Cyber News has been released on {feed.base_url} !"
    return f"{feed.tag} a new {feed.name.lower()} has been posted to the website!"


def build_payload(
    item: FeedItem,
    feed: FeedConfig,
    image_url: str | None,
    settings: ComposerSettings,
    now: datetime | None = None,
) -> NotificationPayload:
    """Build the announcement for ``item``.

    Args:
        item: The feed item being announced
        feed: Static configuration of the item's feed
        image_url: Resolved cover image, if any
        settings: Composition settings
        now: Fallback timestamp for items without a publication date

    Returns:
        The payload to hand to the delivery layer
    """
    return NotificationPayload(
        content=build_message_content(feed, settings),
        title=item.title,
        url=item.link,
        author_name=f"{feed.name} Update | {settings.author_suffix}",
        author_icon_url=settings.author_icon_url,
        description=build_excerpt(item.summary, settings.excerpt_length),
        image_url=image_url or None,
        timestamp=item.published or now or datetime.now(UTC),
        footer_text=feed.footer_text,
        color=feed.color,
    )


class NotificationComposer:
    """Resolves an item's cover image and builds its payload."""

    def __init__(
        self,
        resolver: ImageResolver,
        settings: ComposerSettings | None = None,
        execution_id: str | None = None,
    ):
        self.resolver = resolver
        self.settings = settings or ComposerSettings()
        self.logger = create_execution_logger("composer", execution_id)

    async def compose(self, item: FeedItem, feed: FeedConfig) -> NotificationPayload:
        image_url = await asyncio.to_thread(self.resolver.resolve, item.link, feed.base_url)
        if image_url:
            self.logger.info(
                f"Found image for {feed.name}: {image_url}",
                feed_name=feed.name,
                item_title=item.title,
            )
        return build_payload(item, feed, image_url, self.settings)
