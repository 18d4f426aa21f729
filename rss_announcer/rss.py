"""RSS Feed Processing module for RSS Discord Announcer."""

from datetime import datetime

import feedparser
import requests
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .errors import FetchError
from .logging_config import create_execution_logger
from .models import FeedItem


class FeedProcessor:
    """Fetches RSS/Atom feeds and normalizes their entries."""

    def __init__(self, timeout: int = 30, execution_id: str | None = None):
        """Initialize FeedProcessor with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_processor", execution_id)
        self.session = requests.Session()
        self.session.headers.update(
            {"User-Agent": "RSS-Discord-Announcer/1.0 (+https://weber-cyber-club.github.io/)"}
        )

    def fetch(self, feed_url: str) -> list[FeedItem]:
        """Fetch a feed and return its items in feed order (newest first).

        Args:
            feed_url: URL of the RSS/Atom feed

        Returns:
            List of FeedItem objects from the feed

        Raises:
            FetchError: If the feed cannot be downloaded or parsed
        """
        self.logger.debug("Downloading feed content", feed_url=feed_url)
        try:
            response = self.session.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(feed_url, str(e)) from e

        feed = feedparser.parse(response.content)

        if feed.bozo and not feed.entries:
            raise FetchError(
                feed_url, f"unparseable feed: {getattr(feed, 'bozo_exception', 'unknown')}"
            )
        if feed.bozo:
            self.logger.warning(
                f"Feed parsing warning for {feed_url}: {feed.bozo_exception}",
                feed_url=feed_url,
            )

        items = []
        for entry in feed.entries:
            item = self.normalize_item(entry)
            if item is not None:
                items.append(item)

        self.logger.info(
            "Successfully parsed feed",
            feed_url=feed_url,
            items_count=len(items),
            total_entries=len(feed.entries),
        )
        return items

    def normalize_item(self, raw_item) -> FeedItem | None:
        """Normalize a raw feedparser entry into a FeedItem.

        Entries without a title carry no identity and are dropped.
        """
        title = getattr(raw_item, "title", None)
        if not title:
            return None

        link = getattr(raw_item, "link", None) or None

        summary = None
        if getattr(raw_item, "summary", None):
            summary = raw_item.summary
        elif getattr(raw_item, "description", None):
            summary = raw_item.description
        elif getattr(raw_item, "content", None):
            # Atom feeds carry a list of content blocks
            if isinstance(raw_item.content, list):
                summary = raw_item.content[0].get("value", "")
            else:
                summary = str(raw_item.content)

        summary = self.clean_html_content(summary) or None

        return FeedItem(
            title=title,
            link=link,
            summary=summary,
            published=self.parse_published(raw_item),
        )

    def parse_published(self, raw_item) -> datetime | None:
        """Parse the entry's publication date, or None if absent or invalid."""
        published_str = getattr(raw_item, "published", None) or getattr(
            raw_item, "updated", None
        )
        if not published_str:
            return None

        try:
            published = date_parser.parse(published_str)
        except (ValueError, TypeError, OverflowError):
            return None

        if published.tzinfo is None:
            published = published.replace(tzinfo=datetime.now().astimezone().tzinfo)
        return published

    def clean_html_content(self, content: str | None) -> str:
        """Remove HTML tags from content and normalize whitespace.

        Args:
            content: Raw content that may contain HTML

        Returns:
            Clean text content without HTML tags
        """
        if not content:
            return ""

        if "<" not in content and ">" not in content:
            return " ".join(content.split())

        soup = BeautifulSoup(content, "html.parser")

        for script in soup(["script", "style"]):
            script.decompose()

        text = soup.get_text(separator=" ")
        text = text.replace("<", "").replace(">", "")

        return " ".join(text.split())
