"""Per-feed change detection for RSS Discord Announcer."""

from .models import FeedItem


class FeedState:
    """Tracks the title of the most recently announced item for each feed.

    State lives in memory only and starts empty on every process start.
    Items are identified by title alone, so two distinct items sharing a
    title are indistinguishable and the later one is treated as seen.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._last_titles: dict[str, str] = dict(initial or {})

    def last_title(self, feed_key: str) -> str | None:
        return self._last_titles.get(feed_key)

    def is_initialized(self, feed_key: str) -> bool:
        return feed_key in self._last_titles

    def record(self, feed_key: str, title: str) -> None:
        """Store ``title`` as the newest announced item for ``feed_key``."""
        self._last_titles[feed_key] = title

    def compute_new_items(self, feed_key: str, fetched_items: list[FeedItem]) -> list[FeedItem]:
        """
        Return the items of ``fetched_items`` not yet announced, oldest first.

        ``fetched_items`` must be ordered newest first. On the first poll of a
        feed only the newest item is returned. This method does not modify
        state; callers record the newest title once the batch is handled.
        """
        if not fetched_items:
            return []

        if feed_key not in self._last_titles:
            return [fetched_items[0]]

        last_title = self._last_titles[feed_key]
        if fetched_items[0].title == last_title:
            return []

        new_items = []
        for item in fetched_items:
            if item.title == last_title:
                break
            new_items.append(item)

        new_items.reverse()
        return new_items

    def snapshot(self) -> dict[str, str]:
        return dict(self._last_titles)
