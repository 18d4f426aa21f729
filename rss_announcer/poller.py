"""Polling pass orchestration for RSS Discord Announcer."""

import asyncio

from .composer import NotificationComposer
from .discord import DiscordPublisher
from .errors import DeliveryError, FetchError
from .logging_config import ExecutionLogger, create_execution_logger, new_execution_id
from .models import FeedConfig, FeedItem, PassResult
from .rss import FeedProcessor
from .state import FeedState


class FeedPoller:
    """Runs one pass over every configured feed and announces new items."""

    def __init__(
        self,
        feeds: list[FeedConfig],
        feed_processor: FeedProcessor,
        composer: NotificationComposer,
        publisher: DiscordPublisher,
        state: FeedState | None = None,
    ):
        self.feeds = list(feeds)
        self.feed_processor = feed_processor
        self.composer = composer
        self.publisher = publisher
        self.state = state if state is not None else FeedState()
        self.logger = create_execution_logger("poller")

    async def poll_once(self) -> PassResult:
        """
        Check every feed in declaration order, one at a time.

        A failure in one feed is logged and recorded in the result; the
        remaining feeds are still processed.
        """
        self.bind_execution(new_execution_id("pass"))
        self.logger.log_execution_start(feed_count=len(self.feeds))
        result = PassResult()

        for feed in self.feeds:
            result.feeds_checked += 1
            try:
                await self.process_feed(feed, result)
            except FetchError as e:
                error_msg = f"Error fetching or parsing {feed.name} feed: {e.reason}"
                self.logger.error(error_msg, feed_name=feed.name, feed_url=feed.url)
                result.feeds_failed += 1
                result.errors.append(error_msg)
            except Exception as e:
                error_msg = f"Failed to process {feed.name} feed: {e}"
                self.logger.error(error_msg, feed_name=feed.name, feed_url=feed.url)
                result.feeds_failed += 1
                result.errors.append(error_msg)

        self.logger.log_execution_end(
            success=result.success,
            items_announced=result.items_announced,
            feeds_failed=result.feeds_failed,
        )
        return result

    def bind_execution(self, execution_id: str) -> None:
        """Tag log lines from the poller and its collaborators with ``execution_id``."""
        self.logger = create_execution_logger("poller", execution_id)
        components = [self.feed_processor, self.composer, self.publisher]
        components.append(getattr(self.composer, "resolver", None))
        for component in components:
            logger = getattr(component, "logger", None)
            if isinstance(logger, ExecutionLogger):
                component.logger = logger.with_execution(execution_id)

    async def process_feed(self, feed: FeedConfig, result: PassResult) -> list[FeedItem]:
        """Fetch one feed, announce its new items and advance its state."""
        self.logger.info(
            f"Checking feed: {feed.name} ({feed.url})", feed_name=feed.name, feed_url=feed.url
        )
        items = await asyncio.to_thread(self.feed_processor.fetch, feed.url)

        if not items:
            self.logger.info(f"{feed.name} feed is empty.", feed_name=feed.name)
            return []

        latest = items[0]
        first_poll = not self.state.is_initialized(feed.url)
        new_items = self.state.compute_new_items(feed.url, items)

        if first_poll:
            self.logger.info(
                f'Initializing {feed.name}. Last announced post: "{latest.title}"',
                feed_name=feed.name,
            )
        elif not new_items:
            self.logger.info(
                f'No new updates for {feed.name} since: "{self.state.last_title(feed.url)}"',
                feed_name=feed.name,
            )
            return []
        else:
            self.logger.info(
                f"Found {len(new_items)} new item(s) for {feed.name}",
                feed_name=feed.name,
            )

        for item in new_items:
            if await self.announce(item, feed):
                result.items_announced += 1
            else:
                result.deliveries_failed += 1
                result.errors.append(f"Failed to announce {feed.name}: {item.title}")

        # Advance regardless of delivery outcome so failures are not re-announced
        self.state.record(feed.url, latest.title)
        return new_items

    async def announce(self, item: FeedItem, feed: FeedConfig) -> bool:
        """Deliver one item to its feed's channel. Returns False on failure."""
        try:
            channel = await asyncio.to_thread(self.publisher.resolve, feed.channel_id)
            if channel is None:
                self.logger.error(
                    f"Could not find channel for {feed.name} with ID: {feed.channel_id}",
                    feed_name=feed.name,
                    channel_id=feed.channel_id,
                    item_title=item.title,
                )
                return False

            payload = await self.composer.compose(item, feed)
            await asyncio.to_thread(self.publisher.send, feed.channel_id, payload)
        except DeliveryError as e:
            self.logger.error(
                f'Failed to send announcement for {feed.name} post "{item.title}": {e.reason}',
                feed_name=feed.name,
                channel_id=feed.channel_id,
                item_title=item.title,
            )
            return False
        except Exception as e:
            self.logger.error(
                f'Failed to send announcement for {feed.name} post "{item.title}": {e}',
                feed_name=feed.name,
                item_title=item.title,
            )
            return False

        self.logger.log_item_processing(feed.name, item.title, "announced")
        return True
