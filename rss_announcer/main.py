"""Process entrypoint for RSS Discord Announcer."""

import asyncio
import os
import signal
import sys

from .composer import NotificationComposer
from .config import Config, get_bot_token
from .discord import DiscordPublisher
from .images import ImageResolver
from .logging_config import create_execution_logger, setup_structured_logging
from .metrics import send_pass_metrics
from .models import PassResult
from .poller import FeedPoller
from .rss import FeedProcessor
from .scheduler import Scheduler
from .state import FeedState


def build_scheduler(config: Config, execution_id: str | None = None) -> Scheduler:
    """Wire every component from ``config``.

    Raises:
        FileNotFoundError, ValueError, RuntimeError: On invalid configuration
    """
    feeds = config.get_feeds()
    schedule = config.get_schedule_config()

    bot_token = get_bot_token(config, execution_id)
    publisher = DiscordPublisher(config.get_discord_config(bot_token), execution_id)
    settings = config.get_composer_settings(publisher.get_bot_avatar_url())

    composer = NotificationComposer(
        ImageResolver(timeout=config.image_timeout, execution_id=execution_id),
        settings,
        execution_id=execution_id,
    )
    poller = FeedPoller(
        feeds,
        FeedProcessor(timeout=config.feed_timeout, execution_id=execution_id),
        composer,
        publisher,
        FeedState(),
    )

    on_pass = None
    if config.metrics_namespace:

        def on_pass(result: PassResult) -> None:
            send_pass_metrics(
                result,
                config.metrics_namespace,
                config.aws_region,
                poller.logger.execution_id,
            )

    return Scheduler(poller, schedule.interval_seconds, on_pass=on_pass)


async def serve(scheduler: Scheduler) -> None:
    """Run ``scheduler`` until SIGINT or SIGTERM is received."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, scheduler.stop)
    await scheduler.run()


def main() -> int:
    setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))
    main_logger = create_execution_logger("main")

    try:
        config = Config()
        scheduler = build_scheduler(config, main_logger.execution_id)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        main_logger.error(f"Startup failed: {e}")
        return 1

    main_logger.info(f"Bot is online, monitoring {len(scheduler.poller.feeds)} feeds")
    asyncio.run(serve(scheduler))
    main_logger.info("Shutting down bot...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
