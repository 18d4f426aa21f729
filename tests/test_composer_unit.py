"""Unit tests for NotificationComposer."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import Mock

from rss_announcer.composer import (
    PLACEHOLDER_DESCRIPTION,
    NotificationComposer,
    build_excerpt,
    build_message_content,
    build_payload,
)
from rss_announcer.config import ComposerSettings
from rss_announcer.models import FeedConfig, FeedItem

LAB_FEED = FeedConfig(
    name="Lab",
    url="https://weber-cyber-club.github.io/labs/index.xml",
    channel_id="1443647723038572566",
    color="#492365",
    tag="@Labs_Role",
    footer_text="New Lab Available!",
    base_url="https://weber-cyber-club.github.io",
)

NEWS_FEED = FeedConfig(
    name="Cyber News",
    url="https://therecord.media/feed",
    channel_id="1443705050437521418",
    color="#492365",
    tag="@Cyber_News",
    footer_text="New Cyber News!",
    base_url="https://therecord.media",
)


class TestExcerptUnit:
    """Unit tests for excerpt truncation."""

    def test_long_summary_truncated_to_200_plus_ellipsis(self):
        summary = "x" * 500

        excerpt = build_excerpt(summary)

        assert excerpt == "x" * 200 + "..."
        assert len(excerpt) == 203

    def test_short_summary_used_verbatim(self):
        assert build_excerpt("A short summary.") == "A short summary."

    def test_exactly_200_characters_not_marked(self):
        summary = "y" * 200

        assert build_excerpt(summary) == summary

    def test_missing_summary_uses_placeholder(self):
        assert build_excerpt(None) == PLACEHOLDER_DESCRIPTION
        assert build_excerpt("") == PLACEHOLDER_DESCRIPTION


class TestMessageContentUnit:
    """Unit tests for the tag-keyed message templates."""

    def test_news_tag_references_base_url(self):
        content = build_message_content(NEWS_FEED, ComposerSettings())

        assert content == "@Cyber_News new Cyber News has been released on https://therecord.media !"

    def test_other_tags_reference_lowercase_name(self):
        content = build_message_content(LAB_FEED, ComposerSettings())

        assert content == "@Labs_Role a new lab has been posted to the website!"

    def test_reserved_tag_is_configurable(self):
        settings = ComposerSettings(news_tag="@Labs_Role")

        content = build_message_content(LAB_FEED, settings)

        assert "has been released on https://weber-cyber-club.github.io" in content


class TestBuildPayloadUnit:
    """Unit tests for payload composition."""

    def test_full_payload(self):
        published = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        item = FeedItem(
            title="Intro to Ghidra",
            link="https://weber-cyber-club.github.io/labs/ghidra/",
            summary="Reverse engineering basics.",
            published=published,
        )
        settings = ComposerSettings(author_icon_url="https://cdn.discordapp.com/avatar.png")

        payload = build_payload(item, LAB_FEED, "https://example.org/a.png", settings)

        assert payload.title == "Intro to Ghidra"
        assert payload.url == "https://weber-cyber-club.github.io/labs/ghidra/"
        assert payload.description == "Reverse engineering basics."
        assert payload.timestamp == published
        assert payload.footer_text == "New Lab Available!"
        assert payload.color == "#492365"
        assert payload.image_url == "https://example.org/a.png"
        assert payload.author_name == "Lab Update | Weber State Cyber Club"
        assert payload.author_icon_url == "https://cdn.discordapp.com/avatar.png"
        assert payload.content == "@Labs_Role a new lab has been posted to the website!"

    def test_missing_publication_date_uses_now(self):
        now = datetime(2025, 5, 5, 12, 0, tzinfo=UTC)
        item = FeedItem(title="Undated", link="https://example.org/u")

        payload = build_payload(item, LAB_FEED, None, ComposerSettings(), now=now)

        assert payload.timestamp == now

    def test_missing_publication_date_defaults_to_current_time(self):
        before = datetime.now(UTC)

        payload = build_payload(FeedItem(title="Undated"), LAB_FEED, None, ComposerSettings())

        assert before <= payload.timestamp <= datetime.now(UTC)

    def test_image_omitted_when_unresolved(self):
        payload = build_payload(FeedItem(title="No pic"), LAB_FEED, None, ComposerSettings())

        assert payload.image_url is None
        assert "image" not in payload.to_embed()

    def test_embed_rendering(self):
        published = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        item = FeedItem(title="T", link="https://example.org/t", published=published)

        embed = build_payload(item, LAB_FEED, "https://example.org/a.png", ComposerSettings()).to_embed()

        assert embed["color"] == 0x492365
        assert embed["url"] == "https://example.org/t"
        assert embed["image"] == {"url": "https://example.org/a.png"}
        assert embed["footer"] == {"text": "New Lab Available!"}
        assert embed["timestamp"] == "2024-01-01T10:00:00+00:00"
        assert "icon_url" not in embed["author"]


class TestNotificationComposerUnit:
    """Unit tests for the async composer."""

    def test_compose_resolves_image_with_feed_base_url(self):
        resolver = Mock()
        resolver.resolve.return_value = "https://weber-cyber-club.github.io/img/cover.png"
        composer = NotificationComposer(resolver)
        item = FeedItem(title="Lab 1", link="https://weber-cyber-club.github.io/labs/1/")

        payload = asyncio.run(composer.compose(item, LAB_FEED))

        resolver.resolve.assert_called_once_with(
            "https://weber-cyber-club.github.io/labs/1/", "https://weber-cyber-club.github.io"
        )
        assert payload.image_url == "https://weber-cyber-club.github.io/img/cover.png"

    def test_compose_without_image(self):
        resolver = Mock()
        resolver.resolve.return_value = None
        composer = NotificationComposer(resolver)

        payload = asyncio.run(composer.compose(FeedItem(title="Lab 2"), LAB_FEED))

        assert payload.image_url is None
        assert payload.title == "Lab 2"
