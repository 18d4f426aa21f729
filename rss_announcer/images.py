"""Cover image resolution for announced articles."""

import requests
from bs4 import BeautifulSoup

from .errors import FetchError
from .logging_config import create_execution_logger

USER_AGENT = "Mozilla/5.0 (compatible; Discord-RSS-Bot/1.0; +https://weber-cyber-club.github.io/)"

# Ordered fallback chain: (stage label, CSS selector, attribute holding the URL)
IMAGE_SELECTORS = [
    ("post cover", "img.post-cover", "src"),
    ("post container", ".post img", "src"),
    ("article container", "article img", "src"),
    ("first image", "img", "src"),
    ("open graph", 'meta[property="og:image"]', "content"),
    ("twitter card", 'meta[name="twitter:image"]', "content"),
]


class MarkupFetcher:
    """Downloads raw article markup over HTTP."""

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def fetch(self, url: str, headers: dict[str, str], timeout: float) -> str:
        """Return the body of ``url`` as text.

        Raises:
            FetchError: On timeouts, connection errors and non-2xx responses
        """
        try:
            response = self.session.get(url, headers=headers, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e
        return response.text


class ImageResolver:
    """Finds a representative image for an article page."""

    def __init__(
        self,
        fetcher: MarkupFetcher | None = None,
        timeout: float = 10,
        execution_id: str | None = None,
    ):
        self.fetcher = fetcher or MarkupFetcher()
        self.timeout = timeout
        self.logger = create_execution_logger("image_resolver", execution_id)

    def resolve(self, article_link: str | None, base_url: str | None = None) -> str | None:
        """
        Resolve an absolute image URL for ``article_link``.

        Every failure degrades to ``None`` so the announcement can still be
        made without a picture.

        Args:
            article_link: URL of the full article
            base_url: Site root used to absolutize root-relative paths

        Returns:
            An http(s) image URL, or None
        """
        if not article_link:
            return None

        try:
            html = self.fetcher.fetch(
                article_link, headers={"User-Agent": USER_AGENT}, timeout=self.timeout
            )
        except FetchError as e:
            self.logger.warning(
                f"Error fetching article content from {article_link}: {e.reason}",
                feed_url=article_link,
            )
            return None

        try:
            image_url = self.extract_image_url(html)
        except Exception as e:
            self.logger.error(
                f"Error parsing article markup from {article_link}: {e}",
                feed_url=article_link,
            )
            return None

        if not image_url:
            self.logger.info(f"No suitable image found on the page: {article_link}")
            return None

        return self.absolutize(image_url, base_url)

    def extract_image_url(self, html: str) -> str | None:
        """Walk the fallback chain and return the first non-empty image reference."""
        soup = BeautifulSoup(html, "html.parser")

        for stage, selector, attribute in IMAGE_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            value = (element.get(attribute) or "").strip()
            if value:
                self.logger.debug(f"Found image using {stage} selector '{selector}'")
                return value

        return None

    def absolutize(self, image_url: str, base_url: str | None) -> str | None:
        """Resolve root-relative paths against ``base_url`` and gate on scheme."""
        if base_url and image_url.startswith("/"):
            image_url = f"{base_url.rstrip('/')}{image_url}"

        if image_url.startswith(("http://", "https://")):
            return image_url

        self.logger.debug(f"Discarding non-http image reference: {image_url[:80]}")
        return None
