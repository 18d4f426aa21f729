"""Error types for RSS Discord Announcer."""


class FetchError(Exception):
    """A feed or article page could not be retrieved."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class DeliveryError(Exception):
    """A notification could not be delivered to its destination."""

    def __init__(self, channel_id: str, reason: str):
        self.channel_id = channel_id
        self.reason = reason
        super().__init__(f"Failed to deliver to channel {channel_id}: {reason}")
