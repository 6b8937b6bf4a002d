class FeedError(Exception):
    """A live feed (traffic, vehicles) could not be reached or decoded."""

    def __init__(self, feed: str, message: str) -> None:
        super().__init__(f"{feed}: {message}")
        self.feed = feed
