"""
Exceptions raised by the crawler.

Most failures inside a page task are handled locally (logged, page degraded).
These types mark the few places where an error crosses a module boundary.
"""


class CrawlerError(Exception):
    """Base class for crawler errors."""


class ConfigError(CrawlerError):
    """Invalid configuration value (proxy URI, numeric setting, ...)."""


class PayloadDecodeError(CrawlerError):
    """The job list API response could not be decoded or validated."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url
