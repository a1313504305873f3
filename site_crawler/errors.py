# site_crawler/errors.py
"""
Exception hierarchy for SiteCrawler.
"""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for all SiteCrawler errors."""


class ConfigError(CrawlerError, ValueError):
    """Target is unparsable or has no host. Fatal, raised before crawling starts."""


class FetchError(CrawlerError):
    """A page could not be retrieved over HTTP(S)."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"GET {url} failed: {reason}")
        self.url = url
        self.reason = reason


class PageReadError(FetchError):
    """The response arrived but its body could not be read completely."""


__all__ = ["CrawlerError", "ConfigError", "FetchError", "PageReadError"]
