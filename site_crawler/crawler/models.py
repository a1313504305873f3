# site_crawler/crawler/models.py
"""
Data models for the SiteCrawler crawler.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from urllib.parse import urlunsplit


@dataclass(frozen=True, slots=True)
class Address:
    """Normalized link. Equal only when every component is equal."""

    scheme: str
    host: str
    path: str = ""
    query: str = ""
    fragment: str = ""

    @property
    def url(self) -> str:
        return urlunsplit((self.scheme, self.host, self.path, self.query, self.fragment))

    def __str__(self) -> str:
        return self.url


@dataclass(slots=True)
class CrawlStats:
    """Counters updated by workers during a single run."""

    fetched: int = 0
    saved: int = 0
    fetch_failures: int = 0
    save_failures: int = 0
    discovered: int = 0
    skipped: int = 0


@dataclass(slots=True)
class CrawlReport:
    """Summary returned once a run is over."""

    target: str
    host: str
    duration: float
    claimed: int
    drained: bool
    elapsed: float
    fetched: int = 0
    saved: int = 0
    fetch_failures: int = 0
    save_failures: int = 0
    discovered: int = 0
    skipped: int = 0

    @classmethod
    def from_stats(cls, stats: CrawlStats, **fields) -> CrawlReport:
        return cls(**fields, **asdict(stats))

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)


__all__ = ["Address", "CrawlStats", "CrawlReport"]
