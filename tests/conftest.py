# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.models import Address
from site_crawler.errors import FetchError
from site_crawler.logger import init_logging

TARGET_HOST = "example.com"


class StubFetcher:
    """
    In-memory fetcher: returns ``pages[path]`` or ``default`` for every address
    and records each call. Paths listed in ``fail`` raise FetchError.
    """

    def __init__(
        self,
        default: bytes = b"",
        pages: Optional[Dict[str, bytes]] = None,
        fail: Iterable[str] = (),
    ) -> None:
        self.default = default
        self.pages = pages or {}
        self.fail = set(fail)
        self.calls: List[Address] = []

    async def fetch(self, address: Address) -> bytes:
        self.calls.append(address)
        await asyncio.sleep(0)
        if address.path in self.fail:
            raise FetchError(str(address), "connection refused")
        return self.pages.get(address.path, self.default)


def html_with_links(hrefs: Iterable[str]) -> bytes:
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><body>{anchors}</body></html>".encode()


@pytest.fixture(autouse=True)
def reset_logging():
    """CliRunner swaps stdout; give every test a fresh handler."""
    yield
    init_logging()


@pytest.fixture()
def target_host() -> str:
    return TARGET_HOST


@pytest.fixture()
def seed() -> Address:
    return Address("https", TARGET_HOST, "/")


@pytest.fixture()
def crawl_config(tmp_path: Path) -> CrawlerConfig:
    """
    Return a small config for crawler tests, pages stored under tmp_path.
    """
    return CrawlerConfig(
        target=f"https://{TARGET_HOST}/",
        duration=5,
        workers=3,
        queue_size=2,
        output_dir=tmp_path / "pages",
    )
