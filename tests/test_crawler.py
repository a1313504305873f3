# Test-suite for the SiteCrawler worker pool
from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import Counter
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

import site_crawler.crawler.crawler as crawler_module
from site_crawler.config import CrawlerConfig
from site_crawler.crawler.crawler import AsyncCrawler
from site_crawler.crawler.storage import INDEX_FILE, PageStore
from site_crawler.engine import start_crawl
from site_crawler.errors import PageReadError

from conftest import StubFetcher, html_with_links

#: number of in-scope links on the fixed stub page
LINKS: int = 12


def fixed_page(n: int = LINKS) -> bytes:
    hrefs = [f"/p{i}" for i in range(n)]
    hrefs += ["http://other.com/x", "mailto:someone@example.com", "https://example.com/"]
    return html_with_links(hrefs)


async def run_crawler(config, fetcher, store=None):
    async with AsyncCrawler(config, fetcher=fetcher, store=store) as crawler:
        return await asyncio.wait_for(crawler.crawl(), timeout=config.duration + 5)


# --------------------------------------------------------------------------- #
#                              Stub-fetcher runs                              #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_every_discovered_address_claimed_once(crawl_config):
    fetcher = StubFetcher(default=fixed_page())
    report = await run_crawler(crawl_config, fetcher)

    assert report.drained is True
    assert report.claimed == LINKS + 1
    assert report.fetched == LINKS + 1
    counts = Counter(fetcher.calls)
    assert len(counts) == LINKS + 1
    assert set(counts.values()) == {1}


@pytest.mark.asyncio()
async def test_redelivered_addresses_are_skipped(crawl_config):
    # every page links to every other page and back to the seed
    fetcher = StubFetcher(default=fixed_page() + html_with_links(["/", "/p0", "/p0"]))
    report = await run_crawler(crawl_config, fetcher)

    assert report.claimed == LINKS + 1
    assert len(fetcher.calls) == LINKS + 1
    assert report.skipped == report.discovered - LINKS
    assert report.saved == LINKS + 1


@pytest.mark.asyncio()
async def test_pages_are_written_under_output_dir(crawl_config):
    fetcher = StubFetcher(default=fixed_page(3))
    await run_crawler(crawl_config, fetcher)

    root = crawl_config.output_dir / "example.com"
    assert (root / INDEX_FILE).read_bytes() == fixed_page(3)
    for i in range(3):
        assert (root / f"p{i}" / INDEX_FILE).exists()


@pytest.mark.asyncio()
async def test_fetch_failure_does_not_stop_the_run(crawl_config):
    fetcher = StubFetcher(
        default=b"<p>leaf</p>",
        pages={"/": html_with_links(["/ok", "/broken", "/ok2"])},
        fail={"/broken"},
    )
    report = await run_crawler(crawl_config, fetcher)

    assert report.claimed == 4
    assert report.fetch_failures == 1
    assert report.fetched == 3
    assert not (crawl_config.output_dir / "example.com" / "broken").exists()


@pytest.mark.asyncio()
async def test_read_failure_is_contained(crawl_config):
    class Flaky(StubFetcher):
        async def fetch(self, address):
            if address.path == "/half":
                self.calls.append(address)
                raise PageReadError(str(address), "payload not completed")
            return await super().fetch(address)

    fetcher = Flaky(pages={"/": html_with_links(["/half", "/full"])})
    report = await run_crawler(crawl_config, fetcher)

    assert report.claimed == 3
    assert report.fetch_failures == 1
    assert report.drained


@pytest.mark.asyncio()
async def test_store_failure_still_dispatches_links(crawl_config, tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file where the root directory should be")
    fetcher = StubFetcher(default=fixed_page(4))
    report = await run_crawler(crawl_config, fetcher, store=PageStore(blocker))

    assert report.claimed == 5
    assert report.saved == 0
    assert report.save_failures == 5


@pytest.mark.asyncio()
async def test_unwritable_path_still_dispatches_links(crawl_config):
    # a raw NUL in the href survives parsing and cannot become a file name
    class NulPage(StubFetcher):
        async def fetch(self, address):
            if address.path.startswith("/a"):
                self.calls.append(address)
                return html_with_links(["/child"])
            return await super().fetch(address)

    fetcher = NulPage(default=b"<p>leaf</p>", pages={"/": html_with_links(["/a\x00b"])})
    report = await run_crawler(crawl_config, fetcher)

    assert report.drained
    assert report.claimed == 3
    assert "/child" in [a.path for a in fetcher.calls]
    assert report.saved + report.save_failures == 3


@pytest.mark.asyncio()
async def test_root_link_is_distinct_from_pathless_seed(tmp_path):
    config = CrawlerConfig(target="https://example.com", duration=5, workers=2, output_dir=tmp_path)
    fetcher = StubFetcher(pages={"": html_with_links(["/"])})
    report = await run_crawler(config, fetcher)

    assert report.claimed == 2
    assert sorted(a.path for a in fetcher.calls) == ["", "/"]


@pytest.mark.asyncio()
async def test_links_are_parsed_off_the_event_loop(crawl_config, monkeypatch):
    threads = []
    original = crawler_module.extract_links

    def recording(body, target_host):
        threads.append(threading.get_ident())
        return original(body, target_host)

    monkeypatch.setattr(crawler_module, "extract_links", recording)
    report = await run_crawler(crawl_config, StubFetcher(default=fixed_page(2)))

    assert report.claimed == 3
    assert len(threads) == 3
    assert threading.get_ident() not in threads


@pytest.mark.asyncio()
async def test_run_is_logged_start_to_finish(crawl_config, caplog, monkeypatch):
    fetcher = StubFetcher(pages={"/": html_with_links(["/broken"])}, fail={"/broken"})
    monkeypatch.setattr(logging.getLogger("SiteCrawler"), "propagate", True)
    with caplog.at_level(logging.INFO, logger="SiteCrawler"):
        await run_crawler(crawl_config, fetcher)

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Crawl started: https://example.com/") for m in messages)
    assert any(m.startswith("Fetch of https://example.com/broken failed") for m in messages)
    assert any(m.startswith("Crawl finished: 2 addresses") for m in messages)


@pytest.mark.asyncio()
async def test_hanging_fetch_is_abandoned_at_deadline(tmp_path):
    config = CrawlerConfig(target="https://example.com/", duration=1, workers=2, output_dir=tmp_path)
    never = asyncio.Event()

    class Hanging(StubFetcher):
        async def fetch(self, address):
            self.calls.append(address)
            await never.wait()
            return b""

    fetcher = Hanging()
    start = time.perf_counter()
    report = await run_crawler(config, fetcher)
    elapsed = time.perf_counter() - start

    assert report.drained is False
    assert report.claimed == 1
    assert report.fetched == 0
    assert elapsed < 3
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio()
async def test_separate_runs_do_not_share_state(crawl_config):
    fetcher = StubFetcher(default=fixed_page(2))
    first = await run_crawler(crawl_config, fetcher)
    second = await run_crawler(crawl_config, fetcher)
    assert first.claimed == second.claimed == 3
    assert len(fetcher.calls) == 6


@pytest.mark.asyncio()
async def test_single_worker_with_tiny_queue_drains(tmp_path):
    config = CrawlerConfig(
        target="https://example.com/", duration=5, workers=1, queue_size=1, output_dir=tmp_path
    )
    report = await run_crawler(config, StubFetcher(default=fixed_page(30)))
    assert report.drained
    assert report.claimed == 31


@pytest.mark.asyncio()
async def test_crawl_requires_context_manager(crawl_config):
    crawler = AsyncCrawler(crawl_config)
    with pytest.raises(RuntimeError):
        await crawler.crawl()


@pytest.mark.asyncio()
async def test_start_crawl_reports_claimed_count(crawl_config):
    report = await start_crawl(crawl_config, fetcher=StubFetcher(default=fixed_page(5)))
    assert report.claimed == 6
    assert report.host == "example.com"
    assert report.target == "https://example.com/"
    assert report.duration == 5


# --------------------------------------------------------------------------- #
#                            Real HTTP round-trips                            #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def site() -> AsyncIterator[tuple[test_utils.TestServer, Counter]]:
    app = web.Application()
    srv = test_utils.TestServer(app, host="127.0.0.1")
    hits: Counter = Counter()

    def page(*paths: str):
        async def handler(request):
            hits[request.path] += 1
            base = f"http://{srv.host}:{srv.port}"
            links = [f"{base}{p}" for p in paths] + ["https://other.com/page", "mailto:x@y.z"]
            return web.Response(body=html_with_links(links), content_type="text/html")
        return handler

    app.router.add_get("/", page("/page1", "/page2"))
    app.router.add_get("/page1", page("/page2", "/page3"))
    app.router.add_get("/page2", page("/page1"))
    app.router.add_get("/page3", page())

    await srv.start_server()
    try:
        yield srv, hits
    finally:
        await srv.close()


@pytest.mark.asyncio()
async def test_crawl_real_site(site, tmp_path):
    site, hits = site
    host = f"{site.host}:{site.port}"
    config = CrawlerConfig(target=f"http://{host}/", duration=5, workers=3, output_dir=tmp_path)
    report = await start_crawl(config)

    assert report.drained
    assert report.claimed == 4
    assert report.fetch_failures == 0
    assert dict(hits) == {"/": 1, "/page1": 1, "/page2": 1, "/page3": 1}
    for sub in ("page1", "page2", "page3"):
        assert (tmp_path / host / sub / INDEX_FILE).exists()
    assert (tmp_path / host / INDEX_FILE).exists()


@pytest.mark.asyncio()
async def test_unreachable_seed_is_a_soft_failure(tmp_path):
    config = CrawlerConfig(target="http://127.0.0.1:9/", duration=2, workers=2, output_dir=tmp_path)
    report = await start_crawl(config)

    assert report.claimed == 1
    assert report.fetch_failures == 1
    assert report.drained
    assert report.saved == 0
