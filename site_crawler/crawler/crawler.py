# site_crawler/crawler/crawler.py
"""
Worker pool for one crawl run.

Each worker takes an address from the shared queue, claims it in the dedup
set, fetches the page, extracts in-scope links, stores the body and dispatches
the links back to the queue. The run ends when the queue drains or the
configured duration elapses.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from aiohttp import ClientSession

from site_crawler.crawler.dedup import DedupSet
from site_crawler.crawler.fetcher import Fetcher, make_session
from site_crawler.crawler.link_extractor import extract_links
from site_crawler.crawler.models import Address, CrawlReport, CrawlStats
from site_crawler.crawler.storage import PageStore
from site_crawler.crawler.work_queue import WorkQueue
from site_crawler.errors import FetchError, PageReadError

__all__ = ("AsyncCrawler", "CrawlContext", "PageFetcher")


class PageFetcher(Protocol):
    async def fetch(self, address: Address) -> bytes: ...


@dataclass(slots=True)
class CrawlContext:
    """State of one run, shared by reference with every worker."""

    target_host: str
    dedup: DedupSet
    queue: WorkQueue
    stop: asyncio.Event = field(default_factory=asyncio.Event)
    stats: CrawlStats = field(default_factory=CrawlStats)


class AsyncCrawler:
    """Crawler for a single host: worker tasks over a shared queue and dedup set."""

    def __init__(
        self,
        config,
        *,
        fetcher: Optional[PageFetcher] = None,
        store: Optional[PageStore] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.store = store if store is not None else PageStore(config.output_dir)
        self.session: Optional[ClientSession] = None
        self.logger = logging.getLogger("SiteCrawler")

    async def __aenter__(self) -> AsyncCrawler:
        if self.fetcher is None:
            self.session = make_session(self.config.request_timeout)
            self.fetcher = Fetcher(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, seed: Optional[Address] = None) -> CrawlReport:
        """
        Crawl from ``seed`` until the queue drains or ``config.duration`` elapses.

        Workers are not waited for past the deadline: in-flight fetches and
        pending dispatches are abandoned.
        """
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized, use 'async with AsyncCrawler(...)'")
        seed = seed or self.config.seed
        ctx = CrawlContext(
            target_host=seed.host,
            dedup=DedupSet(seed.host),
            queue=WorkQueue(self.config.queue_size),
        )
        self.logger.info("Crawl started: %s (%d workers, %d s)", seed, self.config.workers, self.config.duration)
        start = time.monotonic()
        workers: List[asyncio.Task] = [
            asyncio.create_task(self._worker(ctx, n)) for n in range(self.config.workers)
        ]
        await ctx.queue.put(seed)
        drained = True
        try:
            await asyncio.wait_for(ctx.queue.join(), timeout=self.config.duration)
        except asyncio.TimeoutError:
            drained = False
        finally:
            ctx.stop.set()
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            await ctx.queue.close()
        duration = time.monotonic() - start
        claimed = ctx.dedup.size()
        self.logger.info(
            "Crawl finished: %d addresses in %.2f s (%s)",
            claimed, duration, "queue drained" if drained else "deadline reached",
        )
        return CrawlReport.from_stats(
            ctx.stats,
            target=str(seed),
            host=seed.host,
            duration=self.config.duration,
            claimed=claimed,
            drained=drained,
            elapsed=duration,
        )

    async def _worker(self, ctx: CrawlContext, worker_id: int) -> None:
        while not ctx.stop.is_set():
            address = await ctx.queue.get()
            try:
                if not ctx.dedup.claim(address):
                    ctx.stats.skipped += 1
                    self.logger.debug("worker %d: already claimed %s", worker_id, address)
                    continue
                self.logger.info("worker %d: received %s", worker_id, address)
                await self._process(ctx, address)
            except Exception:
                self.logger.exception("worker %d: unexpected failure on %s", worker_id, address)
            finally:
                ctx.queue.task_done()

    async def _process(self, ctx: CrawlContext, address: Address) -> None:
        if ctx.stop.is_set():
            return
        try:
            body = await self.fetcher.fetch(address)
        except PageReadError as exc:
            ctx.stats.fetch_failures += 1
            self.logger.warning("Could not read page body of %s: %s", address, exc.reason)
            return
        except FetchError as exc:
            ctx.stats.fetch_failures += 1
            self.logger.warning("Fetch of %s failed: %s", address, exc.reason)
            return
        ctx.stats.fetched += 1

        links = await asyncio.to_thread(_collect_links, body, ctx.target_host)

        if await asyncio.to_thread(self.store.save, address, body):
            ctx.stats.saved += 1
        else:
            ctx.stats.save_failures += 1

        for link in links:
            ctx.queue.dispatch(link)
        ctx.stats.discovered += len(links)


def _collect_links(body: bytes, target_host: str) -> List[Address]:
    return list(extract_links(body, target_host))
