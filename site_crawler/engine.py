# File: site_crawler/engine.py
"""site_crawler.engine: Orchestration layer — один запуск обхода с ограничением по времени."""

from __future__ import annotations

from typing import Optional

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.crawler import AsyncCrawler, PageFetcher
from site_crawler.crawler.models import CrawlReport
from site_crawler.crawler.storage import PageStore
from site_crawler.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    config: CrawlerConfig,
    *,
    fetcher: Optional[PageFetcher] = None,
    store: Optional[PageStore] = None,
) -> CrawlReport:
    """
    Запускает краулер в контексте и возвращает итоговый отчёт.

    Parameters
    ----------
    config : CrawlerConfig
        Конфигурация обхода.
    fetcher, store
        Необязательные замены загрузчика и хранилища (для тестов).

    Returns
    -------
    CrawlReport
        Сводка запуска; ``claimed`` — размер множества дедупликации.
    """
    logger.info("Target %s, host %s", config.target, config.target_host)
    async with AsyncCrawler(config, fetcher=fetcher, store=store) as crawler:
        report = await crawler.crawl()
    logger.info("total in %d seconds = %d", config.duration, report.claimed)
    return report
