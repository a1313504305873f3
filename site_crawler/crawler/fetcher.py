# site_crawler/crawler/fetcher.py
"""
Fetcher module: retrieves raw page bytes over HTTP(S).

There is no retry, rate limiting or custom header handling. Unless the session
was created with a timeout, a hanging response holds the caller until the run
is cancelled.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from aiohttp import ClientError, ClientPayloadError, ClientSession, ClientTimeout

from site_crawler.crawler.models import Address
from site_crawler.errors import FetchError, PageReadError


def make_session(request_timeout: Optional[float] = None) -> ClientSession:
    """Create the session shared by every worker of a run."""
    return ClientSession(timeout=ClientTimeout(total=request_timeout), raise_for_status=False)


class Fetcher:
    """Issues plain GET requests through a shared :class:`aiohttp.ClientSession`."""

    def __init__(self, session: ClientSession) -> None:
        self.session = session
        self.logger = logging.getLogger("SiteCrawler")

    async def fetch(self, address: Address) -> bytes:
        """
        GET ``address`` and return the whole body, whatever the HTTP status.

        Raises :class:`FetchError` on transport failure and
        :class:`PageReadError` when the body cannot be read to the end.
        """
        url = str(address)
        try:
            async with self.session.get(url) as resp:
                self.logger.debug("GET %s -> HTTP %s", url, resp.status)
                try:
                    return await resp.read()
                except (ClientPayloadError, asyncio.TimeoutError) as exc:
                    raise PageReadError(url, exc) from exc
        except (ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(url, exc) from exc


__all__ = ["Fetcher", "make_session"]
