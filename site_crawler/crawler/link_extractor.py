# site_crawler/crawler/link_extractor.py
"""
Link extraction for SiteCrawler.
"""
from __future__ import annotations

from typing import Iterator, Union

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from site_crawler.crawler.models import Address
from site_crawler.crawler.normalizer import normalize


def extract_links(page: Union[bytes, str], target_host: str) -> Iterator[Address]:
    """
    Yield in-scope addresses from every ``<a href>`` of ``page``, in document order.

    Only the first ``href`` of a tag counts. Out-of-scope links are dropped
    silently; markup the parser refuses simply ends the sequence.
    """
    try:
        soup = BeautifulSoup(page, "html.parser", on_duplicate_attribute="ignore")
    except ParserRejectedMarkup:
        return
    for tag in soup.find_all("a"):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        address, ok = normalize(href, target_host)
        if ok:
            yield address


__all__ = ["extract_links"]
