# site_crawler/crawler/storage.py
"""
Page store: writes fetched pages under ``<root>/<host><path>/index.html``.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final, Union

from site_crawler.crawler.models import Address

DEFAULT_ROOT: Final[Path] = Path("/tmp/scraper")
INDEX_FILE: Final[str] = "index.html"


class PageStore:
    """Persists raw page bytes. Failures are logged and reported, never raised."""

    def __init__(self, root: Union[str, Path] = DEFAULT_ROOT) -> None:
        self.root = Path(root)
        self.logger = logging.getLogger("SiteCrawler")

    def directory_for(self, address: Address) -> Path:
        """
        Return the directory that holds the page of ``address``.

        Raises ValueError when the host or path would leave the root directory.
        """
        root = os.path.normpath(self.root)
        candidate = os.path.normpath(os.path.join(root, address.host, address.path.lstrip("/")))
        if not address.host or os.path.commonpath([root, candidate]) != root or candidate == root:
            raise ValueError(f"{address} maps outside of {root}")
        return Path(candidate)

    def save(self, address: Address, body: bytes) -> bool:
        """Write ``body`` as ``index.html`` for ``address``; return whether it was stored."""
        try:
            directory = self.directory_for(address)
        except ValueError as exc:
            self.logger.error("Refusing to save %s: %s", address, exc)
            return False

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except (OSError, ValueError) as exc:
            self.logger.error("Cannot create directory %s. Error: %s", directory, exc)
            return False

        file_path = directory / INDEX_FILE
        try:
            file_path.write_bytes(body)
        except (OSError, ValueError) as exc:
            self.logger.error("Cannot write to file=%s. Error: %s", file_path, exc)
            return False

        self.logger.debug("Saved %s to %s", address, file_path)
        return True


__all__ = ["DEFAULT_ROOT", "INDEX_FILE", "PageStore"]
