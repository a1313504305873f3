# site_crawler/crawler/dedup.py
"""
Set of addresses already claimed for processing during one run.
"""
from __future__ import annotations

import threading
from typing import Dict

from site_crawler.crawler.models import Address


class DedupSet:
    """
    Thread-safe claim registry. The only synchronization point shared by workers.

    A claim succeeds once per address for the lifetime of the set; nothing is
    ever removed. ``host`` is informational, scope is enforced by the normalizer.
    """

    def __init__(self, host: str) -> None:
        self.host = host
        self._claimed: Dict[Address, bool] = {}
        self._lock = threading.Lock()

    def claim(self, address: Address) -> bool:
        """Record ``address`` and return True, or return False if it was already claimed."""
        with self._lock:
            if address in self._claimed:
                return False
            self._claimed[address] = True
            return True

    def size(self) -> int:
        with self._lock:
            return len(self._claimed)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._claimed

    def __repr__(self) -> str:
        return f"DedupSet(host={self.host!r}, claimed={self.size()})"


__all__ = ["DedupSet"]
