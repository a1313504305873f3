# site_crawler/crawler/normalizer.py
"""
Address normalization: decides which raw links are in scope for a crawl.

:func:`normalize` is pure. It never logs and never raises; a rejected link is
reported as ``(None, False)``.
"""
from __future__ import annotations

from typing import Optional, Tuple
from urllib.parse import SplitResult, urlsplit

from site_crawler.crawler.models import Address
from site_crawler.errors import ConfigError

DEFAULT_SCHEME = "https"

_Rejected: Tuple[None, bool] = (None, False)


def _split(raw: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(raw)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError:
        return None
    return parts


def _host(parts: SplitResult) -> str:
    # network location without user info, port kept
    return parts.netloc.rpartition("@")[2]


def normalize(raw_link: str, target_host: str) -> Tuple[Optional[Address], bool]:
    """
    Validate ``raw_link`` against ``target_host`` and canonicalize it.

    Relative links adopt the target host. Absolute links must point at the
    target host and carry a path other than the bare root (``""`` or ``"/"``).
    A missing scheme becomes ``https``; any scheme without ``http`` in it
    (``mailto``, ``ftp``, ``javascript``) is rejected.
    """
    raw = raw_link.strip()
    if not raw:
        return _Rejected

    parts = _split(raw)
    if parts is None:
        return _Rejected

    host = _host(parts)
    if not host:
        host = target_host
    elif host != target_host or parts.path in ("", "/"):
        return _Rejected

    scheme = parts.scheme or DEFAULT_SCHEME
    if "http" not in scheme:
        return _Rejected

    return Address(scheme, host, parts.path, parts.query, parts.fragment), True


def parse_target(target: str) -> Address:
    """Turn the configured crawl target into the seed address."""
    parts = _split(target.strip())
    if parts is None:
        raise ConfigError(f"Could not parse target url = {target!r}")
    host = _host(parts)
    if not host:
        raise ConfigError(
            f"No host found in {target!r}. Try the format https://www.example.com"
        )
    return Address(
        parts.scheme or DEFAULT_SCHEME, host, parts.path, parts.query, parts.fragment
    )


__all__ = ["DEFAULT_SCHEME", "normalize", "parse_target"]
