"""Derivation of the string that signed URLs are signed over."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_FILENAME_RE = re.compile(r"\.\w{2,5}$", re.ASCII)


def base_url(url: str) -> str:
    """Return ``scheme://host/path`` with query, fragment and filename removed.

    A final path segment that looks like a filename (``cover.html``) is dropped
    and trailing slashes are stripped, so ``/a/b/``, ``/a/b/cover.html`` and
    ``/a/b?x=1`` all canonicalize to ``/a/b``.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Invalid URL: {url!r}")

    path = parts.path
    if _FILENAME_RE.search(path):
        path = path.rsplit("/", 1)[0]
    path = path.rstrip("/")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    return f"{parts.scheme}://{host}{path}"


def build_signable(url: str, params: Mapping[str, Any]) -> str:
    """Concatenate the canonical URL with ``expiresAt``, ``userId`` and ``nonce``.

    ``entitlementId`` and ``clientId`` are not part of the signed message.
    """
    canonical = base_url(url)
    logger.debug(f"Built signable message for {canonical}")
    return f"{canonical}{params['expiresAt']}{params['userId']}{params['nonce']}"
