"""Per-instance cache of resolved key material."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

from ..exceptions import KeyNotFoundError
from .base import KeyProvider, KeyType

logger = logging.getLogger(__name__)


def _retrieve_exception(future: asyncio.Future) -> None:
    # Waiters may all be cancelled before a failed lookup completes.
    if not future.cancelled():
        future.exception()


class KeyCache:
    """Caches keys for the lifetime of the owning signer or verifier.

    Entries are never evicted or refreshed. Concurrent lookups of the same
    uncached key share a single provider call; failed lookups are not cached.
    """

    def __init__(self, provider: KeyProvider) -> None:
        self.provider = provider
        self._keys: Dict[KeyType, Dict[str, str]] = {"public": {}, "private": {}}
        self._pending: Dict[Tuple[KeyType, str], asyncio.Future] = {}

    def cached(self, key_type: KeyType, key_id: str) -> Optional[str]:
        """Return the cached key without touching the provider."""
        return self._keys[key_type].get(key_id)

    async def get_key(self, key_type: KeyType, key_id: Optional[str]) -> str:
        """Return the key for ``key_type`` and ``key_id``, fetching it once."""
        if key_id is None:
            raise KeyNotFoundError(key_type, key_id)

        key = self._keys[key_type].get(key_id)
        if key is not None:
            logger.debug(f"Key cache hit for {key_type} key {key_id}")
            return key

        pending = self._pending.get((key_type, key_id))
        if pending is None:
            logger.debug(f"Key cache miss for {key_type} key {key_id}")
            pending = asyncio.ensure_future(self._fetch(key_type, key_id))
            pending.add_done_callback(_retrieve_exception)
            self._pending[(key_type, key_id)] = pending
        return await asyncio.shield(pending)

    async def _fetch(self, key_type: KeyType, key_id: str) -> str:
        try:
            key = await self.provider.get(
                key_type, key_id, with_decryption=key_type == "private"
            )
            self._keys[key_type][key_id] = key
            return key
        finally:
            self._pending.pop((key_type, key_id), None)
