"""In-memory key provider for testing."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..exceptions import KeyNotFoundError
from .base import KeyProvider, KeyType


class InMemoryKeyProvider(KeyProvider):
    """Serves keys from a dictionary and records every lookup."""

    def __init__(self, keys: Optional[Dict[Tuple[str, str], str]] = None) -> None:
        self._keys: Dict[Tuple[str, str], str] = dict(keys or {})
        self.calls: List[Tuple[str, str, bool]] = []

    def add_keypair(self, key_id: str, private_pem: str, public_pem: str) -> None:
        self._keys[("private", key_id)] = private_pem
        self._keys[("public", key_id)] = public_pem

    async def get(self, key_type: KeyType, key_id: str, with_decryption: bool = False) -> str:
        self.calls.append((key_type, key_id, with_decryption))
        try:
            return self._keys[(key_type, key_id)]
        except KeyError:
            raise KeyNotFoundError(key_type, key_id) from None
