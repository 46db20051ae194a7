"""Key provider reading PEM files from a local directory."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Union

from ..exceptions import KeyNotFoundError
from .base import KeyProvider, KeyType

logger = logging.getLogger(__name__)


class FilesystemKeyProvider(KeyProvider):
    """Reads keys laid out as ``<root>/<type>/<key_id>.pem``.

    Files are expected to hold plaintext PEM, so ``with_decryption`` has no
    effect here.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _path_for(self, key_type: KeyType, key_id: str) -> Path:
        path = (self.root / key_type / f"{key_id}.pem").resolve()
        if self.root.resolve() not in path.parents:
            raise KeyNotFoundError(key_type, key_id)
        return path

    async def get(self, key_type: KeyType, key_id: str, with_decryption: bool = False) -> str:
        path = self._path_for(key_type, key_id)
        logger.debug(f"Reading {key_type} key {key_id} from {path}")
        try:
            return await asyncio.to_thread(path.read_text)
        except FileNotFoundError:
            raise KeyNotFoundError(key_type, key_id) from None
