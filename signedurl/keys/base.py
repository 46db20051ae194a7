"""Base key provider interface for signedurl key resolution."""

from __future__ import annotations

import abc
from typing import Literal

from ..constants import KEY_PATH_PREFIX

KeyType = Literal["public", "private"]


def key_path(key_type: KeyType, key_id: str, prefix: str = KEY_PATH_PREFIX) -> str:
    """Return the hierarchical name under which a key is stored."""
    return f"{prefix.rstrip('/')}/{key_type}/{key_id}"


class KeyProvider(metaclass=abc.ABCMeta):
    """Abstract source of PEM encoded key material.

    Implementations raise :class:`~signedurl.exceptions.KeyNotFoundError` when
    the key does not exist and
    :class:`~signedurl.exceptions.KeyProviderUnavailableError` when the backend
    cannot be reached. They must not retry on their own behalf.
    """

    @abc.abstractmethod
    async def get(self, key_type: KeyType, key_id: str, with_decryption: bool = False) -> str:
        """Return the key stored for ``key_type`` and ``key_id``.

        Args:
            key_type: Either ``"public"`` or ``"private"``
            key_id: The key identifier
            with_decryption: Ask the backend for plaintext rather than an
                encrypted-at-rest value.
        """
        raise NotImplementedError
