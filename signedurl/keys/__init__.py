"""Key provider selection."""

from __future__ import annotations

from typing import Optional

from ..config import KeysConfig, SignedUrlConfig, load_config
from .base import KeyProvider, KeyType, key_path
from .cache import KeyCache
from .filesystem import FilesystemKeyProvider
from .inmemory import InMemoryKeyProvider


def _ssm_provider(keys: KeysConfig) -> KeyProvider:
    from .ssm import SsmKeyProvider

    return SsmKeyProvider(
        path_prefix=keys.path_prefix,
        region_name=keys.ssm.region_name,
        profile_name=keys.ssm.profile_name,
    )


_BACKENDS = {
    "inmemory": lambda keys: InMemoryKeyProvider(),
    "filesystem": lambda keys: FilesystemKeyProvider(keys.filesystem.root),
    "ssm": _ssm_provider,
}


def get_key_provider(
    backend: Optional[str] = None, config: Optional[SignedUrlConfig] = None
) -> KeyProvider:
    """Return the key provider for ``backend``, or the configured one."""

    keys = (config or load_config()).keys
    name = (backend or keys.backend).lower()
    try:
        build = _BACKENDS[name]
    except KeyError:
        raise ValueError(f"Unsupported key backend: {name}") from None
    return build(keys)


__all__ = [
    "FilesystemKeyProvider",
    "InMemoryKeyProvider",
    "KeyCache",
    "KeyProvider",
    "KeyType",
    "get_key_provider",
    "key_path",
]
