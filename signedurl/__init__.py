"""signedurl: stateless, capability-style signed URLs."""

from .canonical import base_url, build_signable
from .config import SignedUrlConfig, load_config
from .exceptions import (
    KeyNotFoundError,
    KeyProviderUnavailableError,
    MissingSubjectError,
    SignedUrlError,
)
from .jws import Es256SignatureEngine
from .keys import KeyCache, KeyProvider, get_key_provider
from .params import SignedUrlParameters
from .signer import DigitalSignature

__version__ = "0.1.0"
__all__ = [
    "DigitalSignature",
    "Es256SignatureEngine",
    "KeyCache",
    "KeyNotFoundError",
    "KeyProvider",
    "KeyProviderUnavailableError",
    "MissingSubjectError",
    "SignedUrlConfig",
    "SignedUrlError",
    "SignedUrlParameters",
    "base_url",
    "build_signable",
    "get_key_provider",
    "load_config",
]
