"""ECDSA signing and verification with JWS (ES256) encoding."""

from __future__ import annotations

import logging
from functools import lru_cache

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from jwt.utils import (
    base64url_decode,
    base64url_encode,
    der_to_raw_signature,
    raw_to_der_signature,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def load_private_key(pem: str) -> ec.EllipticCurvePrivateKey:
    key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValueError("Signing key is not an elliptic curve private key")
    return key


@lru_cache(maxsize=32)
def load_public_key(pem: str) -> ec.EllipticCurvePublicKey:
    key = serialization.load_pem_public_key(pem.encode("utf-8"))
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise ValueError("Verification key is not an elliptic curve public key")
    return key


class Es256SignatureEngine:
    """Signs and verifies strings using ECDSA over SHA-256.

    Signatures use the JWS representation: the raw ``r || s`` integers,
    base64url encoded without padding. Any 256-bit curve works, which
    includes both P-256 and secp256k1 keys.
    """

    algorithm = "ES256"

    def sign(self, message: str, private_key: str) -> str:
        """Sign ``message`` with the PEM encoded ``private_key``."""
        key = load_private_key(private_key)
        der_sig = key.sign(message.encode("utf-8"), ec.ECDSA(hashes.SHA256()))
        raw_sig = der_to_raw_signature(der_sig, key.curve)
        return base64url_encode(raw_sig).decode("ascii")

    def verify(self, message: str, signature: str, public_key: str) -> bool:
        """Return whether ``signature`` is valid for ``message``.

        A malformed signature is reported as ``False`` rather than raised.
        """
        key = load_public_key(public_key)
        try:
            raw_sig = base64url_decode(signature)
            der_sig = raw_to_der_signature(raw_sig, key.curve)
        except (TypeError, ValueError):
            logger.warning("Signature could not be decoded")
            return False

        try:
            key.verify(der_sig, message.encode("utf-8"), ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return False
        return True
