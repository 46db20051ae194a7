"""Building and verifying signed URLs."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .canonical import build_signable
from .config import SignedUrlConfig, load_config
from .jws import Es256SignatureEngine
from .keys import KeyCache, KeyProvider, get_key_provider
from .params import (
    SignedUrlParameters,
    complete_params,
    extract_params,
    merge_params,
    serialize_params,
)

logger = logging.getLogger(__name__)


class DigitalSignature:
    """Signs URLs and verifies signed URLs for one key identifier.

    Keys are resolved through ``key_provider`` and cached for the lifetime of
    the instance.
    """

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_provider: Optional[KeyProvider] = None,
        engine: Optional[Es256SignatureEngine] = None,
        config: Optional[SignedUrlConfig] = None,
    ) -> None:
        if key_id is None or key_provider is None:
            config = config or load_config()
        self.key_id = key_id if key_id is not None else config.key_id
        self.keys = KeyCache(key_provider or get_key_provider(config=config))
        self.engine = engine or Es256SignatureEngine()

    async def sign(self, plain_text: str) -> str:
        """Sign ``plain_text`` with this instance's private key.

        Returns:
            The base64url encoded signature.
        """
        private_key = await self.keys.get_key("private", self.key_id)
        return self.engine.sign(plain_text, private_key)

    async def verify(
        self, text: str, signature: str, pub_key_id: Optional[str] = None
    ) -> bool:
        """Verify ``signature`` over ``text``.

        Args:
            text: The signed text
            signature: The base64url encoded signature
            pub_key_id: The ID of the public key to use for verification. If
                not specified, the key id given to the constructor is used.
        """
        public_key = await self.keys.get_key(
            "public", pub_key_id if pub_key_id is not None else self.key_id
        )
        return self.engine.verify(text, signature, public_key)

    async def build_url_params(
        self, url: str, overrides: Optional[Mapping[str, Any]] = None
    ) -> SignedUrlParameters:
        """Return all parameters expected in a signed URL.

        For URLs that are not yet signed the expiration, nonce, key id and
        signature are generated. For already signed URLs the parameters are
        taken from the query string as they are.

        Args:
            url: The URL to be signed, or a signed URL
            overrides: Parameters to add to, or override from, the URL
        """
        params = complete_params(merge_params(url, overrides), self.key_id)
        if not params.get("signature"):
            params["signature"] = await self.sign(build_signable(url, params))
        return SignedUrlParameters(**params)

    async def build_signed_url(
        self,
        unsigned_url: str,
        user_id: str,
        entitlement_id: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> str:
        """Return ``unsigned_url`` with the signed URL parameters appended."""
        params = await self.build_url_params(
            unsigned_url, {"userId": user_id, "entitlementId": entitlement_id}
        )
        # The signature was produced with this instance's private key.
        params = params.model_copy(update={"keyId": self.key_id})
        logger.info(
            f"Built signed URL for userId={params.userId} keyId={params.keyId} "
            f"expiresAt={params.expiresAt}"
        )
        return serialize_params(unsigned_url, params, client_id=client_id)

    async def verify_signed_url(self, signed_url: str) -> bool:
        """Verify the signature on a URL built by :meth:`build_signed_url`.

        Only authenticity is checked. ``expiresAt`` is not compared with the
        current time; see :meth:`SignedUrlParameters.is_expired`.
        """
        params = extract_params(signed_url, self.key_id)
        if not params.signature:
            logger.warning("Signed URL carries no signature")
            return False

        signable = build_signable(signed_url, params.model_dump())
        valid = await self.verify(signable, params.signature, params.keyId)
        if not valid:
            logger.warning(
                f"Signature verification failed for userId={params.userId} keyId={params.keyId}"
            )
        return valid
