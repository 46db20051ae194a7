"""Protocol constants shared by signers and verifiers."""

DEFAULT_TTL_MS = 300_000

KEY_PATH_PREFIX = "/periodical/dig-sig/keys"

KEY_ID_ENV = "DIGITAL_SIGNATURE_KEY_ID"
CONFIG_PATH_ENV = "SIGNEDURL_CONFIG"
KEY_BACKEND_ENV = "SIGNEDURL_KEY_BACKEND"

# Emission order of signed URL query parameters.
PARAM_ORDER = (
    "expiresAt",
    "keyId",
    "userId",
    "entitlementId",
    "nonce",
    "signature",
    "clientId",
)
