"""Simple example showing how a signed URL is issued and checked."""

import asyncio

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from signedurl import DigitalSignature
from signedurl.keys import InMemoryKeyProvider


def generate_keypair():
    key = ec.generate_private_key(ec.SECP256R1())
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


async def main():
    """Sign a URL, verify it, then tamper with it."""
    provider = InMemoryKeyProvider()
    provider.add_keypair("demo-key", *generate_keypair())

    signer = DigitalSignature(key_id="demo-key", key_provider=provider)
    signed_url = await signer.build_signed_url(
        "https://cdn.example.com/us_weekly/demo_full/cover.html",
        user_id="reader-123",
        entitlement_id="subscription-9",
        client_id="web",
    )
    print(f"🔗 Signed URL: {signed_url}")

    # A gateway only needs the public key to check the URL.
    gateway = DigitalSignature(key_id="demo-key", key_provider=provider)
    print(f"✅ Valid: {await gateway.verify_signed_url(signed_url)}")

    tampered = signed_url.replace("userId=reader-123", "userId=reader-456")
    print(f"❌ Tampered valid: {await gateway.verify_signed_url(tampered)}")


if __name__ == "__main__":
    asyncio.run(main())
