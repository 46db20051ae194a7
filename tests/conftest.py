import pytest

from signedurl import DigitalSignature
from signedurl.keys import InMemoryKeyProvider
from tests.fixtures.keys import KEY_ID, PRIVATE_KEY, PUBLIC_KEY


@pytest.fixture
def key_provider():
    provider = InMemoryKeyProvider()
    provider.add_keypair(KEY_ID, PRIVATE_KEY, PUBLIC_KEY)
    return provider


@pytest.fixture
def dig_sig(key_provider):
    return DigitalSignature(key_id=KEY_ID, key_provider=key_provider)
