"""End-to-end tests for building and verifying signed URLs."""

from urllib.parse import parse_qs, urlsplit

import pytest

from signedurl import DigitalSignature, KeyNotFoundError, MissingSubjectError

from tests.fixtures.keys import KEY_ID

UNSIGNED_URL = "https://pageraftstaging.nxtbook.com/360mediadirect/us_weekly/demo_full/cover.html"
USER_ID = "94a637e3-2c58-4f78-8466-d96667adfe1d"
ENTITLEMENT_ID = "94a637e3-2c58-4f78-9999-d96667adfe1d"

SIGNED_TEXT = (
    "https://pageraftstaging.nxtbook.com/360mediadirect/us_weekly/demo_full"
    "1685462429935"
    "94a637e3-2c58-4f78-8466-d96667adfe1d"
    "950115a2a1b0"
)
SIGNATURE = "ynL_6eDmLO68PdxmkJsOs2OHn28tl_DGnQe9L84a9MesiNM51Oq9QJJnauLLFoZn0xiYlxHiz3iDR9J3su8orQ"
SIGNED_URL = (
    f"{UNSIGNED_URL}?expiresAt=1685462429935&keyId={KEY_ID}&userId={USER_ID}"
    f"&nonce=950115a2a1b0&signature={SIGNATURE}&clientId=steve-postman"
)


def _query(url):
    return {key: values[-1] for key, values in parse_qs(urlsplit(url).query).items()}


@pytest.mark.asyncio
async def test_sign_returns_base64url_signature(dig_sig):
    signature = await dig_sig.sign(SIGNED_TEXT)
    assert signature
    assert "=" not in signature and "+" not in signature and "/" not in signature
    assert await dig_sig.verify(SIGNED_TEXT, signature)


@pytest.mark.asyncio
async def test_verify_known_signature(dig_sig):
    assert await dig_sig.verify(SIGNED_TEXT, SIGNATURE) is True


@pytest.mark.asyncio
async def test_verify_rejects_wrong_text_and_garbage(dig_sig):
    assert await dig_sig.verify(SIGNED_TEXT + "x", SIGNATURE) is False
    assert await dig_sig.verify(SIGNED_TEXT, "not-a-signature") is False
    assert await dig_sig.verify(SIGNED_TEXT, "") is False


@pytest.mark.asyncio
async def test_verify_with_explicit_public_key_id(dig_sig):
    assert await dig_sig.verify(SIGNED_TEXT, SIGNATURE, pub_key_id=KEY_ID) is True
    with pytest.raises(KeyNotFoundError):
        await dig_sig.verify(SIGNED_TEXT, SIGNATURE, pub_key_id="missing")


@pytest.mark.asyncio
async def test_build_url_params_extracts_signed_params_verbatim(dig_sig, key_provider):
    params = await dig_sig.build_url_params(SIGNED_URL)

    assert params.model_dump(exclude_none=True) == {
        "expiresAt": "1685462429935",
        "keyId": KEY_ID,
        "userId": USER_ID,
        "nonce": "950115a2a1b0",
        "signature": SIGNATURE,
        "clientId": "steve-postman",
    }
    # Nothing was signed, so no key was fetched.
    assert key_provider.calls == []


@pytest.mark.asyncio
async def test_build_url_params_fills_defaults(dig_sig, key_provider):
    params = await dig_sig.build_url_params(UNSIGNED_URL, {"userId": USER_ID})

    assert params.userId == USER_ID
    assert params.keyId == KEY_ID
    assert len(params.nonce) == 12
    assert params.signature
    assert not params.is_expired()
    assert key_provider.calls == [("private", KEY_ID, True)]


@pytest.mark.asyncio
async def test_build_url_params_without_user_id_fails(dig_sig, key_provider):
    with pytest.raises(MissingSubjectError):
        await dig_sig.build_url_params(UNSIGNED_URL, {})
    assert key_provider.calls == []


@pytest.mark.asyncio
async def test_build_signed_url_layout(dig_sig):
    signed_url = await dig_sig.build_signed_url(
        UNSIGNED_URL, USER_ID, ENTITLEMENT_ID, "steve-postman"
    )

    assert signed_url.startswith(f"{UNSIGNED_URL}?expiresAt=")
    names = [pair.split("=", 1)[0] for pair in urlsplit(signed_url).query.split("&")]
    assert names == [
        "expiresAt",
        "keyId",
        "userId",
        "entitlementId",
        "nonce",
        "signature",
        "clientId",
    ]
    query = _query(signed_url)
    assert query["keyId"] == KEY_ID
    assert query["userId"] == USER_ID
    assert query["entitlementId"] == ENTITLEMENT_ID
    assert query["clientId"] == "steve-postman"


@pytest.mark.asyncio
async def test_build_signed_url_omits_optional_params(dig_sig):
    signed_url = await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID)

    query = _query(signed_url)
    assert "entitlementId" not in query
    assert "clientId" not in query
    assert signed_url.split("&")[-1].startswith("signature=")


@pytest.mark.asyncio
async def test_build_signed_url_keeps_existing_query(dig_sig):
    signed_url = await dig_sig.build_signed_url(f"{UNSIGNED_URL}?page=3", USER_ID)

    assert signed_url.startswith(f"{UNSIGNED_URL}?page=3&expiresAt=")
    assert await dig_sig.verify_signed_url(signed_url) is True


@pytest.mark.asyncio
async def test_verify_signed_url_known_vector(dig_sig):
    assert await dig_sig.verify_signed_url(SIGNED_URL) is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url, entitlement_id, client_id",
    [
        (UNSIGNED_URL, None, None),
        (UNSIGNED_URL, ENTITLEMENT_ID, "steve-postman"),
        ("https://cdn.example.com/issues/42/", "ent-1", None),
        ("https://cdn.example.com", None, "gateway"),
        ("https://host/p/cover.html?a=1#top", None, None),
    ],
)
async def test_round_trip(dig_sig, url, entitlement_id, client_id):
    signed_url = await dig_sig.build_signed_url(url, USER_ID, entitlement_id, client_id)
    assert await dig_sig.verify_signed_url(signed_url) is True


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["expiresAt", "userId", "nonce"])
async def test_tampering_with_signed_fields_fails(dig_sig, field):
    signed_url = await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID, ENTITLEMENT_ID)
    value = _query(signed_url)[field]

    tampered = signed_url.replace(f"{field}={value}", f"{field}={value}0")
    assert tampered != signed_url
    assert await dig_sig.verify_signed_url(tampered) is False


@pytest.mark.asyncio
async def test_tampering_with_path_fails(dig_sig):
    signed_url = await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID)

    tampered = signed_url.replace("/demo_full/", "/demo_free/")
    assert await dig_sig.verify_signed_url(tampered) is False


@pytest.mark.asyncio
async def test_filename_is_not_signed(dig_sig):
    signed_url = await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID)

    assert await dig_sig.verify_signed_url(signed_url.replace("/cover.html", "/page2.html"))


@pytest.mark.asyncio
async def test_entitlement_and_client_ids_are_not_signed(dig_sig):
    signed_url = await dig_sig.build_signed_url(
        UNSIGNED_URL, USER_ID, ENTITLEMENT_ID, "steve-postman"
    )

    forged = signed_url.replace(
        f"entitlementId={ENTITLEMENT_ID}", "entitlementId=someone-else"
    ).replace("clientId=steve-postman", "clientId=other-client")
    assert forged != signed_url
    assert await dig_sig.verify_signed_url(forged) is True


@pytest.mark.asyncio
async def test_verify_signed_url_does_not_check_expiry(dig_sig):
    params = await dig_sig.build_url_params(
        UNSIGNED_URL, {"userId": USER_ID, "expiresAt": 1}
    )
    signed_url = (
        f"{UNSIGNED_URL}?expiresAt=1&keyId={KEY_ID}&userId={USER_ID}"
        f"&nonce={params.nonce}&signature={params.signature}"
    )

    assert params.is_expired()
    assert await dig_sig.verify_signed_url(signed_url) is True


@pytest.mark.asyncio
async def test_verify_signed_url_without_signature(dig_sig, key_provider):
    url = f"{UNSIGNED_URL}?expiresAt=1685462429935&userId={USER_ID}&nonce=abc"

    assert await dig_sig.verify_signed_url(url) is False
    assert key_provider.calls == []


@pytest.mark.asyncio
async def test_verify_signed_url_without_user_id_fails(dig_sig):
    with pytest.raises(MissingSubjectError):
        await dig_sig.verify_signed_url(f"{UNSIGNED_URL}?signature={SIGNATURE}")


@pytest.mark.asyncio
async def test_unknown_key_id_propagates(key_provider):
    dig_sig = DigitalSignature(key_id="unknown", key_provider=key_provider)

    with pytest.raises(KeyNotFoundError):
        await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID)


@pytest.mark.asyncio
async def test_keys_are_fetched_once_per_instance(dig_sig, key_provider):
    first = await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID)
    second = await dig_sig.build_signed_url(UNSIGNED_URL, USER_ID)
    assert await dig_sig.verify_signed_url(first)
    assert await dig_sig.verify_signed_url(second)

    assert key_provider.calls == [("private", KEY_ID, True), ("public", KEY_ID, False)]


def test_key_id_from_environment(monkeypatch, key_provider, tmp_path):
    monkeypatch.setenv("SIGNEDURL_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("DIGITAL_SIGNATURE_KEY_ID", "from-env")

    dig_sig = DigitalSignature(key_provider=key_provider)
    assert dig_sig.key_id == "from-env"


@pytest.mark.asyncio
async def test_build_signed_url_keeps_fragment_last(dig_sig):
    signed_url = await dig_sig.build_signed_url("https://host/p/cover.html?a=1#top", USER_ID)

    parts = urlsplit(signed_url)
    assert parts.fragment == "top"
    assert parts.query.startswith("a=1&expiresAt=")
    assert _query(signed_url)["userId"] == USER_ID
    assert await dig_sig.verify_signed_url(signed_url) is True
