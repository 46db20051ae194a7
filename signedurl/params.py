"""Parsing, defaulting and serialization of signed URL query parameters."""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, quote, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, field_validator

from .constants import DEFAULT_TTL_MS, PARAM_ORDER
from .exceptions import MissingSubjectError


class SignedUrlParameters(BaseModel):
    """The query parameters carried by a signed URL.

    Field names match the wire names. ``expiresAt`` stays a decimal string as
    it appears in the query; use :attr:`expires_at_ms` to compare it with the
    clock.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    expiresAt: str
    nonce: str
    userId: str
    keyId: Optional[str] = None
    entitlementId: Optional[str] = None
    clientId: Optional[str] = None
    signature: Optional[str] = None

    @field_validator("expiresAt", mode="before")
    @classmethod
    def _stringify_expiry(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def expires_at_ms(self) -> int:
        return int(self.expiresAt)

    def is_expired(self, now_ms: Optional[int] = None) -> bool:
        """Return ``True`` once ``expiresAt`` is in the past.

        Signature verification does not call this; callers that enforce
        freshness must do so themselves.
        """
        now_ms = now_ms if now_ms is not None else current_time_ms()
        return self.expires_at_ms < now_ms


def current_time_ms() -> int:
    return int(time.time() * 1000)


def generate_nonce() -> str:
    """Return a short random token (the last group of a UUID4)."""
    return str(uuid.uuid4()).split("-")[-1]


def parse_query(url: str) -> Dict[str, str]:
    """Parse the query string of ``url``; a repeated key keeps its last value."""
    url = url.split("#", 1)[0]
    if "?" not in url:
        return {}
    query = url.split("?")[-1]
    parsed = parse_qs(query, keep_blank_values=True)
    return {key: values[-1] for key, values in parsed.items()}


def merge_params(url: str, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Shallow-merge ``overrides`` over the parameters already in ``url``.

    Overrides set to ``None`` leave the parsed value in place.
    """
    params: Dict[str, Any] = dict(parse_query(url))
    for key, value in (overrides or {}).items():
        if value is not None:
            params[key] = value
    return params


def complete_params(
    params: Mapping[str, Any],
    default_key_id: Optional[str],
    now_ms: Optional[int] = None,
) -> Dict[str, Any]:
    """Fill in ``expiresAt``, ``nonce`` and ``keyId`` where they are missing.

    Values already present are kept verbatim. Raises
    :class:`MissingSubjectError` when there is no ``userId``.
    """
    completed = dict(params)
    if not completed.get("userId"):
        raise MissingSubjectError()
    if not completed.get("expiresAt"):
        now_ms = now_ms if now_ms is not None else current_time_ms()
        completed["expiresAt"] = str(now_ms + DEFAULT_TTL_MS)
    if not completed.get("nonce"):
        completed["nonce"] = generate_nonce()
    if not completed.get("keyId"):
        completed["keyId"] = default_key_id
    return completed


def extract_params(url: str, default_key_id: Optional[str] = None) -> SignedUrlParameters:
    """Read the parameters of an already signed URL.

    Nothing is signed here; a URL without a ``signature`` yields a parameter
    set whose ``signature`` is ``None``.
    """
    return SignedUrlParameters(**complete_params(merge_params(url), default_key_id))


def serialize_params(
    url: str, params: SignedUrlParameters, client_id: Optional[str] = None
) -> str:
    """Append ``params`` to ``url`` in the fixed wire order.

    ``entitlementId`` is emitted only when set and ``clientId`` only when
    passed explicitly.
    """
    values = params.model_dump(include=set(PARAM_ORDER))
    values["clientId"] = client_id
    pairs = [
        f"{name}={quote(str(values[name]), safe='')}"
        for name in PARAM_ORDER
        if values.get(name)
    ]
    parts = urlsplit(url)
    query = "&".join(filter(None, [parts.query, *pairs]))
    return urlunsplit(parts._replace(query=query))
