"""Errors raised while building or verifying signed URLs.

An invalid signature is never an error: verification returns ``False``.
"""

from __future__ import annotations


class SignedUrlError(Exception):
    """Base class for signedurl errors."""


class MissingSubjectError(SignedUrlError, ValueError):
    """No ``userId`` could be resolved for a parameter set."""

    def __init__(self, message: str = "No userId found in params") -> None:
        super().__init__(message)


class KeyNotFoundError(SignedUrlError, LookupError):
    """The key provider has no key for the requested type and id."""

    def __init__(self, key_type: str, key_id: str | None) -> None:
        self.key_type = key_type
        self.key_id = key_id
        super().__init__(f"No {key_type} key found for key id {key_id!r}")


class KeyProviderUnavailableError(SignedUrlError):
    """The key backend failed in a way that may succeed on a later attempt."""
