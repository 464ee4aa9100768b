"""
Error taxonomy for inventory fetches.

Every failure a fetch can produce is an ``InventoryError`` subclass, so the
callback boundary in ``pipeline.orchestrator`` only ever has to catch one type.

Hierarchy::

    InventoryError
    ├── InvalidInputError        — missing/unparsable identity or credential
    ├── PrivateProfileError      — the target inventory is not visible
    ├── InvalidCredentialError   — the provider rejected the API key
    ├── TransientProviderError   — retryable provider hiccup (never delivered
    │                              to callers; escalates to ProviderError)
    ├── ProviderError            — any other provider-side failure
    ├── MalformedResponseError   — success status but unexpected body shape
    ├── TransportError           — network / timeout failure from httpx
    └── FetchCancelledError      — the caller cancelled the fetch
"""

from __future__ import annotations

from typing import Optional


class InventoryError(Exception):
    """Base exception for every failure raised by this package."""

    def __init__(self, message: str, *, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class InvalidInputError(InventoryError):
    """Raised before any request is sent when the call arguments are unusable."""


class PrivateProfileError(InventoryError):
    """Raised when the provider reports the profile or inventory as private."""

    def __init__(
        self, message: str = "This profile is private.", *, provider: Optional[str] = None
    ) -> None:
        super().__init__(message, provider=provider)


class InvalidCredentialError(InventoryError):
    """Raised when the provider rejects the supplied API key."""

    def __init__(
        self, message: str = "Invalid API key", *, provider: Optional[str] = None
    ) -> None:
        super().__init__(message, provider=provider)


class ProviderError(InventoryError):
    """A terminal provider failure that fits no narrower category.

    Attributes:
        status_code: HTTP status of the failing response, if any.
        eresult: Steam ``EResult`` code parsed from the error text, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        eresult: Optional[int] = None,
    ) -> None:
        super().__init__(message, provider=provider)
        self.status_code = status_code
        self.eresult = eresult


class TransientProviderError(ProviderError):
    """A provider failure that is worth retrying on the same cursor."""


class MalformedResponseError(InventoryError):
    """Raised when a response lacks the fields an inventory page must carry."""

    def __init__(
        self, message: str = "Malformed response", *, provider: Optional[str] = None
    ) -> None:
        super().__init__(message, provider=provider)


class TransportError(InventoryError):
    """Raised when the HTTP request itself fails (DNS, connect, timeout...)."""

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, provider=provider)
        self.original_exception = original_exception


class FetchCancelledError(InventoryError):
    """Raised when the caller cancels a fetch through its ``CancellationToken``."""

    def __init__(
        self, message: str = "Inventory fetch was cancelled.", *, provider: Optional[str] = None
    ) -> None:
        super().__init__(message, provider=provider)
