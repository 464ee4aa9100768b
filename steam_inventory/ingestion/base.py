"""
Abstract base class for inventory provider adapters.

Every adapter follows the same contract:
  1. Receive the shared ``HttpTransport`` and a ``FetchRequest`` at construction;
     ``__init__`` raises ``InvalidInputError`` when the request is unusable
     for that provider (no request is ever sent in that case).
  2. ``fetch_page(cursor)`` is the sole public API: one HTTP call, one
     ``PageResult``.
  3. ``build_request()`` and ``classify_error()`` are the provider-specific
     parts; ``classify_success()`` / ``classify_body()`` carry the shared
     "is this a valid inventory page" rules and may be extended.

Adapters never loop or retry; the paginator does that.  A
``PageResult`` tells the paginator what happened:

  SUCCESS    — assets/descriptions to accumulate, plus the "more items" cursor.
  EMPTY      — provider reported success with zero items; fetch is done.
  TRANSIENT  — retry the same cursor; ``on_exhausted`` is what the page
               counts as once the retry budget is spent.
  FAILED     — terminal; ``error`` is delivered to the caller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Optional

from steam_inventory.errors import (
    InvalidInputError,
    InventoryError,
    MalformedResponseError,
    ProviderError,
    TransientProviderError,
    TransportError,
)
from steam_inventory.identity import SteamID
from steam_inventory.ingestion.http import HttpResponse, HttpTransport

logger = logging.getLogger(__name__)

RETRY_LATER_MESSAGE = "Could not retrieve user inventory. Please try again later."


# ── Request / result types ────────────────────────────────────────────────────

@dataclass(frozen=True)
class FetchRequest:
    """What the caller asked for, already validated by the orchestrator."""

    steam_id: SteamID
    app_id: int
    context_id: int
    language: str = "english"
    api_key: Optional[str] = None


@dataclass(frozen=True)
class PageRequest:
    """One HTTP GET as an adapter wants it sent."""

    url: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


class PageStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    TRANSIENT = "transient"
    FAILED = "failed"


@dataclass(frozen=True)
class PageResult:
    """Classified outcome of one page request."""

    status: PageStatus
    assets: list[dict[str, Any]] = field(default_factory=list)
    descriptions: list[dict[str, Any]] = field(default_factory=list)
    more_items: bool = False
    last_assetid: Optional[str] = None
    total_count: Optional[int] = None
    error: Optional[InventoryError] = None
    on_exhausted: Optional["PageResult"] = None

    @classmethod
    def success(
        cls,
        assets: list[dict[str, Any]],
        descriptions: list[dict[str, Any]],
        *,
        more_items: bool = False,
        last_assetid: Optional[str] = None,
        total_count: Optional[int] = None,
    ) -> "PageResult":
        return cls(
            status=PageStatus.SUCCESS,
            assets=assets,
            descriptions=descriptions,
            more_items=more_items,
            last_assetid=last_assetid,
            total_count=total_count,
        )

    @classmethod
    def empty(cls) -> "PageResult":
        return cls(status=PageStatus.EMPTY, total_count=0)

    @classmethod
    def failed(cls, error: InventoryError) -> "PageResult":
        return cls(status=PageStatus.FAILED, error=error)

    @classmethod
    def transient(cls, error: InventoryError, on_exhausted: "PageResult") -> "PageResult":
        return cls(status=PageStatus.TRANSIENT, error=error, on_exhausted=on_exhausted)


def body_error_message(body: Any) -> Optional[str]:
    """Return ``body["error"]`` or ``body["Error"]`` when ``body`` is a dict."""
    if isinstance(body, dict):
        message = body.get("error") or body.get("Error")
        if message:
            return str(message)
    return None


# ── Adapter base ──────────────────────────────────────────────────────────────

class InventoryProvider(ABC):
    """Abstract base for one inventory backend.

    Subclasses must:
      1. Set ``name``, ``page_size``, ``default_max_retries``.
      2. Implement ``build_request(cursor)`` and ``classify_error(response)``.

    Attributes:
        name: Provider identifier used in config and logs.
        display_name: Human-readable backend name shown by the CLI.
        page_size: ``count`` query parameter, or ``None`` if not sent.
        default_max_retries: Per-page transient retry budget when the config
            has no policy for this provider.
        requires_api_key: Whether ``FetchRequest.api_key`` is mandatory.
        requires_success_flag: Whether a valid page must carry ``success``.
    """

    name: ClassVar[str]
    display_name: ClassVar[str] = ""
    page_size: ClassVar[Optional[int]] = None
    default_max_retries: ClassVar[int] = 0
    requires_api_key: ClassVar[bool] = True
    requires_success_flag: ClassVar[bool] = True

    def __init__(
        self,
        transport: HttpTransport,
        request: FetchRequest,
        *,
        on_session_expired: Optional[Callable[[InventoryError], None]] = None,
    ) -> None:
        if request.steam_id is None:
            raise InvalidInputError("The user's SteamID is invalid or missing.", provider=self.name)
        if self.requires_api_key and not request.api_key:
            raise InvalidInputError("The apiKey is missing.", provider=self.name)
        self.transport = transport
        self.request = request
        self.on_session_expired = on_session_expired

    @property
    def steam_id64(self) -> str:
        return self.request.steam_id.get_steam_id64()

    # ── Public API ─────────────────────────────────────────────────────────────

    def fetch_page(self, cursor: Optional[str]) -> PageResult:
        """Request one page starting after ``cursor`` and classify the response.

        Raises:
            TransportError: If the request could not be completed at all.
        """
        page_request = self.build_request(cursor)
        try:
            response = self.transport.get(
                page_request.url, params=page_request.params, headers=page_request.headers
            )
        except TransportError as exc:
            exc.provider = self.name
            raise
        if not response.is_success:
            return self.classify_error(response)
        return self.classify_success(response)

    # ── Provider-specific hooks ────────────────────────────────────────────────

    @abstractmethod
    def build_request(self, cursor: Optional[str]) -> PageRequest:
        """Build the GET for the page starting after ``cursor``."""
        ...

    @abstractmethod
    def classify_error(self, response: HttpResponse) -> PageResult:
        """Classify a non-2xx response as TRANSIENT or FAILED."""
        ...

    def unwrap(self, body: Any) -> Any:
        """Return the part of the body holding the inventory fields."""
        return body

    def classify_success(self, response: HttpResponse) -> PageResult:
        """Classify a 2xx response."""
        return self.classify_body(response.body)

    def classify_body(self, body: Any) -> PageResult:
        """Apply the shared empty / malformed / success rules to a parsed body."""
        payload = self.unwrap(body)
        if not isinstance(payload, dict):
            return PageResult.failed(
                MalformedResponseError(body_error_message(body) or "Malformed response", provider=self.name)
            )

        has_success = bool(payload.get("success")) or not self.requires_success_flag
        if has_success and self._is_zero_count(payload.get("total_inventory_count")):
            return PageResult.empty()

        if not has_success or payload.get("assets") is None or payload.get("descriptions") is None:
            return PageResult.failed(
                MalformedResponseError(
                    body_error_message(payload) or body_error_message(body) or "Malformed response",
                    provider=self.name,
                )
            )

        assets = payload["assets"]
        descriptions = payload["descriptions"]
        for key, value in (("assets", assets), ("descriptions", descriptions)):
            if not self._is_record_list(value):
                return PageResult.failed(
                    MalformedResponseError(
                        f"Response field '{key}' is not a list of objects", provider=self.name
                    )
                )

        total = payload.get("total_inventory_count")
        try:
            total_count = int(total) if total is not None else None
        except (TypeError, ValueError):
            return PageResult.failed(
                MalformedResponseError(
                    f"Response has a non-numeric total_inventory_count: {total!r}",
                    provider=self.name,
                )
            )

        last_assetid = payload.get("last_assetid")
        return PageResult.success(
            list(assets),
            list(descriptions),
            more_items=bool(payload.get("more_items")),
            last_assetid=str(last_assetid) if last_assetid is not None else None,
            total_count=total_count,
        )

    # ── Shared helpers for subclasses ──────────────────────────────────────────

    @staticmethod
    def _is_record_list(value: Any) -> bool:
        return isinstance(value, list) and all(isinstance(v, dict) for v in value)

    @staticmethod
    def _is_zero_count(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and value == 0

    def _fail(self, response: HttpResponse, message: Optional[str] = None) -> PageResult:
        return PageResult.failed(
            ProviderError(
                message or response.error_message,
                provider=self.name,
                status_code=response.status_code,
            )
        )

    def _transient(self, response: HttpResponse, on_exhausted: PageResult) -> PageResult:
        logger.debug(
            "%s: transient failure (HTTP %d) for steamid=%s",
            self.name, response.status_code, self.steam_id64,
        )
        return PageResult.transient(
            TransientProviderError(
                response.error_message, provider=self.name, status_code=response.status_code
            ),
            on_exhausted=on_exhausted,
        )
