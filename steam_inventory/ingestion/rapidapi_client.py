"""
RapidAPI "steamdata1" inventory mirror.

API:   https://steamdata1.p.rapidapi.com/inventory/{steamid64}/{appid}/{contextid}
Auth:  ``X-RapidAPI-Key`` / ``X-RapidAPI-Host`` headers

Failure classification:
  429 with empty body                               → transient
  504 whose body.info mentions "took too long to respond" → transient
  body.error == "Could not retrieve user inventory. Please try again later."
                                                    → transient
  body.message == "Forbidden"                       → InvalidCredentialError("Forbidden")
  403                                               → PrivateProfileError
  body.error                                        → ProviderError(body.error)
  anything else                                     → ProviderError("HTTP error <code>")

Default budget is 10 retries per page; the gateway rate-limits aggressively.
"""

from __future__ import annotations

from typing import ClassVar, Optional

from steam_inventory.errors import InvalidCredentialError, PrivateProfileError
from steam_inventory.ingestion.base import (
    RETRY_LATER_MESSAGE,
    InventoryProvider,
    PageRequest,
    PageResult,
)
from steam_inventory.ingestion.http import HttpResponse

GATEWAY_TIMEOUT_MARKER = "took too long to respond"


class RapidApiInventoryClient(InventoryProvider):
    """RapidAPI-hosted inventory mirror."""

    name: ClassVar[str] = "rapidapi"
    display_name: ClassVar[str] = "RapidAPI steamdata1"
    page_size: ClassVar[Optional[int]] = 5000
    default_max_retries: ClassVar[int] = 10

    HOST: ClassVar[str] = "steamdata1.p.rapidapi.com"

    def build_request(self, cursor: Optional[str]) -> PageRequest:
        return PageRequest(
            url=f"https://{self.HOST}/inventory/{self.steam_id64}/{self.request.app_id}/{self.request.context_id}",
            params={
                "l": self.request.language,
                "count": self.page_size,
                "start_assetid": cursor,
            },
            headers={
                "X-RapidAPI-Key": self.request.api_key or "",
                "X-RapidAPI-Host": self.HOST,
            },
        )

    def classify_error(self, response: HttpResponse) -> PageResult:
        terminal = self._classify_terminal(response)
        if self._is_transient(response):
            return self._transient(response, on_exhausted=terminal)
        return terminal

    @staticmethod
    def _is_transient(response: HttpResponse) -> bool:
        body = response.body
        if response.status_code == 429 and body is None:
            return True
        if response.status_code == 504 and isinstance(body, dict):
            if GATEWAY_TIMEOUT_MARKER in str(body.get("info") or ""):
                return True
        return isinstance(body, dict) and body.get("error") == RETRY_LATER_MESSAGE

    def _classify_terminal(self, response: HttpResponse) -> PageResult:
        body = response.body
        if isinstance(body, dict) and body.get("message") == "Forbidden":
            return PageResult.failed(InvalidCredentialError("Forbidden", provider=self.name))
        if response.status_code == 403:
            return PageResult.failed(PrivateProfileError(provider=self.name))
        if isinstance(body, dict) and body.get("error"):
            return self._fail(response, str(body["error"]))
        return self._fail(response)
