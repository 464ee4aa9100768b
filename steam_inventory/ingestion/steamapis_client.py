"""
SteamApis.com inventory mirror.

API:   https://api.steamapis.com/steam/inventory/{steamid64}/{appid}/{contextid}
Auth:  ``api_key`` query parameter

Failure classification:
  404, or body.error == "Could not retrieve user inventory. Please try again later."
                  → transient (retried, default budget 5 per page)
  403             → PrivateProfileError
  body.error      → ProviderError(body.error)
  anything else   → ProviderError("HTTP error <code>")

A transient failure that runs out of retries is classified by the remaining
rules, so an exhausted 404 ends as ``ProviderError("HTTP error 404")``.
"""

from __future__ import annotations

from typing import ClassVar, Optional

from steam_inventory.errors import PrivateProfileError
from steam_inventory.ingestion.base import (
    RETRY_LATER_MESSAGE,
    InventoryProvider,
    PageRequest,
    PageResult,
)
from steam_inventory.ingestion.http import HttpResponse


class SteamApisInventoryClient(InventoryProvider):
    """api.steamapis.com inventory mirror."""

    name: ClassVar[str] = "steamapis"
    display_name: ClassVar[str] = "SteamApis"
    page_size: ClassVar[Optional[int]] = 2000
    default_max_retries: ClassVar[int] = 5

    BASE_URL: ClassVar[str] = "https://api.steamapis.com/steam/inventory"

    def build_request(self, cursor: Optional[str]) -> PageRequest:
        return PageRequest(
            url=f"{self.BASE_URL}/{self.steam_id64}/{self.request.app_id}/{self.request.context_id}",
            params={
                "api_key": self.request.api_key,
                "l": self.request.language,
                "count": self.page_size,
                "start_assetid": cursor,
            },
        )

    def classify_error(self, response: HttpResponse) -> PageResult:
        terminal = self._classify_terminal(response)
        body = response.body
        if response.status_code == 404 or (
            isinstance(body, dict) and body.get("error") == RETRY_LATER_MESSAGE
        ):
            return self._transient(response, on_exhausted=terminal)
        return terminal

    def _classify_terminal(self, response: HttpResponse) -> PageResult:
        if response.status_code == 403:
            return PageResult.failed(PrivateProfileError(provider=self.name))
        body = response.body
        if isinstance(body, dict) and body.get("error"):
            return self._fail(response, str(body["error"]))
        return self._fail(response)
