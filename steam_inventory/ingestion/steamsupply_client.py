"""
Steam.supply inventory mirror.

API:   https://steam.supply/API/{api_key}/loadinventory
Auth:  API key embedded in the URL path

Query parameters::

    l  steamid  appid  contextid  count=5000  start_assetid

Failure classification (non-2xx):
  500                                 → transient (default budget 5 per page)
  403 + "Invalid API key" in body     → InvalidCredentialError
  403 + "Inventory Private" in body   → PrivateProfileError
  any other status with a text body   → ProviderError(<body text>)
  anything else                       → ProviderError("HTTP error <code>")

Steam.supply sometimes answers 200 with an HTML redirect page or a JSON body
flagged ``fake_redirect``.  Both are transient; once the budget is spent the
body goes through the normal shape check (and so usually ends as
``MalformedResponseError``).
"""

from __future__ import annotations

from typing import ClassVar, Optional

from steam_inventory.errors import InvalidCredentialError, PrivateProfileError, TransientProviderError
from steam_inventory.ingestion.base import InventoryProvider, PageRequest, PageResult
from steam_inventory.ingestion.http import HttpResponse


class SteamSupplyInventoryClient(InventoryProvider):
    """steam.supply inventory mirror."""

    name: ClassVar[str] = "steamsupply"
    display_name: ClassVar[str] = "Steam.supply"
    page_size: ClassVar[Optional[int]] = 5000
    default_max_retries: ClassVar[int] = 5

    BASE_URL: ClassVar[str] = "https://steam.supply/API"

    def build_request(self, cursor: Optional[str]) -> PageRequest:
        return PageRequest(
            url=f"{self.BASE_URL}/{self.request.api_key}/loadinventory",
            params={
                "l": self.request.language,
                "steamid": self.steam_id64,
                "appid": self.request.app_id,
                "contextid": self.request.context_id,
                "count": self.page_size,
                "start_assetid": cursor,
            },
        )

    def classify_error(self, response: HttpResponse) -> PageResult:
        terminal = self._classify_terminal(response)
        if response.status_code == 500:
            return self._transient(response, on_exhausted=terminal)
        return terminal

    def _classify_terminal(self, response: HttpResponse) -> PageResult:
        text = response.text or ""
        if response.status_code == 403:
            if "Invalid API key" in text:
                return PageResult.failed(InvalidCredentialError(provider=self.name))
            if "Inventory Private" in text:
                return PageResult.failed(PrivateProfileError(provider=self.name))
        if text.strip():
            return self._fail(response, text.strip())
        return self._fail(response)

    def classify_success(self, response: HttpResponse) -> PageResult:
        body = response.body
        shaped = self.classify_body(body)
        if not isinstance(body, dict) or body.get("fake_redirect"):
            return PageResult.transient(
                TransientProviderError(
                    "Redirect page instead of inventory JSON",
                    provider=self.name,
                    status_code=response.status_code,
                ),
                on_exhausted=shaped,
            )
        return shaped
