"""
Steam Web API ``IEconService/GetInventoryItemsWithDescriptions`` provider.

API:   https://api.steampowered.com/IEconService/GetInventoryItemsWithDescriptions/v1
Auth:  ``key`` query parameter (Steam Web API key)

The inventory fields sit under ``body["response"]`` and there is no
``success`` flag: ``response.total_inventory_count == 0`` alone means empty.

Failure classification:
  403           → InvalidCredentialError("Invalid API key")
  anything else → ProviderError("HTTP error <code>")
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional

from steam_inventory.errors import InvalidCredentialError
from steam_inventory.ingestion.base import InventoryProvider, PageRequest, PageResult
from steam_inventory.ingestion.http import HttpResponse


class WebApiInventoryClient(InventoryProvider):
    """Official Steam Web API inventory endpoint."""

    name: ClassVar[str] = "webapi"
    display_name: ClassVar[str] = "Steam Web API"
    page_size: ClassVar[Optional[int]] = None
    default_max_retries: ClassVar[int] = 0
    requires_success_flag: ClassVar[bool] = False

    URL: ClassVar[str] = (
        "https://api.steampowered.com/IEconService/GetInventoryItemsWithDescriptions/v1"
    )

    def build_request(self, cursor: Optional[str]) -> PageRequest:
        return PageRequest(
            url=self.URL,
            params={
                "key": self.request.api_key,
                "appid": self.request.app_id,
                "contextid": self.request.context_id,
                "steamid": self.steam_id64,
                "language": self.request.language,
                "start_assetid": cursor,
                "get_descriptions": True,
            },
        )

    def unwrap(self, body: Any) -> Any:
        if isinstance(body, dict):
            return body.get("response")
        return None

    def classify_error(self, response: HttpResponse) -> PageResult:
        if response.status_code == 403:
            return PageResult.failed(InvalidCredentialError(provider=self.name))
        return self._fail(response)
