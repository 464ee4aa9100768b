"""
Steam Community inventory endpoint — the primary provider.

API:   https://steamcommunity.com/inventory/{steamid64}/{appid}/{contextid}
Auth:  none (session cookies are sent when present)

Query parameters::

    l=english  count=2000  start_assetid=<cursor>

Failure classification:
  403 with empty body  → PrivateProfileError.  When the target is the
                         session's own account this also means the login
                         cookies have expired, so session listeners fire.
  500 with body.error  → ProviderError.  Steam formats these as
                         ``"<message> (<eresult>)"``; the EResult is split
                         off onto ``ProviderError.eresult``.
  anything else        → ProviderError("HTTP error <code>").

No transient retries: Steam does not document any retryable failure here.
"""

from __future__ import annotations

import logging
import re
from typing import ClassVar, Optional

from steam_inventory.errors import PrivateProfileError, ProviderError
from steam_inventory.ingestion.base import InventoryProvider, PageRequest, PageResult
from steam_inventory.ingestion.http import HttpResponse

logger = logging.getLogger(__name__)

_ERESULT_RE = re.compile(r"^(.+) \((\d+)\)$")


class CommunityInventoryClient(InventoryProvider):
    """steamcommunity.com inventory JSON endpoint."""

    name: ClassVar[str] = "community"
    display_name: ClassVar[str] = "Steam Community"
    page_size: ClassVar[Optional[int]] = 2000
    default_max_retries: ClassVar[int] = 0
    requires_api_key: ClassVar[bool] = False

    BASE_URL: ClassVar[str] = "https://steamcommunity.com"

    def build_request(self, cursor: Optional[str]) -> PageRequest:
        sid = self.steam_id64
        return PageRequest(
            url=f"{self.BASE_URL}/inventory/{sid}/{self.request.app_id}/{self.request.context_id}",
            params={
                "l": self.request.language,
                "count": self.page_size,
                "start_assetid": cursor,
            },
            headers={"Referer": f"{self.BASE_URL}/profiles/{sid}/inventory"},
        )

    def classify_error(self, response: HttpResponse) -> PageResult:
        body = response.body

        if response.status_code == 403 and not response.text.strip():
            error = PrivateProfileError(provider=self.name)
            self._maybe_notify_session_expired(response)
            return PageResult.failed(error)

        if response.status_code == 500 and isinstance(body, dict) and body.get("error"):
            message = str(body["error"])
            match = _ERESULT_RE.match(message)
            if match:
                return PageResult.failed(
                    ProviderError(
                        match.group(1),
                        provider=self.name,
                        status_code=500,
                        eresult=int(match.group(2)),
                    )
                )
            return self._fail(response, message)

        return self._fail(response)

    def _maybe_notify_session_expired(self, response: HttpResponse) -> None:
        session_id = getattr(self.transport, "steam_id", None)
        if self.on_session_expired is None or session_id is None:
            return
        if session_id.get_steam_id64() != self.steam_id64:
            return
        logger.warning("community: own inventory returned 403; session cookies have expired")
        self.on_session_expired(
            ProviderError(response.error_message, provider=self.name, status_code=response.status_code)
        )
