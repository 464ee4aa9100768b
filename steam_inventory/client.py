"""
``SteamInventory`` — session-style facade over ``InventoryFetcher``.

Owns one ``HttpTransport`` (cookie jar + connection pool) and one
``InventoryFetcher`` and exposes one callback-style method per provider.
Every method accepts ``language`` as optional: pass the callback in its place
and ``"english"`` is used.

Usage::

    inv = SteamInventory()
    inv.set_cookies(["steamLoginSecure=7656119...%7C%7C..."])
    inv.add_session_expired_listener(lambda err: relogin())

    def on_done(err, inventory, currency, total):
        ...

    inv.get_user_inventory_contents("76561197960287930", 730, 2, True, on_done)
    inv.get_user_inventory_steamapis(key, "76561197960287930", 730, 2, False, "german", on_done)
"""

from __future__ import annotations

from typing import Any, Optional, Union

from steam_inventory.config import AppConfig
from steam_inventory.identity import SteamID
from steam_inventory.ingestion.http import HttpTransport
from steam_inventory.pipeline.orchestrator import (
    InventoryCallback,
    InventoryFetcher,
    SessionExpiredListener,
)
from steam_inventory.pipeline.paginator import CancellationToken

Target = Union[SteamID, str, int, None]
Language = Union[str, InventoryCallback, None]


class SteamInventory:
    """One Steam web session able to fetch inventories from every provider.

    Args:
        config: Application config; ``AppConfig()`` defaults when omitted.
        transport: Pre-built transport (tests inject one).
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.transport = transport or HttpTransport(self.config.http)
        self.fetcher = InventoryFetcher(self.transport, self.config)

    # ── Session ────────────────────────────────────────────────────────────────

    @property
    def steam_id(self) -> Optional[SteamID]:
        """SteamID of the logged-in account, known once login cookies are set."""
        return self.transport.steam_id

    def set_cookies(self, cookies: list[str]) -> None:
        self.transport.set_cookies(cookies)

    def add_session_expired_listener(self, listener: SessionExpiredListener) -> None:
        self.fetcher.add_session_expired_listener(listener)

    def close(self) -> None:
        self.transport.close()

    # ── Provider entry points ──────────────────────────────────────────────────

    def _run(
        self,
        provider: str,
        credentials: Optional[str],
        user_id: Target,
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Language,
        callback: Optional[InventoryCallback],
        cancel_token: Optional[CancellationToken],
    ) -> None:
        self.fetcher.fetch_inventory(
            provider,
            credentials,
            user_id,
            app_id,
            context_id,
            tradable_only,
            language,
            callback,
            cancel_token=cancel_token,
        )

    def get_user_inventory_contents(
        self,
        user_id: Target,
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Language = "english",
        callback: Optional[InventoryCallback] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Fetch from the Steam Community inventory endpoint (no key needed)."""
        self._run("community", None, user_id, app_id, context_id,
                  tradable_only, language, callback, cancel_token)

    def get_inventory_items_with_descriptions(
        self,
        api_key: Optional[str],
        user_id: Target,
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Language = "english",
        callback: Optional[InventoryCallback] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Fetch through the Steam Web API (``IEconService``)."""
        self._run("webapi", api_key, user_id, app_id, context_id,
                  tradable_only, language, callback, cancel_token)

    def get_user_inventory_steamapis(
        self,
        api_key: Optional[str],
        user_id: Target,
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Language = "english",
        callback: Optional[InventoryCallback] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._run("steamapis", api_key, user_id, app_id, context_id,
                  tradable_only, language, callback, cancel_token)

    def get_user_inventory_steamsupply(
        self,
        api_key: Optional[str],
        user_id: Target,
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Language = "english",
        callback: Optional[InventoryCallback] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._run("steamsupply", api_key, user_id, app_id, context_id,
                  tradable_only, language, callback, cancel_token)

    def get_user_inventory_rapid(
        self,
        api_key: Optional[str],
        user_id: Target,
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Language = "english",
        callback: Optional[InventoryCallback] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._run("rapidapi", api_key, user_id, app_id, context_id,
                  tradable_only, language, callback, cancel_token)
