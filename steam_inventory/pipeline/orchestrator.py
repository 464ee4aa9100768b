"""
Inventory fetch orchestration — the public call-in / call-out contract.

``InventoryFetcher`` validates the caller's arguments, picks the provider
adapter, wires it to a ``Paginator`` and reports the outcome.  Two entry
points share one pipeline:

  ``fetch(...) -> InventoryResult``   raises ``InventoryError`` on failure.
  ``fetch_inventory(..., callback)``  never raises ``InventoryError``; calls
                                      ``callback`` exactly once with either
                                      ``(error, None, None, None)`` or
                                      ``(None, inventory, currency, total)``.

Language may be omitted in the callback form: when the ``language`` position
holds a callable it is taken as the callback and the language falls back to
``"english"``::

    fetcher.fetch_inventory("community", None, "76561197960287930", 730, 2, True, on_done)

Concurrency: each call builds its own adapter, paginator, description index
and accumulators; only the ``HttpTransport`` (cookie jar + connection pool) is
shared, so independent fetches may run from different threads.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from steam_inventory.config import AppConfig
from steam_inventory.errors import InvalidInputError, InventoryError
from steam_inventory.identity import SteamID, parse_steam_id
from steam_inventory.ingestion.base import FetchRequest, InventoryProvider
from steam_inventory.ingestion.community_client import CommunityInventoryClient
from steam_inventory.ingestion.http import HttpTransport
from steam_inventory.ingestion.rapidapi_client import RapidApiInventoryClient
from steam_inventory.ingestion.steamapis_client import SteamApisInventoryClient
from steam_inventory.ingestion.steamsupply_client import SteamSupplyInventoryClient
from steam_inventory.ingestion.webapi_client import WebApiInventoryClient
from steam_inventory.pipeline.paginator import CancellationToken, InventoryResult, Paginator
from steam_inventory.pipeline.retry import RetryPolicy

logger = logging.getLogger(__name__)

InventoryCallback = Callable[..., Any]
SessionExpiredListener = Callable[[InventoryError], Any]

PROVIDERS: dict[str, type[InventoryProvider]] = {
    cls.name: cls
    for cls in (
        CommunityInventoryClient,
        WebApiInventoryClient,
        SteamApisInventoryClient,
        SteamSupplyInventoryClient,
        RapidApiInventoryClient,
    )
}


def get_provider_class(name: str) -> type[InventoryProvider]:
    """Look up an adapter class by provider name.

    Raises:
        InvalidInputError: If ``name`` is not a known provider.
    """
    try:
        return PROVIDERS[name]
    except KeyError:
        raise InvalidInputError(
            f"Unknown provider '{name}'. Must be one of {sorted(PROVIDERS)}."
        ) from None


def resolve_policy(config: AppConfig, provider_cls: type[InventoryProvider]) -> RetryPolicy:
    """Configured retry policy, or the adapter's default budget."""
    policy = config.retry_policy(provider_cls.name)
    if policy is not None:
        return policy
    return RetryPolicy(max_retries=provider_cls.default_max_retries)


def _coerce_id(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid {label}: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid {label}: {value!r}") from None
    if number < 0:
        raise InvalidInputError(f"Invalid {label}: {value!r}")
    return number


class InventoryFetcher:
    """Runs inventory fetches against any provider over one shared transport.

    Args:
        transport: Shared HTTP transport. Built from ``config.http`` if omitted.
        config: Application config (retry policies, default language).
        sleep: Sleep function for retry delays (tests pass a recorder).
    """

    def __init__(
        self,
        transport: Optional[HttpTransport] = None,
        config: Optional[AppConfig] = None,
        *,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.transport = transport or HttpTransport(self.config.http)
        self._sleep = sleep
        self._session_listeners: list[SessionExpiredListener] = []

    # ── Session notifications ──────────────────────────────────────────────────

    def add_session_expired_listener(self, listener: SessionExpiredListener) -> None:
        self._session_listeners.append(listener)

    def _notify_session_expired(self, error: InventoryError) -> None:
        for listener in list(self._session_listeners):
            listener(error)

    # ── Wiring ─────────────────────────────────────────────────────────────────

    def policy_for(self, provider_cls: type[InventoryProvider]) -> RetryPolicy:
        return resolve_policy(self.config, provider_cls)

    def build_provider(
        self,
        provider: str,
        credentials: Optional[str],
        target: Union[SteamID, str, int, None],
        app_id: Any,
        context_id: Any,
        language: Optional[str] = None,
    ) -> InventoryProvider:
        """Validate arguments and construct the adapter.

        Raises:
            InvalidInputError: Unknown provider, missing/unparsable SteamID,
                bad app/context id, or a missing API key.
        """
        provider_cls = get_provider_class(provider)
        if target is None or target == "":
            raise InvalidInputError("The user's SteamID is invalid or missing.", provider=provider)
        try:
            steam_id = parse_steam_id(target)
        except ValueError as exc:
            raise InvalidInputError(
                f"The user's SteamID is invalid or missing. ({exc})", provider=provider
            ) from exc

        request = FetchRequest(
            steam_id=steam_id,
            app_id=_coerce_id(app_id, "app id"),
            context_id=_coerce_id(context_id, "context id"),
            language=language or self.config.default_language,
            api_key=credentials or None,
        )
        return provider_cls(
            self.transport, request, on_session_expired=self._notify_session_expired
        )

    # ── Entry points ───────────────────────────────────────────────────────────

    def fetch(
        self,
        provider: str,
        credentials: Optional[str],
        target: Union[SteamID, str, int, None],
        app_id: Any,
        context_id: Any,
        tradable_only: bool = False,
        language: Optional[str] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> InventoryResult:
        """Fetch a whole inventory and return it.

        Raises:
            InventoryError: Any failure; see ``steam_inventory.errors``.
        """
        adapter = self.build_provider(provider, credentials, target, app_id, context_id, language)
        paginator_kwargs: dict[str, Any] = {}
        if self._sleep is not None:
            paginator_kwargs["sleep"] = self._sleep
        paginator = Paginator(
            adapter,
            self.policy_for(type(adapter)),
            tradable_only=tradable_only,
            cancel_token=cancel_token,
            **paginator_kwargs,
        )
        logger.debug(
            "%s: fetching steamid=%s app=%s ctx=%s tradable_only=%s",
            adapter.name, adapter.steam_id64, adapter.request.app_id,
            adapter.request.context_id, tradable_only,
        )
        result = paginator.run()
        logger.info(
            "%s: steamid=%s app=%s ctx=%s | items=%d | currency=%d | total=%d | pages=%d",
            adapter.name, adapter.steam_id64, adapter.request.app_id,
            adapter.request.context_id, len(result.inventory), len(result.currency),
            result.total_count, result.pages,
        )
        return result

    def fetch_inventory(
        self,
        provider: str,
        credentials: Optional[str],
        target: Union[SteamID, str, int, None],
        app_id: Any,
        context_id: Any,
        tradable_only: bool,
        language: Union[str, InventoryCallback, None] = "english",
        callback: Optional[InventoryCallback] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Fetch a whole inventory and report it through ``callback``.

        The callback is invoked exactly once: ``callback(error, None, None,
        None)`` on failure, ``callback(None, inventory, currency, total_count)``
        on success.

        Raises:
            TypeError: If no callback was supplied.
        """
        if callable(language):
            callback, language = language, "english"
        if callback is None:
            raise TypeError("fetch_inventory() requires a callback")

        try:
            result = self.fetch(
                provider,
                credentials,
                target,
                app_id,
                context_id,
                tradable_only,
                language,
                cancel_token=cancel_token,
            )
        except InventoryError as exc:
            logger.info("%s: fetch failed: %s (%s)", provider, exc, type(exc).__name__)
            callback(exc, None, None, None)
            return
        callback(None, result.inventory, result.currency, result.total_count)


_default_fetcher: Optional[InventoryFetcher] = None


def fetch_inventory(
    provider: str,
    credentials: Optional[str],
    target: Union[SteamID, str, int, None],
    app_id: Any,
    context_id: Any,
    tradable_only: bool,
    language: Union[str, InventoryCallback, None] = "english",
    callback: Optional[InventoryCallback] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
) -> None:
    """``InventoryFetcher.fetch_inventory`` on a lazily created module-wide fetcher."""
    global _default_fetcher
    if _default_fetcher is None:
        _default_fetcher = InventoryFetcher()
    _default_fetcher.fetch_inventory(
        provider,
        credentials,
        target,
        app_id,
        context_id,
        tradable_only,
        language,
        callback,
        cancel_token=cancel_token,
    )
