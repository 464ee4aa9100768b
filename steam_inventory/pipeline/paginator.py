"""
Shared pagination loop: fetch → classify → retry / accumulate → next page.

The loop depends only on ``InventoryProvider.fetch_page(cursor)``; everything
provider-specific has already been folded into the ``PageResult`` it returns.

State per fetch (all created in ``run()`` and discarded when it returns)::

    RetryState       cursor + remaining retries for that cursor
    DescriptionIndex classid/instanceid → description
    pos              next position number (only kept records consume one)
    inventory        kept non-currency items
    currency         kept currency items

Transitions:
  TRANSIENT + budget left   → sleep per RetryPolicy, same cursor again
  TRANSIENT + budget spent  → treat the page as its ``on_exhausted`` result
  FAILED                    → raise the page's error
  EMPTY                     → return an empty result (count 0)
  SUCCESS + more_items      → accumulate, advance cursor, reset budget
  SUCCESS                   → accumulate and return

One request is in flight at a time; there is no prefetching.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from steam_inventory.errors import FetchCancelledError, MalformedResponseError
from steam_inventory.ingestion.base import InventoryProvider, PageResult, PageStatus
from steam_inventory.ingestion.descriptions import DescriptionIndex
from steam_inventory.ingestion.normalizer import normalize_item
from steam_inventory.models.item import CanonicalItem
from steam_inventory.pipeline.retry import RetryPolicy, RetryState

logger = logging.getLogger(__name__)


# ── Result / control types ────────────────────────────────────────────────────

@dataclass
class InventoryResult:
    """Everything a successful fetch produces.

    Attributes:
        inventory:   Kept item stacks, in fetch order.
        currency:    Kept currency stacks, in fetch order.
        total_count: Provider-reported inventory size, or the number of raw
                     assets seen when the provider does not report one.
        pages:       Pages consumed.
    """

    inventory: list[CanonicalItem] = field(default_factory=list)
    currency: list[CanonicalItem] = field(default_factory=list)
    total_count: int = 0
    pages: int = 0


class CancellationToken:
    """Lets a caller abandon a fetch from another thread.

    The paginator checks the token before every request and while waiting
    between retries; a cancelled fetch raises ``FetchCancelledError`` and
    sends nothing further.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns ``True`` if cancelled meanwhile."""
        return self._event.wait(seconds)


# ── Paginator ─────────────────────────────────────────────────────────────────

class Paginator:
    """Drive one provider through every page of one inventory.

    Args:
        provider: Adapter bound to the target identity/app/context.
        policy: Retry policy for this provider.
        tradable_only: Keep only assets whose description is tradable.
        cancel_token: Optional token the caller can cancel.
        sleep: Sleep function used between retries when no token is given
            (injectable for tests).
    """

    def __init__(
        self,
        provider: InventoryProvider,
        policy: RetryPolicy,
        *,
        tradable_only: bool = False,
        cancel_token: Optional[CancellationToken] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.provider = provider
        self.policy = policy
        self.tradable_only = tradable_only
        self.cancel_token = cancel_token
        self._sleep = sleep

    def run(self) -> InventoryResult:
        """Fetch every page and return the accumulated result.

        Raises:
            InventoryError: The first terminal failure (or the escalated
                transient failure once the retry budget is spent).
        """
        state = RetryState.start(self.policy)
        index = DescriptionIndex()
        result = InventoryResult()
        pos = 1
        raw_seen = 0

        while True:
            self._check_cancelled()
            page = self.provider.fetch_page(state.cursor)

            if page.status is PageStatus.TRANSIENT:
                if state.retries_left > 0:
                    attempt = state.consume_retry()
                    delay = self.policy.delay_for(attempt)
                    logger.warning(
                        "%s: %s; retry %d/%d in %.2fs (cursor=%s)",
                        self.provider.name, page.error, attempt,
                        self.policy.max_retries, delay, state.cursor,
                    )
                    self._pause(delay)
                    continue
                logger.warning(
                    "%s: retry budget exhausted after %d retries (cursor=%s)",
                    self.provider.name, state.attempt, state.cursor,
                )
                page = page.on_exhausted or PageResult.failed(page.error)

            if page.status is PageStatus.FAILED:
                raise page.error
            if page.status is PageStatus.EMPTY:
                logger.info("%s: inventory is empty", self.provider.name)
                return InventoryResult(pages=state.pages + 1)

            pos = self._accumulate(page, index, result, pos)
            raw_seen += len(page.assets)
            logger.debug(
                "%s: page %d | assets=%d | kept=%d | more_items=%s",
                self.provider.name, state.pages + 1, len(page.assets),
                len(result.inventory) + len(result.currency), page.more_items,
            )

            if page.more_items:
                cursor = page.last_assetid or self._last_assetid(page)
                if not cursor:
                    raise MalformedResponseError(
                        "Response reports more items but no cursor to continue from",
                        provider=self.provider.name,
                    )
                state.advance(cursor, self.policy)
                continue

            result.pages = state.pages + 1
            result.total_count = page.total_count if page.total_count is not None else raw_seen
            return result

    # ── Internals ──────────────────────────────────────────────────────────────

    def _accumulate(
        self,
        page: PageResult,
        index: DescriptionIndex,
        result: InventoryResult,
        pos: int,
    ) -> int:
        context_id = self.provider.request.context_id
        for asset in page.assets:
            try:
                description = index.resolve(
                    page.descriptions, asset.get("classid"), asset.get("instanceid")
                )
                if self.tradable_only and not (description and description.get("tradable")):
                    continue
                item = normalize_item(asset, description, context_id, pos=pos)
            except (ValueError, TypeError, AttributeError) as exc:
                raise MalformedResponseError(
                    f"Unusable asset in response: {exc}", provider=self.provider.name
                ) from exc
            pos += 1
            (result.currency if item.is_currency else result.inventory).append(item)
        return pos

    @staticmethod
    def _last_assetid(page: PageResult) -> Optional[str]:
        if not page.assets:
            return None
        last = page.assets[-1]
        value = last.get("assetid") or last.get("id") or last.get("currencyid")
        return str(value) if value is not None else None

    def _check_cancelled(self) -> None:
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise FetchCancelledError(provider=self.provider.name)

    def _pause(self, delay: float) -> None:
        if delay <= 0.0:
            return
        if self.cancel_token is not None:
            if self.cancel_token.wait(delay):
                raise FetchCancelledError(provider=self.provider.name)
            return
        self._sleep(delay)
