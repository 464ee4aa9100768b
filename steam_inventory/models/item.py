"""
Canonical inventory item model.

``CanonicalItem`` is the single shape every provider's assets are normalized
into (see ``steam_inventory.ingestion.normalizer``).  The field set is closed:
provider fields outside the normalizer's allow-list are dropped rather than
copied, so two items from different providers always expose the same
attributes.

Identity rules:
  - ``id`` is always a non-empty string.
  - Currency stacks carry ``currencyid`` (== ``id``) and no ``assetid``;
    item stacks carry ``assetid`` (== ``id``) and no ``currencyid``.

Items are frozen after construction.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

IMAGE_URL_BASE = "https://steamcommunity-a.akamaihd.net/economy/image/"


class ItemTag(BaseModel):
    """One normalized inventory tag (e.g. category "Rarity", name "Covert")."""

    model_config = ConfigDict(frozen=True)

    internal_name: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    color: str = ""
    category_name: Optional[str] = None


class CanonicalItem(BaseModel):
    """An asset stack merged with its description.

    Attributes:
        id: Asset id, or currency id for currency stacks.
        assetid: Set for item stacks only.
        currencyid: Set for currency stacks only.
        is_currency: ``True`` for currency stacks.
        appid: Owning app (e.g. 730 for CS2, 753 for Steam).
        contextid: Inventory context within the app.
        classid: First half of the description key.
        instanceid: Second half of the description key (``"0"`` if absent).
        amount: Stack size.
        pos: 1-based position among the records kept by the fetch, or ``None``.
        tradable: Whether the item can be traded.
        marketable: Whether the item can be listed on the Community Market.
        commodity: Whether the market uses buy orders for this item.
        market_tradable_restriction: Days untradable after a market purchase.
        market_marketable_restriction: Days unmarketable after a market purchase.
        fraudwarnings: Red warning lines shown under the item name.
        descriptions: Description lines shown under the item type.
        actions: Inspect/link actions.
        tags: Normalized inventory tags.
        owner: Owner block, or ``None`` (an empty provider object becomes ``None``).
        market_fee_app: App the market fee goes to (Steam trading cards etc.).
        cache_expiration: ISO-8601 time the item's trade hold ends, if known.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    id: str
    assetid: Optional[str] = None
    currencyid: Optional[str] = None
    is_currency: bool = False
    appid: Optional[int] = None
    contextid: str
    classid: Optional[str] = None
    instanceid: str = "0"
    amount: int
    pos: Optional[int] = None

    # Description passthrough
    name: Optional[str] = None
    market_name: Optional[str] = None
    market_hash_name: Optional[str] = None
    name_color: Optional[str] = None
    background_color: Optional[str] = None
    type: Optional[str] = None
    icon_url: Optional[str] = None
    icon_url_large: Optional[str] = None
    owner_descriptions: Optional[list[dict[str, Any]]] = None
    owner_actions: Optional[list[dict[str, Any]]] = None
    market_actions: Optional[list[dict[str, Any]]] = None
    app_data: Optional[Any] = None
    item_expiration: Optional[str] = None
    sealed: Optional[int] = None

    # Normalized
    tradable: bool = False
    marketable: bool = False
    commodity: bool = False
    market_tradable_restriction: int = 0
    market_marketable_restriction: int = 0
    fraudwarnings: list[str] = []
    descriptions: list[dict[str, Any]] = []
    actions: list[dict[str, Any]] = []
    tags: list[ItemTag] = []
    owner: Optional[dict[str, Any]] = None
    market_fee_app: Optional[int] = None
    cache_expiration: Optional[str] = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v:
            raise ValueError("Item id must be a non-empty string.")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Item amount must be non-negative, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_identity_role(self) -> "CanonicalItem":
        if self.is_currency:
            if self.currencyid != self.id or self.assetid is not None:
                raise ValueError("Currency items must carry currencyid == id and no assetid.")
        elif self.assetid != self.id or self.currencyid is not None:
            raise ValueError("Non-currency items must carry assetid == id and no currencyid.")
        return self

    # ── Helpers ────────────────────────────────────────────────────────────────

    def get_image_url(self) -> str:
        """URL of the item image; append a size such as ``"128x128"`` if needed."""
        return f"{IMAGE_URL_BASE}{self.icon_url}/"

    def get_large_image_url(self) -> str:
        if not self.icon_url_large:
            return self.get_image_url()
        return f"{IMAGE_URL_BASE}{self.icon_url_large}/"

    def get_tag(self, category: str) -> Optional[ItemTag]:
        """Return the first tag in ``category``, or ``None``."""
        for tag in self.tags:
            if tag.category == category:
                return tag
        return None
