"""
Asset + description → ``CanonicalItem`` normalization.

Responsibilities:
  - Pick identity (``assetid`` vs ``currencyid``) from the raw asset.
  - Copy an explicit allow-list of fields from the asset and its description.
  - Coerce flags, restrictions and list fields to stable Python types.
  - Derive ``market_fee_app`` (Steam community items) and ``cache_expiration``
    (CS2 trade holds).

Non-responsibilities:
  - Deciding which assets are kept (tradable filtering lives in the paginator).
  - Assigning positions (the paginator passes ``pos`` in).

Raw inputs are never mutated.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from steam_inventory.ingestion.descriptions import description_key
from steam_inventory.models.item import CanonicalItem, ItemTag

logger = logging.getLogger(__name__)

# Steam Community items (trading cards, backgrounds...) live in app 753 ctx 6
# and prefix their market hash name with the owning app id: "730-Foo Card".
STEAM_COMMUNITY_APP = (753, "6")
# CS2 announces trade holds via an owner description line.
CS2_APP = (730, "2")

TRADABLE_AFTER_PREFIX = "Tradable After "
_MARKET_FEE_APP_RE = re.compile(r"^(\d+)-")
_TRADABLE_AFTER_FORMATS = (
    "%b %d %Y %H:%M:%S %Z",
    "%b %d %Y %H:%M:%S",
    "%B %d %Y %H:%M:%S %Z",
    "%b %d %Y",
)

# Fields copied verbatim when present.
ASSET_PASSTHROUGH = ("appid", "contextid", "classid", "instanceid", "amount")
DESCRIPTION_PASSTHROUGH = (
    "appid",
    "classid",
    "instanceid",
    "name",
    "market_name",
    "market_hash_name",
    "name_color",
    "background_color",
    "type",
    "icon_url",
    "icon_url_large",
    "owner_descriptions",
    "owner_actions",
    "market_actions",
    "app_data",
    "item_expiration",
    "sealed",
)
# Fields normalized below; taken from the description, else the asset.
NORMALIZED_FIELDS = (
    "tradable",
    "marketable",
    "commodity",
    "market_tradable_restriction",
    "market_marketable_restriction",
    "fraudwarnings",
    "descriptions",
    "actions",
    "tags",
    "owner",
)


def is_currency_asset(asset: Mapping[str, Any]) -> bool:
    """A raw asset is a currency stack if it is flagged as one or has a ``currencyid``."""
    return bool(asset.get("is_currency") or asset.get("currency")) or asset.get("currencyid") is not None


def _to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(str(value).strip())


def _to_list(value: Any) -> list:
    if not value:
        return []
    return list(value)


def _optional_list(value: Any) -> Optional[list]:
    # Steam sends "" for an absent list.
    if value is None or value == "":
        return None
    return list(value)


def _normalize_tag(tag: Any) -> ItemTag:
    if not isinstance(tag, Mapping):
        raise TypeError(f"Tag is not an object: {tag!r}")
    return ItemTag(
        internal_name=tag.get("internal_name"),
        name=tag.get("localized_tag_name") or tag.get("name"),
        category=tag.get("category"),
        color=tag.get("color") or "",
        category_name=tag.get("localized_category_name") or tag.get("category_name"),
    )


def parse_tradable_after(value: str) -> Optional[str]:
    """Parse ``"Tradable After Jun 20, 2024 (7:00:00) GMT"`` into an ISO-8601 UTC string.

    Returns ``None`` when the text is not in a recognised format.
    """
    if not value.startswith(TRADABLE_AFTER_PREFIX):
        return None
    text = re.sub(r"[,()]", "", value[len(TRADABLE_AFTER_PREFIX):])
    text = " ".join(text.split())
    for fmt in _TRADABLE_AFTER_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.strftime("%Y-%m-%dT%H:%M:%S.000Z")
    logger.debug("Unrecognised trade hold text: %r", value)
    return None


def _derive_cache_expiration(
    appid: Optional[int],
    contextid: str,
    owner_descriptions: Optional[list[dict[str, Any]]],
    item_expiration: Optional[str],
) -> Optional[str]:
    if item_expiration:
        return item_expiration
    if (appid, contextid) != CS2_APP or not owner_descriptions:
        return None
    for line in owner_descriptions:
        value = line.get("value") if isinstance(line, Mapping) else None
        if isinstance(value, str) and value.startswith(TRADABLE_AFTER_PREFIX):
            return parse_tradable_after(value)
    return None


def _derive_market_fee_app(
    appid: Optional[int], contextid: str, market_hash_name: Optional[str]
) -> Optional[int]:
    if (appid, contextid) != STEAM_COMMUNITY_APP or not market_hash_name:
        return None
    match = _MARKET_FEE_APP_RE.match(market_hash_name)
    return int(match.group(1)) if match else None


def normalize_item(
    asset: Mapping[str, Any],
    description: Optional[Mapping[str, Any]],
    context_id: Any,
    pos: Optional[int] = None,
) -> CanonicalItem:
    """Build a ``CanonicalItem`` from one raw asset and its description.

    Args:
        asset: Raw asset dict from a provider page.
        description: Matching description dict, or ``None`` when the provider
            sent no description for this asset.  A mapping keyed by
            ``"<classid>_<instanceid>"`` is also accepted.
        context_id: Context id the caller asked for; used when the asset does
            not carry its own ``contextid``.
        pos: Position to record on the item.

    Raises:
        ValueError: If the asset has no usable id or amount (pydantic's
            ``ValidationError`` is a ``ValueError`` subclass).
    """
    currency = is_currency_asset(asset)
    if currency:
        identity = asset.get("id") or asset.get("currencyid")
    else:
        identity = asset.get("id") or asset.get("assetid")

    if description is not None:
        nested_key = description_key(asset.get("classid"), asset.get("instanceid"))
        nested = description.get(nested_key)
        if isinstance(nested, Mapping):
            description = nested

    merged: dict[str, Any] = {k: asset[k] for k in ASSET_PASSTHROUGH if k in asset}
    for field in NORMALIZED_FIELDS:
        if field in asset:
            merged[field] = asset[field]
    if description:
        for field in DESCRIPTION_PASSTHROUGH + NORMALIZED_FIELDS:
            if field in description:
                merged[field] = description[field]

    appid = merged.get("appid")
    appid = _to_int(appid) if appid not in (None, "") else None
    contextid = str(merged.get("contextid") or context_id)
    classid = merged.get("classid")

    owner = merged.get("owner")
    if not isinstance(owner, dict) or not owner:
        owner = None

    actions = merged.get("actions")
    actions = [] if actions == "" or actions is None else list(actions)

    ident = str(identity) if identity not in (None, "") else ""
    market_hash_name = merged.get("market_hash_name")
    owner_descriptions = _optional_list(merged.get("owner_descriptions"))
    item_expiration = merged.get("item_expiration")

    if "amount" not in merged:
        raise ValueError(f"Asset {ident or '?'} has no amount.")

    return CanonicalItem(
        id=ident,
        assetid=None if currency else ident,
        currencyid=ident if currency else None,
        is_currency=currency,
        appid=appid,
        contextid=contextid,
        classid=str(classid) if classid is not None else None,
        instanceid=str(merged.get("instanceid") or "0"),
        amount=_to_int(merged["amount"]),
        pos=pos,
        name=merged.get("name"),
        market_name=merged.get("market_name"),
        market_hash_name=market_hash_name,
        name_color=merged.get("name_color"),
        background_color=merged.get("background_color"),
        type=merged.get("type"),
        icon_url=merged.get("icon_url"),
        icon_url_large=merged.get("icon_url_large"),
        owner_descriptions=owner_descriptions,
        owner_actions=_optional_list(merged.get("owner_actions")),
        market_actions=_optional_list(merged.get("market_actions")),
        app_data=merged.get("app_data"),
        item_expiration=item_expiration,
        sealed=merged.get("sealed"),
        tradable=bool(merged.get("tradable")),
        marketable=bool(merged.get("marketable")),
        commodity=bool(merged.get("commodity")),
        market_tradable_restriction=_to_int(merged.get("market_tradable_restriction")),
        market_marketable_restriction=_to_int(merged.get("market_marketable_restriction")),
        fraudwarnings=_to_list(merged.get("fraudwarnings")),
        descriptions=_to_list(merged.get("descriptions")),
        actions=actions,
        tags=[_normalize_tag(t) for t in merged.get("tags") or []],
        owner=owner,
        market_fee_app=_derive_market_fee_app(appid, contextid, market_hash_name),
        cache_expiration=_derive_cache_expiration(
            appid, contextid, owner_descriptions, item_expiration
        ),
    )
