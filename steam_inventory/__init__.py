"""
steam-inventory: fetch, paginate and normalize Steam inventories.

Public entry points::

    from steam_inventory import SteamInventory, InventoryFetcher, fetch_inventory
"""

from steam_inventory.client import SteamInventory
from steam_inventory.errors import (
    FetchCancelledError,
    InvalidCredentialError,
    InvalidInputError,
    InventoryError,
    MalformedResponseError,
    PrivateProfileError,
    ProviderError,
    TransientProviderError,
    TransportError,
)
from steam_inventory.identity import SteamID
from steam_inventory.models.item import CanonicalItem, ItemTag
from steam_inventory.pipeline.orchestrator import InventoryFetcher, fetch_inventory
from steam_inventory.pipeline.paginator import CancellationToken, InventoryResult

__version__ = "0.1.0"

__all__ = [
    "CanonicalItem",
    "CancellationToken",
    "FetchCancelledError",
    "InvalidCredentialError",
    "InvalidInputError",
    "InventoryError",
    "InventoryFetcher",
    "InventoryResult",
    "ItemTag",
    "MalformedResponseError",
    "PrivateProfileError",
    "ProviderError",
    "SteamID",
    "SteamInventory",
    "TransientProviderError",
    "TransportError",
    "fetch_inventory",
]
