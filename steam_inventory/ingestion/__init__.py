"""
Provider adapters and the per-page building blocks they feed.

Modules
-------
http                HttpTransport over httpx: shared cookies, no raise on error status
base                InventoryProvider ABC, FetchRequest, PageResult
community_client    steamcommunity.com inventory endpoint
webapi_client       Steam Web API IEconService endpoint
steamapis_client    api.steamapis.com mirror
steamsupply_client  steam.supply mirror
rapidapi_client     RapidAPI steamdata1 mirror
descriptions        DescriptionIndex (classid/instanceid join)
normalizer          asset + description -> CanonicalItem
"""
