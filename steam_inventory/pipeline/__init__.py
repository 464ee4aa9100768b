"""
Fetch pipeline: retry policy, pagination loop, and orchestration.

Modules
-------
retry         RetryPolicy (configured) and RetryState (per fetch)
paginator     Paginator loop, InventoryResult, CancellationToken
orchestrator  InventoryFetcher: validation, provider selection, callback contract
"""
