"""
Harvester App - Sequential Solana Block Fetcher

Responsibilities:
- Read the current slot from the JSON-RPC endpoint (getSlot)
- Fetch blocks slot by slot from there (getBlock)
- Retry slots whose block is not produced yet (-32004) after a fixed delay
- Report and step over slots the cluster skipped (-32007)
- Log transaction count and latency for every fetched block

Termination:
- Normal: the endpoint returns no block data, or a block without transactions
- Failure: transport or decode errors, or a getSlot error
"""
