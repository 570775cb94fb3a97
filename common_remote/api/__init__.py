"""Per-fetcher cached resources.

Each module in this package owns:
- the response cache slot (CacheKey) for one fetcher
- where the payload comes from (local bundled file and/or provider capability)
- how the payload is normalized before it is cached
"""
