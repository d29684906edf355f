"""
Cache tiers for computed aggregates.

Responsibilities:
- Persist one snapshot per category until it is explicitly cleared.
- Hold cheaper derived views in a process-wide TTL cache.
- Share one TTL core with the per-client cache used by dashboard clients.
"""
