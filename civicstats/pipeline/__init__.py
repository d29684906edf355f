"""
Read-through orchestration of the ingestion, aggregation and cache tiers.

Responsibilities:
- Map each category to the datasets it needs and the engine that aggregates them.
- Serve snapshots when present; otherwise fan out fetches, aggregate and store.
- Serve lighter derived views from the process cache.
"""
