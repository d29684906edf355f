"""
Aggregation engines, one module per data domain.

Responsibilities:
- Turn raw SODA records into JSON-ready statistics: totals, percentage
  breakdowns, zero-filled yearly trends, top-N rankings and cross-dataset ratios.
- Stay pure and deterministic: the same records (and ``today``) always give
  the same result.
"""
