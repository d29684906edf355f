"""
Field normalization for loosely-typed government records.

Responsibilities:
- Map ragged categorical values (boroughs, severities, grades, ...) onto
  closed enumerations with an explicit Unknown/Other bucket.
- Parse numeric and date strings without ever raising.
- Resolve school DBNs and taxi zone ids to boroughs.
"""
