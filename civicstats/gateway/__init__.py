"""
Source gateway for NYC Open Data.

Responsibilities:
- Describe the remote SODA resources each domain reads from.
- Issue limited, ordered queries against the Socrata API.
- Hand back loosely-typed string records, or fail loudly so callers can
  substitute an empty result.
"""
