"""
Client-side access to the dashboard API.

Responsibilities:
- Keep a per-client copy of fetched overviews and views with a TTL
- Bypass that copy on an explicit refresh so the server recomputes
"""
