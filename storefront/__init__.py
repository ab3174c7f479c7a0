"""
Sacy's Kitchen storefront.

Server-side API (FastAPI) backed by a Redis key-value store and an external
auth provider, plus the client-side checkout and admin monitoring flows.
"""
__version__ = "1.0.0"
