"""
Forum Data Access Layer

Client-side data access for course forums served by a remote web service:
1. Fetches forums, discussions and posts (with paginated aggregation)
2. Creates discussions and replies
3. Caches responses by logical query identity
4. Keeps the cache coherent through cascading invalidation
"""

__version__ = "0.1.0"
