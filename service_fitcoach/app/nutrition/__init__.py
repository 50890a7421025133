"""
Nutrition-database integration.

The upstream API accepts two authentication schemes:
- modern: OAuth2 client-credentials bearer tokens, cached in memory
- legacy: OAuth1-style HMAC-SHA1 signed requests

The orchestrator picks one per call from configuration and, in automatic
mode, falls back from modern to legacy on any failure.
"""
