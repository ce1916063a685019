"""Services Layer: external call facade and person enrichment.

Invariants:
    - Services never return raw transport exceptions to the API layer
"""
