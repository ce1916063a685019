"""Infrastructure Layer: outbound HTTP clients, persistence, and cross-cutting concerns.

Invariants:
    - Infrastructure depends on core/ types, never on services/ or api/
    - All external calls go through a named client with retry/timeout/capture

Design Decisions:
    - Pooled named clients over ad-hoc clients (ADR: connection reuse)
"""
