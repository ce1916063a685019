"""Pydantic Schemas: request/response validation for API endpoints and external payloads.

Invariants:
    - Schemas validate at system boundary (user input, external API responses)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
