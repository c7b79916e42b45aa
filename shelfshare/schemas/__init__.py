"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate shape at the system boundary (types, lengths, formats)
    - Domain bounds (rating range, date order, ownership) are enforced in core/,
      so they hold for non-HTTP callers too

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
