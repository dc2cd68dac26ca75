"""Pydantic Schemas - request validation for record endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - Table-specific columns pass through as extra fields; the engine decides
      which of them are writable

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - No response schemas: row shape depends on the table and the select parameter
"""
