"""Infrastructure Layer — third-party adapters and cross-cutting concerns.

Invariants:
    - External library failures mapped to core error values (never leaked raw)

Design Decisions:
    - Thin wrappers over raw libraries (ADR: single responsibility)
"""
