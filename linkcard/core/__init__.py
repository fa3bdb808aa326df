"""Core Layer — pure domain logic, no IO, no async, no framework.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - All functions are pure and deterministic (time is injected)
    - Fallible functions return Ok/Err; nothing raises across the boundary

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
