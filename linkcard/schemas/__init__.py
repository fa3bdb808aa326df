"""Pydantic Schemas — structural validation for the cookie blob, renderer config and API payloads.

Invariants:
    - Schemas validate at system boundary (cookie blob, request bodies, renderer output)
    - Wire names are camelCase (alias_generator); Python attributes are snake_case
    - Domain types from core/ used for enum fields

Design Decisions:
    - Schemas hold shape and bounds only; cross-field rules (canonical URL, version)
      live in core/validation.py so they can return field errors instead of raising
"""
