"""Services Layer — stateful components around the pure core.

Invariants:
    - Each service owns at most one process-wide map (the limiter's lives in its `limits` storage)
    - Limits and clocks are constructor arguments (no settings lookups inside)

Design Decisions:
    - One service per concern: rate limiting, artifact cache, processors, state cookie
"""
