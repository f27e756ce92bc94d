"""Infrastructure Layer — database access and cross-cutting concerns.

Invariants:
    - Only this layer talks to SQLAlchemy sessions
    - Storage errors are interpreted here and nowhere else

Design Decisions:
    - Repository returns Outcome variants; HTTP semantics stay in api/
"""
