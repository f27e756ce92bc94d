"""Database Metadata — SQLAlchemy declarative Base shared by models and migrations.

Invariants:
    - Single Base per process; the users table is registered on import of models/

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
