"""Infrastructure Layer - database access, storage adapter, logging.

Invariants:
    - SQLAlchemy is imported only here and in models/ and db/
    - All SQLAlchemy exceptions mapped to DatabaseError before leaving this layer

Design Decisions:
    - StorageAdapter implementation lives here; core/ only sees the Protocol
"""
