"""Database Declarations - SQLAlchemy Base shared by models, migrations and tests.

Invariants:
    - Engine and sessions live in infrastructure/database.py, not here
"""
