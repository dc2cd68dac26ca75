"""ORM Models - SQLAlchemy declarative models for every registered table.

Invariants:
    - All models inherit from Base (db/base.py) and StandardRecordMixin
    - REGISTERED_MODELS lists what the engine registry exposes, in route order

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/alembic
"""

from app.models.person import Person
from app.models.organization import Organization

REGISTERED_MODELS = (Person, Organization)
