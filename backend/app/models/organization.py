"""Organization ORM - a company or group record.

Invariants:
    - is_active defaults to True; website is optional
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.standard_record import StandardRecordMixin


class Organization(StandardRecordMixin, Base):
    __tablename__ = "organizations"

    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
