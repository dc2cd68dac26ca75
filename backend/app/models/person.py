"""Person ORM - a contact record with an age and an email address."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.standard_record import StandardRecordMixin


class Person(StandardRecordMixin, Base):
    __tablename__ = "people"

    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
