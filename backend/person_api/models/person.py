"""Person ORM: a person record enriched with the external gender estimate.

Invariants:
    - name and last_name are required; gender and probability may be unknown
    - count is the sample size the external estimate was based on
"""

from sqlalchemy import String, Integer, Float
from sqlalchemy.orm import Mapped, mapped_column

from person_api.db.base import Base


class Person(Base):
    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    last_name: Mapped[str] = mapped_column(String(200), nullable=False)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    probability: Mapped[float | None] = mapped_column(Float, nullable=True)
