"""ORM Models: SQLAlchemy declarative models.

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from person_api.models.person import Person  # noqa: F401
