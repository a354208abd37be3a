"""
SQLAlchemy declarative base.

All ORM models inherit from ``Base`` so alembic sees one metadata object.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
