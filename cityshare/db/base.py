"""
SQLAlchemy declarative base and metadata.
Single place for table definitions and migrations.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models. Enables Alembic migrations."""

    pass


# Largest value the INTEGER columns (ids, prices, positions) can hold
INT32_MAX = 2**31 - 1

# Column length shared by every stored URL
URL_MAX_LENGTH = 1024
