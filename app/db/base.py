"""
Declarative base for all ORM models.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class every SQLAlchemy model inherits from."""
    pass
