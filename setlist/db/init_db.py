"""
Utility to create all tables from SQLAlchemy metadata.

Note: In production use proper migration tooling (e.g., Alembic).
"""

from typing import Optional

from sqlalchemy.engine import Engine

from setlist.db.models import Base


# PUBLIC_INTERFACE
def create_all_tables(bind: Optional[Engine] = None) -> None:
    """Create all tables if they do not exist yet (existing tables are left alone)."""
    if bind is None:
        from setlist.db.session import engine as bind
    Base.metadata.create_all(bind=bind)
