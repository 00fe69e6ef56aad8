"""
FastAPI dependencies for database access.

Provides:
- get_db: request-scoped database session
- get_queries: the Queries persistence collaborator bound to that session
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from setlist.db.queries import Queries
from setlist.db.session import get_db as _get_db


# PUBLIC_INTERFACE
def get_db() -> Generator[Session, None, None]:
    """Yield a database session for the request lifecycle."""
    yield from _get_db()


# PUBLIC_INTERFACE
def get_queries(db: Session = Depends(get_db)) -> Queries:
    """Wrap the request session in the named-query collaborator."""
    return Queries(db)
