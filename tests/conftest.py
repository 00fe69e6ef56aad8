import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OBS_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "warning")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from setlist.api.deps import get_db
from setlist.api.main import app
from setlist.db.models import Band, Base, Genre, Show, ShowBand, Venue
from setlist.db.queries import Queries


def future(days=1, hours=0):
    return datetime.now(timezone.utc) + timedelta(days=days, hours=hours)


def past(days=1):
    return datetime.now(timezone.utc) - timedelta(days=days)


class Seeder:
    """Insert rows directly, committing each one."""

    def __init__(self, db):
        self.db = db
        self._n = 0

    def _next(self):
        self._n += 1
        return self._n

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def venue(self, name=None, slug=None, region="Downtown", **fields):
        n = self._next()
        name = name or f"Venue {n}"
        return self._save(Venue(name=name, slug=slug or f"venue-{n}", region=region, **fields))

    def genre(self, name, slug=None, description=None):
        return self._save(Genre(name=name, slug=slug or name.lower().replace(" ", "-"), description=description))

    def band(self, name=None, slug=None, genres=(), **fields):
        n = self._next()
        name = name or f"Band {n}"
        band = Band(name=name, slug=slug or f"band-{n}", **fields)
        band.genres = list(genres)
        return self._save(band)

    def show(self, venue, date=None, bands=(), price_min=None, price_max=None, **fields):
        """`bands` holds Band objects or (band, is_headliner, performance_order) tuples."""
        show = self._save(
            Show(
                venue_id=venue.id,
                date=date or future(),
                price_min=Decimal(str(price_min)) if price_min is not None else None,
                price_max=Decimal(str(price_max)) if price_max is not None else None,
                status=fields.pop("status", "scheduled"),
                **fields,
            )
        )
        for index, entry in enumerate(bands):
            band, headliner, order = entry if isinstance(entry, tuple) else (entry, index == 0, index)
            self._save(ShowBand(show_id=show.id, band_id=band.id, is_headliner=headliner, performance_order=order))
        return show


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def Session(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def queries(db):
    return Queries(db)


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def client(Session):
    def override_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()
