"""Shared helpers for tests: in-memory SQLite database with the app's tables."""

from collections.abc import Generator
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from geocats.models import Base

BIRTHDATE = datetime(2020, 5, 17, tzinfo=timezone.utc)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def override_get_db(factory: sessionmaker):
    """Build a get_db replacement bound to factory."""

    def _get_db() -> Generator[Session, None, None]:
        db = factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db
