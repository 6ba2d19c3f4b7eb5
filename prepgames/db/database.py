"""Generate database session"""

from typing import Any, Generator

from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from prepgames.core.config import settings
from prepgames.db.schema import Base

# sqlite connections are used from the request threadpool; an in-memory database only exists on one shared connection
if settings.DATABASE_URL.startswith("sqlite"):
    _engine_args: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in settings.DATABASE_URL or settings.DATABASE_URL == "sqlite://":
        _engine_args["poolclass"] = StaticPool
else:
    _engine_args = {}

engine = create_engine(settings.DATABASE_URL, **_engine_args)
SessionLocal = sessionmaker(bind=engine)


def init_db() -> None:
    """Ensure all tables are created"""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
