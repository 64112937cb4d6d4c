"""
Engine, session factory and schema bootstrap.
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """Create an engine sized for the backing store behind ``url``."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Yield a session for the duration of one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_players_visible   ON players (show_on_leaderboard)",
    "CREATE INDEX IF NOT EXISTS idx_players_username  ON players (username)",
]


def init_db(bind: Engine) -> None:
    """Create all tables and indexes if they don't already exist."""
    Base.metadata.create_all(bind=bind)
    with bind.connect() as conn:
        for stmt in _INDEXES:
            conn.execute(text(stmt))
        conn.commit()
    logger.info("✓ Database tables and indexes ensured")


def greatest(bind) -> str:
    """Name of the SQL function returning the larger of its arguments."""
    # SQLite has no GREATEST, but its scalar MAX() takes several arguments
    return "MAX" if bind.dialect.name == "sqlite" else "GREATEST"
