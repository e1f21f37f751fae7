# app/db/get_db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core import config
from app.db.base import Base

connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    config.DATABASE_URL,
    echo=False,
    future=True,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db(bind=engine):
    """Create any missing tables."""
    # Register the mapped classes on Base.metadata
    from app.models import rating, store, user  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
