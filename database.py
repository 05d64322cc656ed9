from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

import config


def build_engine(url: str):
    if url.startswith("sqlite"):
        # SQLite connections are shared across FastAPI's worker threads
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=280,   # helps with idle connection timeouts
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(config.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


# Database dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db):
    """Commit everything done inside the block, or roll it all back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
