"""
License Storefront - Database
SQLAlchemy engine, session factory and FastAPI dependency
"""
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session for one request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables"""
    # Import models so they register on Base.metadata
    from storefront import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
