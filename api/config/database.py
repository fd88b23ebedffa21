"""Database configuration using SQLAlchemy."""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from .settings import settings


def build_engine(database_url: str, echo: bool = False):
    """Create an engine with pool options suited to the backend."""
    if database_url.startswith("sqlite"):
        # SQLite connections are shared across the threadpool FastAPI runs sync code in
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    if database_url.startswith("mssql") and "MARS_Connection" not in database_url:
        # MARS (Multiple Active Result Sets) allows multiple queries on the same connection
        separator = "&" if "?" in database_url else "?"
        database_url = f"{database_url}{separator}MARS_Connection=Yes"

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize database tables."""
    # Import all models to register them with Base
    from api import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
