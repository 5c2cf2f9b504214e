from typing import Callable, ContextManager

from sqlmodel import SQLModel, Session, create_engine
from .config import DATABASE_URL

# Create engine with SQLite
engine = create_engine(
    DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
)


def create_db_and_tables():
    """Create all database tables."""
    # Import models so every table is registered on the metadata
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def get_session_factory() -> Callable[[], ContextManager[Session]]:
    """Dependency for work that outlives the request, like background tasks."""
    return lambda: Session(engine)
