from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from dating_api.core.config import settings


def _engine_options(database_url: str) -> dict:
    """Extra create_engine() arguments for the configured backend."""
    if not database_url.startswith("sqlite"):
        return {}
    # SQLite connections are used from FastAPI's threadpool
    options = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory database must be shared by every session
        options["poolclass"] = StaticPool
    return options


# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes, even if the
    handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
