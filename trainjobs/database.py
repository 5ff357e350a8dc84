"""
Database schema and connection management.

Uses SQLAlchemy; SQLite for local use and tests, PostgreSQL in deployment.
The engine is built once by the process bootstrap and handed to the store
through a session factory.
"""

from pathlib import Path

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class JobRecord(Base):
    """Stored training job."""

    __tablename__ = "training_jobs"

    id = Column(String, primary_key=True)  # caller-assigned, e.g. train-1-1a2b3c4d
    job_name = Column(String, nullable=False, index=True)
    namespace = Column(String, nullable=False, index=True)
    algorithm = Column(String, nullable=False, index=True)
    priority = Column(Integer, nullable=False, default=0)
    request_payload = Column(Text, nullable=False)  # full JobRequest as JSON
    target_clusters = Column(Text, nullable=False)  # JSON array of cluster names
    status = Column(String, nullable=False, index=True)
    message = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<JobRecord id={self.id!r} status={self.status!r}>"


def create_db_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
) -> Engine:
    """
    Create the SQLAlchemy engine.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite:///data/trainjobs.db
        echo: Log emitted SQL
        pool_size: Connections kept open (ignored for SQLite)
        max_overflow: Extra connections allowed under load (ignored for SQLite)
        pool_timeout: Seconds to wait for a pooled connection (ignored for SQLite)

    Returns:
        Engine with pre-ping enabled
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, echo=echo)

    return create_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


def init_database(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker:
    """
    Build the session factory injected into JobStore.

    Objects are not expired on commit so records stay readable after their
    session closes.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
