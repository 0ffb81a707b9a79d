"""SQLAlchemy models for the cashpulse store."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    DateTime,
    Float,
    LargeBinary,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Entry(Base):
    """A single key holding either a blob or a number."""

    __tablename__ = "entries"

    key = Column(String, primary_key=True)
    blob = Column(LargeBinary, nullable=True)
    number = Column(Float, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
