"""
Database engine and schema.
SQLite locally, any SQLAlchemy URL (e.g. PostgreSQL) in production.
"""
from __future__ import annotations

from datetime import datetime
from functools import lru_cache

from sqlalchemy import (
    JSON, DateTime, Engine, Float, ForeignKey, Integer, String, create_engine,
)
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cgpa.models import utcnow
from config.settings import settings
from config.logging_config import logger


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id:              Mapped[int]      = mapped_column(Integer, primary_key=True, autoincrement=True)
    username:        Mapped[str]      = mapped_column(String(50), unique=True, nullable=False)
    email:           Mapped[str]      = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str]      = mapped_column(String(255), nullable=False)
    created_at:      Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class CGPARecordRow(Base):
    __tablename__ = "cgpa_records"

    id:            Mapped[int]      = mapped_column(Integer, primary_key=True, autoincrement=True)
    # One record per user
    user_id:       Mapped[int]      = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    semesters:     Mapped[list]     = mapped_column(JSON, nullable=False, default=list)
    overall_cgpa:  Mapped[float]    = mapped_column(Float, nullable=False, default=0.0)
    total_credits: Mapped[int]      = mapped_column(Integer, nullable=False, default=0)
    last_updated:  Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version:       Mapped[int]      = mapped_column(Integer, nullable=False, default=1)


def make_engine(uri: str) -> Engine:
    connect_args = {"check_same_thread": False} if uri.startswith("sqlite") else {}
    return create_engine(uri, pool_pre_ping=True, connect_args=connect_args)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Process-wide engine built from DATABASE_URI."""
    return make_engine(settings.database_uri)


@retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
def init_db(engine: Engine | None = None) -> None:
    """Create missing tables (with retry on transient connection failures)."""
    eng = engine or get_engine()
    Base.metadata.create_all(eng)
    logger.info(f"Database schema ready → {eng.url.render_as_string(hide_password=True)}")
