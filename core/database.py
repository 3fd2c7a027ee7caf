"""
Database lifecycle and table definitions.

The Database object owns the SQLAlchemy engine and session factory for the
lifetime of the app. It is created and initialized once in create_app() and
disposed at shutdown, the same way for every backend (SQLite file for
development, in-memory SQLite for tests, Postgres in production).

Tables:
    users           - registered storefront accounts
    user_addresses  - delivery addresses, one default per user (partial unique index)
    orders          - paid orders, written once on payment verification
    catalogue_models - curated models (seeded) and uploads, with download/print counters

Usage:
    database = Database(app.config["DATABASE_URL"])
    database.initialize()

    with database.session_scope() as session:
        session.add(record)
    # committed here, rolled back if the block raised
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    create_engine,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from logging_config import get_logger


logger = get_logger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (DateTime columns store no zone)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    """Registered storefront account."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(120), default="")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class AddressRecord(Base):
    """
    Delivery address owned by exactly one user.

    At most one row per user_id may have is_default set; the partial unique
    index makes the database reject a second default outright.
    """
    __tablename__ = "user_addresses"
    __table_args__ = (
        Index(
            "uq_user_addresses_one_default",
            "user_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), default="")
    line1: Mapped[str] = mapped_column(String(255), nullable=False)
    line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(120), default="")
    state: Mapped[str] = mapped_column(String(120), default="")
    zip_code: Mapped[str] = mapped_column(String(20), default="")
    country: Mapped[str] = mapped_column(String(80), default="")
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class OrderRecord(Base):
    """Paid order. Written once, never updated."""
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    model_id: Mapped[str] = mapped_column(String(64), nullable=False)
    model_title: Mapped[str] = mapped_column(String(255), default="")
    choices: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    print_time_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    shipping: Mapped[int] = mapped_column(Integer, nullable=False)
    tax: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), default="INR")
    delivery_method: Mapped[str] = mapped_column(String(16), default="HOME")
    shipping_address: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    payment_id: Mapped[str] = mapped_column(String(64), default="")
    payment_order_id: Mapped[str] = mapped_column(String(64), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    estimated_delivery: Mapped[date] = mapped_column(Date, nullable=False)


class CatalogueModelRecord(Base):
    """
    Printable model: curated records seeded at start-up plus user uploads.

    Ids are numeric strings so curated and uploaded models share one
    sequence; an id is never handed out twice.
    """
    __tablename__ = "catalogue_models"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(2000), default="")
    creator: Mapped[str] = mapped_column(String(120), default="")
    created_at: Mapped[date] = mapped_column(Date, nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(String(500), default="")
    base_price: Mapped[float] = mapped_column(Float, nullable=False)
    base_print_time: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(40), index=True, default="decoration")
    download_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    print_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    license: Mapped[str] = mapped_column(String(20), default="cc-by")
    allow_derivatives: Mapped[bool] = mapped_column(Boolean, default=True)
    allow_commercial_use: Mapped[bool] = mapped_column(Boolean, default=False)
    owner_id: Mapped[Optional[str]] = mapped_column(String(32), index=True, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Database:
    """
    Owns the engine and session factory.

    Attributes:
        url: SQLAlchemy database URL
        is_initialized: Whether initialize() has run
    """

    def __init__(self, url: str):
        self.url = url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database.initialize() must be called first")
        return self._engine

    def initialize(self) -> None:
        """
        Create the engine and any missing tables.

        Safe to call more than once.
        """
        if self._engine is not None:
            return

        if self.url in IN_MEMORY_URLS:
            # One shared connection, otherwise every session sees an empty database
            self._engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        elif self.url.startswith("sqlite"):
            self._engine = create_engine(self.url, connect_args={"check_same_thread": False})
        else:
            self._engine = create_engine(self.url, pool_pre_ping=True)

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        logger.info(f"Database initialized ({self._engine.url.get_backend_name()})")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block exits normally, rolls back and re-raises on
        any exception.
        """
        if self._session_factory is None:
            raise RuntimeError("Database.initialize() must be called first")

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def cleanup(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connections closed")
