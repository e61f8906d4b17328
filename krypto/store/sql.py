"""
SQLAlchemy item store.

Persists review state in two tables:
- review_items: one row per item (SM-2 state + lifetime counters)
- review_log: append-only history of graded reviews

Defaults to a SQLite file (~/.krypto/state.db); any SQLAlchemy URL works.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import (
    BigInteger,
    Boolean,
    Float,
    Index,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from ..srs.models import ItemType, ReviewItem, ReviewLogEntry

# =============================================================================
# ORM Models
# =============================================================================


class Base(DeclarativeBase):
    pass


class ReviewItemRow(Base):
    """Persistent state for a single review item."""

    __tablename__ = "review_items"

    # Insertion order, keeps catalogue order stable across reads
    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    item_type: Mapped[str] = mapped_column(String(32), nullable=False)

    easiness_factor: Mapped[float] = mapped_column(Float, nullable=False, default=2.5)
    interval_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_review_date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_review_date: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_response_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("idx_review_items_type", "item_type"),
        Index("idx_review_items_next_review", "next_review_date"),
    )

    def __repr__(self) -> str:
        return f"<ReviewItemRow {self.item_id} interval={self.interval_days}d>"

    def to_item(self) -> ReviewItem:
        return ReviewItem(
            id=self.item_id,
            item_type=ItemType(self.item_type),
            easiness_factor=self.easiness_factor,
            interval_days=self.interval_days,
            repetitions=self.repetitions,
            next_review_date=self.next_review_date,
            last_review_date=self.last_review_date,
            total_reviews=self.total_reviews,
            correct_reviews=self.correct_reviews,
            average_response_time=self.average_response_time,
        )

    def update_from(self, item: ReviewItem) -> None:
        self.item_type = item.item_type.value
        self.easiness_factor = item.easiness_factor
        self.interval_days = item.interval_days
        self.repetitions = item.repetitions
        self.next_review_date = item.next_review_date
        self.last_review_date = item.last_review_date
        self.total_reviews = item.total_reviews
        self.correct_reviews = item.correct_reviews
        self.average_response_time = item.average_response_time


class ReviewLogRow(Base):
    """A single graded review."""

    __tablename__ = "review_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    item_type: Mapped[str] = mapped_column(String(32), nullable=False)
    correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    quality: Mapped[int] = mapped_column(Integer, nullable=False)
    reviewed_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("item_id", "reviewed_at", name="uq_review_log_item_time"),
    )

    def to_entry(self) -> ReviewLogEntry:
        return ReviewLogEntry(
            item_id=self.item_id,
            item_type=ItemType(self.item_type),
            correct=self.correct,
            response_time_ms=self.response_time_ms,
            quality=self.quality,
            reviewed_at=self.reviewed_at,
        )


# =============================================================================
# Store
# =============================================================================


class SqlItemStore:
    """
    SQLAlchemy-backed ItemStore.

    Every write runs in its own transaction; on error the transaction is
    rolled back and the exception re-raised unchanged.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Args:
            database_url: SQLAlchemy URL (sqlite:///path/to/state.db, postgresql://...)
            echo: Log emitted SQL
        """
        self.database_url = database_url
        _ensure_sqlite_dir(database_url)

        self.engine: Engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

        safe_url = self.engine.url.render_as_string(hide_password=True)
        logger.debug(f"SqlItemStore initialized at {safe_url}")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:  # Intentionally broad - rollback on any error before re-raising
            session.rollback()
            raise
        finally:
            session.close()

    # =========================================================================
    # Items
    # =========================================================================

    def get(self, item_id: str) -> ReviewItem | None:
        with self.session_scope() as session:
            row = session.scalar(select(ReviewItemRow).where(ReviewItemRow.item_id == item_id))
            return row.to_item() if row is not None else None

    def put(self, item: ReviewItem) -> None:
        self.put_many([item])

    def put_many(self, items: Iterable[ReviewItem]) -> None:
        with self.session_scope() as session:
            for item in items:
                _upsert(session, item)
                # Flush so a later duplicate id in the same batch finds this row
                session.flush()

    def list_by_type(self, item_type: ItemType) -> list[ReviewItem]:
        stmt = (
            select(ReviewItemRow)
            .where(ReviewItemRow.item_type == item_type.value)
            .order_by(ReviewItemRow.position)
        )
        return self._fetch_items(stmt)

    def list_due(self, item_type: ItemType | None = None, *, as_of: int) -> list[ReviewItem]:
        stmt = select(ReviewItemRow).where(ReviewItemRow.next_review_date <= as_of)
        if item_type is not None:
            stmt = stmt.where(ReviewItemRow.item_type == item_type.value)
        return self._fetch_items(stmt.order_by(ReviewItemRow.position))

    def list_all(self) -> list[ReviewItem]:
        return self._fetch_items(select(ReviewItemRow).order_by(ReviewItemRow.position))

    def count(self) -> int:
        with self.session_scope() as session:
            return session.scalar(select(func.count()).select_from(ReviewItemRow)) or 0

    def clear(self) -> None:
        with self.session_scope() as session:
            session.execute(delete(ReviewLogRow))
            session.execute(delete(ReviewItemRow))
        logger.info("SqlItemStore cleared")

    def _fetch_items(self, stmt) -> list[ReviewItem]:
        with self.session_scope() as session:
            return [row.to_item() for row in session.scalars(stmt)]

    # =========================================================================
    # Review Log
    # =========================================================================

    def save_review(self, item: ReviewItem, entry: ReviewLogEntry) -> None:
        with self.session_scope() as session:
            _upsert(session, item)
            session.add(_log_row(entry))

    def import_snapshot(
        self, items: Iterable[ReviewItem], entries: Iterable[ReviewLogEntry]
    ) -> int:
        with self.session_scope() as session:
            for item in items:
                _upsert(session, item)
                session.flush()

            existing = {
                (row.item_id, row.reviewed_at)
                for row in session.execute(select(ReviewLogRow.item_id, ReviewLogRow.reviewed_at))
            }
            added = 0
            for entry in entries:
                if entry.key in existing:
                    continue
                existing.add(entry.key)
                session.add(_log_row(entry))
                added += 1
        return added

    def list_reviews(
        self, item_id: str | None = None, limit: int | None = None
    ) -> list[ReviewLogEntry]:
        stmt = select(ReviewLogRow).order_by(
            ReviewLogRow.reviewed_at.desc(), ReviewLogRow.id.desc()
        )
        if item_id is not None:
            stmt = stmt.where(ReviewLogRow.item_id == item_id)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session_scope() as session:
            return [row.to_entry() for row in session.scalars(stmt)]

    def close(self) -> None:
        """Dispose of pooled connections."""
        self.engine.dispose()


def _upsert(session: Session, item: ReviewItem) -> None:
    row = session.scalar(select(ReviewItemRow).where(ReviewItemRow.item_id == item.id))
    if row is None:
        row = ReviewItemRow(item_id=item.id)
        session.add(row)
    row.update_from(item)


def _log_row(entry: ReviewLogEntry) -> ReviewLogRow:
    return ReviewLogRow(
        item_id=entry.item_id,
        item_type=entry.item_type.value,
        correct=entry.correct,
        response_time_ms=entry.response_time_ms,
        quality=entry.quality,
        reviewed_at=entry.reviewed_at,
    )


def _ensure_sqlite_dir(database_url: str) -> None:
    """Create the parent directory of a SQLite database file."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    if not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
