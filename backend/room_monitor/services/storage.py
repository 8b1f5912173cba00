"""
Reading Storage
===============

This is where readings actually get saved.

THE TABLE:
---------
    sensor_ruangan
    +----+----------------------------+-------------+-----------+------------------+
    | id | timestamp                  | nilai_lumen | nilai_suhu| nilai_kelembapan |
    +----+----------------------------+-------------+-----------+------------------+
    |  1 | 2025-03-01 10:15:00.123456 |       120.0 |      24.5 |             55.0 |

- `id` and `timestamp` are filled in by us on insert (server clock, UTC)
- Rows are never updated
- Only the newest N rows survive (N = retention limit, 10 by default)

CONNECTIONS:
-----------
One SQLAlchemy engine (with a connection pool) is created at startup and
shared by every request. Each operation borrows a session with a `with`
block, so the connection goes back to the pool no matter how the
operation ends. Insert and prune run in the same transaction.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, create_engine, delete, func, select
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from room_monitor.config import DatabaseConfig
from room_monitor.exceptions import StorageError
from room_monitor.models import SensorReading

logger = logging.getLogger(__name__)


# =============================================================================
# TABLE
# =============================================================================

class Base(DeclarativeBase):
    pass


# MySQL's plain DATETIME drops microseconds, which would make two readings
# posted in the same second tie on timestamp.
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (what the column stores)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SensorRow(Base):
    __tablename__ = "sensor_ruangan"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(Timestamp, default=utcnow, nullable=False, index=True)
    lumen: Mapped[float] = mapped_column("nilai_lumen", Float, nullable=False)
    temperature: Mapped[float] = mapped_column("nilai_suhu", Float, nullable=False)
    humidity: Mapped[float] = mapped_column("nilai_kelembapan", Float, nullable=False)

    def to_reading(self) -> SensorReading:
        return SensorReading(
            id=self.id,
            timestamp=self.timestamp,
            lumen=self.lumen,
            temperature=self.temperature,
            humidity=self.humidity,
        )


# =============================================================================
# ENGINE
# =============================================================================

def build_engine(config: DatabaseConfig) -> Engine:
    """
    Create the pooled engine for the configured database.

    MySQL gets a normal QueuePool with pre-ping (so a connection the server
    timed out gets replaced instead of failing a request). SQLite is only
    used for tests and local tinkering; an in-memory SQLite database has to
    live on a single shared connection or every request would see an empty
    database.
    """
    url = make_url(config.sqlalchemy_url())

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=config.pool_size,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
    )


# =============================================================================
# THE STORE
# =============================================================================

class ReadingStore:
    """
    Reads and writes rows in the sensor table.

    Every SQLAlchemy error is logged and re-raised as StorageError so the
    layers above never have to know which database we're talking to.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create the table if it doesn't exist yet (no migrations here)."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"[storage] Could not create tables: {e}")
            raise StorageError("Failed to create sensor table") from e

    def close(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()

    # -------------------------------------------------------------------------
    # WRITES
    # -------------------------------------------------------------------------

    def insert(self, lumen: float, temperature: float, humidity: float, keep: int) -> SensorReading:
        """
        Save a new reading, then delete everything except the newest `keep` rows.

        Both statements commit together. If the prune fails the insert is
        rolled back too.

        Returns:
            The stored reading, with its new id and timestamp
        """
        try:
            with self._sessions.begin() as session:
                row = SensorRow(
                    timestamp=utcnow(),
                    lumen=lumen,
                    temperature=temperature,
                    humidity=humidity,
                )
                session.add(row)
                session.flush()

                pruned = self._prune(session, keep)
                reading = row.to_reading()
        except SQLAlchemyError as e:
            logger.error(f"[storage] Insert failed: {e}", exc_info=True)
            raise StorageError("Failed to save reading") from e

        if pruned:
            logger.debug(f"[storage] Pruned {pruned} old reading(s)")
        return reading

    def _prune(self, session, keep: int) -> int:
        keep_ids = session.scalars(
            select(SensorRow.id)
            .order_by(SensorRow.timestamp.desc(), SensorRow.id.desc())
            .limit(keep)
        ).all()
        result = session.execute(
            delete(SensorRow)
            .where(SensorRow.id.not_in(keep_ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    def latest(self, limit: int) -> list[SensorReading]:
        """The newest `limit` readings, newest first."""
        statement = (
            select(SensorRow)
            .order_by(SensorRow.timestamp.desc(), SensorRow.id.desc())
            .limit(limit)
        )
        return self._fetch(statement)

    def since(self, timestamp: datetime) -> list[SensorReading]:
        """Every reading strictly newer than `timestamp`, oldest first."""
        statement = (
            select(SensorRow)
            .where(SensorRow.timestamp > timestamp)
            .order_by(SensorRow.timestamp.asc(), SensorRow.id.asc())
        )
        return self._fetch(statement)

    def count(self) -> int:
        try:
            with self._sessions() as session:
                return session.scalar(select(func.count()).select_from(SensorRow)) or 0
        except SQLAlchemyError as e:
            logger.error(f"[storage] Count failed: {e}")
            raise StorageError("Failed to count readings") from e

    def _fetch(self, statement) -> list[SensorReading]:
        try:
            with self._sessions() as session:
                return [row.to_reading() for row in session.scalars(statement)]
        except SQLAlchemyError as e:
            logger.error(f"[storage] Query failed: {e}", exc_info=True)
            raise StorageError("Failed to fetch readings") from e
