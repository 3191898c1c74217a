"""SQL key/value backend — async SQLAlchemy over a single ``kv_entries`` table.

Provides:
- Engine creation for SQLite (aiosqlite) and other async drivers
- Table creation on connect
- Upsert / delete / prefix scan of key/value rows
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import LargeBinary, String, delete, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if TYPE_CHECKING:
    from addrhooks.config.settings import StoreConfig


class Base(DeclarativeBase):
    """Declarative base for the key/value table."""


class KVEntry(Base):
    """One key/value row."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


def create_engine(config: StoreConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from store configuration.

    Args:
        config: Store configuration with DSN, pool settings, etc.

    Returns:
        A configured ``AsyncEngine`` ready for use.
    """
    kwargs: dict = {
        "echo": config.debug_sql,
    }

    # SQLite doesn't support pool settings in the same way
    if "sqlite" not in config.dsn:
        kwargs["pool_size"] = config.max_connections
        kwargs["pool_pre_ping"] = True

    return create_async_engine(config.dsn, **kwargs)


class SQLKV:
    """Key/value backend persisted in a relational database.

    Usage::

        kv = SQLKV(store_config)
        await kv.connect()
        await kv.set("cb:addr", b'["https://example.com"]')
        await kv.close()
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self) -> None:
        """Create the engine and the ``kv_entries`` table if missing."""
        self._engine = create_engine(self._config)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine and release all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _session(self) -> AsyncSession:
        if self._session_factory is None:
            msg = "SQL store is not open. Call connect() first."
            raise RuntimeError(msg)
        return self._session_factory()

    async def get(self, key: str) -> bytes | None:
        """Get a value, or None if not found."""
        async with self._session() as session:
            row = await session.get(KVEntry, key)
            return None if row is None else row.value

    async def set(self, key: str, value: bytes) -> None:
        """Insert or replace a value."""
        async with self._session() as session:
            await session.merge(KVEntry(key=key, value=value))
            await session.commit()

    async def delete(self, key: str) -> None:
        """Delete a key (no-op if absent)."""
        async with self._session() as session:
            await session.execute(delete(KVEntry).where(KVEntry.key == key))
            await session.commit()

    async def iterate(self, prefix: str = "") -> list[tuple[str, bytes]]:
        """Return entries whose key starts with *prefix*, ordered by key."""
        stmt = select(KVEntry).order_by(KVEntry.key)
        if prefix:
            stmt = stmt.where(KVEntry.key.startswith(prefix, autoescape=True))
        async with self._session() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        # SQLite LIKE is case-insensitive, so re-check the prefix exactly.
        return [(row.key, row.value) for row in rows if row.key.startswith(prefix)]
