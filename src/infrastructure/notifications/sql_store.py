# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy-backed notification store.

Each appended notification becomes one row in admissions_notifications.
The full record shape lives in a JSON column; recipient, notification
ID and creation time are broken out for lookups and ordering. An
autoincrement sequence keeps append order for equal timestamps.

Uses SQLAlchemy 2.0 async API. Any async driver works; tests run on
sqlite+aiosqlite.

Example:
    store = SqlAlchemyNotificationStore.from_settings(settings.database)
    await store.create_schema()
    await store.append(notification)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, select, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from src.core.config.settings import DatabaseSettings
from src.infrastructure.notifications.errors import (
    NotificationStoreError,
    StoreUnavailableError,
)
from src.infrastructure.notifications.store import NotificationStore
from src.infrastructure.notifications.types import Notification

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for notification tables."""

    pass


class NotificationRecord(Base):
    """One stored notification."""

    __tablename__ = "admissions_notifications"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    notification_id: Mapped[str] = mapped_column(String(64), index=True)
    recipient_id: Mapped[str] = mapped_column(String(64), index=True)
    stage: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)

    def to_notification(self) -> Notification:
        return Notification.from_dict(self.payload)


class SqlAlchemyNotificationStore(NotificationStore):
    """Durable notification store on SQLAlchemy async."""

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize the store.

        Args:
            engine: Async engine to use. The store does not own it unless
                built with from_settings().
        """
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._owns_engine = False

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "SqlAlchemyNotificationStore":
        """Build a store with its own engine.

        Args:
            settings: Database settings.

        Returns:
            Store owning the created engine.
        """
        engine_kwargs: dict[str, Any] = {"echo": settings.echo}
        if settings.url.startswith("sqlite") and ":memory:" in settings.url:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        store = cls(create_async_engine(settings.url, **engine_kwargs))
        store._owns_engine = True
        return store

    async def create_schema(self) -> None:
        """Create the notifications table if it does not exist."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise NotificationStoreError("Failed to create notification schema", e) from e

    async def close(self) -> None:
        """Dispose the engine if this store created it."""
        if self._owns_engine:
            await self._engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except OperationalError as e:
                await session.rollback()
                raise StoreUnavailableError("Notification store unavailable", e) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise NotificationStoreError("Notification store operation failed", e) from e
            except Exception:
                await session.rollback()
                raise

    async def append(self, notification: Notification) -> None:
        """Record a finalized notification."""
        async with self._session() as session:
            session.add(
                NotificationRecord(
                    notification_id=notification.id,
                    recipient_id=notification.recipient_id,
                    stage=notification.stage.value,
                    created_at=notification.created_at,
                    payload=notification.to_dict(),
                )
            )
        logger.debug(
            "Stored notification %s for recipient %s",
            notification.id,
            notification.recipient_id,
        )

    async def _latest_record(
        self,
        session: AsyncSession,
        notification_id: str,
    ) -> NotificationRecord | None:
        result = await session.execute(
            select(NotificationRecord)
            .where(NotificationRecord.notification_id == notification_id)
            .order_by(NotificationRecord.seq.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get(self, notification_id: str) -> Notification | None:
        """Get a notification by ID."""
        async with self._session() as session:
            record = await self._latest_record(session, notification_id)
            return record.to_notification() if record else None

    async def list_by_recipient(self, recipient_id: str) -> list[Notification]:
        """List a recipient's notifications, oldest first."""
        async with self._session() as session:
            result = await session.execute(
                select(NotificationRecord)
                .where(NotificationRecord.recipient_id == recipient_id)
                .order_by(NotificationRecord.created_at, NotificationRecord.seq)
            )
            return [record.to_notification() for record in result.scalars().all()]

    async def mark_read(self, notification_id: str) -> bool:
        """Mark every delivered in-app record with this ID as read."""
        async with self._session() as session:
            result = await session.execute(
                select(NotificationRecord)
                .where(NotificationRecord.notification_id == notification_id)
            )
            records = result.scalars().all()
            if not records:
                logger.debug("mark_read ignored unknown notification %s", notification_id)
                return False

            changed = False
            for record in records:
                notification = record.to_notification()
                if notification.mark_read():
                    # Reassign so the JSON column is flagged dirty
                    record.payload = notification.to_dict()
                    changed = True
            return changed

    async def ping(self) -> bool:
        """Check database connectivity with a trivial query."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Notification store ping failed: %s", str(e))
            return False
