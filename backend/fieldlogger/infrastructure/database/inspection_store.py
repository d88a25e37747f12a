"""Concrete local store for inspections backed by SQLAlchemy + SQLite."""

import asyncio
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fieldlogger.application.interfaces import ChangeKind, InspectionStore, StoreChange
from fieldlogger.domain.entities import Inspection, InspectionStatus
from fieldlogger.domain.exceptions import DuplicateIdError, NotFoundError
from fieldlogger.infrastructure.database.models import InspectionModel


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLAlchemyInspectionStore(InspectionStore):
    """Implements the InspectionStore port on top of an async session factory.

    Writes are serialized through one lock and each runs in its own
    transaction, so ``put`` and ``update_status`` never interleave.
    Subscribers are notified after the commit, outside the lock.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__()
        self._session_factory = session_factory
        self._write_lock = asyncio.Lock()

    def _to_entity(self, model: InspectionModel) -> Inspection:
        """Map ORM model → domain entity."""
        return Inspection(
            id=model.id,
            location=model.location,
            technician=model.technician,
            findings=model.findings,
            status=InspectionStatus(model.status),
            created_at=_to_utc(model.created_at),
            synced_at=_to_utc(model.synced_at) if model.synced_at else None,
        )

    def _to_model(self, entity: Inspection) -> InspectionModel:
        """Map domain entity → ORM model (for creation)."""
        return InspectionModel(
            id=entity.id,
            location=entity.location,
            technician=entity.technician,
            findings=entity.findings,
            status=entity.status.value,
            created_at=_to_utc(entity.created_at),
            synced_at=_to_utc(entity.synced_at) if entity.synced_at else None,
        )

    # ── Writes ───────────────────────────────────────────────────────

    async def put(self, inspection: Inspection) -> Inspection:
        async with self._write_lock:
            async with self._session_factory() as session:
                if await session.get(InspectionModel, inspection.id) is not None:
                    raise DuplicateIdError("Inspection", inspection.id)
                model = self._to_model(inspection)
                session.add(model)
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    raise DuplicateIdError("Inspection", inspection.id) from exc
                stored = self._to_entity(model)

        await self._publish(StoreChange(ChangeKind.CREATED, stored))
        return stored

    async def update_status(self, inspection_id: str, synced_at: datetime) -> Inspection:
        async with self._write_lock:
            async with self._session_factory() as session:
                model = await session.get(InspectionModel, inspection_id)
                if model is None:
                    raise NotFoundError("Inspection", inspection_id)
                if model.status == InspectionStatus.SYNCED.value:
                    return self._to_entity(model)

                model.status = InspectionStatus.SYNCED.value
                model.synced_at = _to_utc(synced_at)
                await session.commit()
                updated = self._to_entity(model)

        await self._publish(StoreChange(ChangeKind.SYNCED, updated))
        return updated

    # ── Reads ────────────────────────────────────────────────────────

    async def get(self, inspection_id: str) -> Inspection | None:
        async with self._session_factory() as session:
            model = await session.get(InspectionModel, inspection_id)
            return self._to_entity(model) if model else None

    async def query_by_status(self, status: InspectionStatus) -> list[Inspection]:
        stmt = (
            select(InspectionModel)
            .where(InspectionModel.status == status.value)
            .order_by(InspectionModel.created_at.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._to_entity(row) for row in result.scalars().all()]

    async def count_by_status(self, status: InspectionStatus) -> int:
        stmt = (
            select(func.count())
            .select_from(InspectionModel)
            .where(InspectionModel.status == status.value)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def all(self) -> list[Inspection]:
        stmt = select(InspectionModel).order_by(InspectionModel.created_at.desc())
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._to_entity(row) for row in result.scalars().all()]
