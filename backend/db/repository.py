"""
Persistence collaborator for the ledger.

`load()` reads one user's rows into a `LedgerState`; `save()` writes a full
state back in a single transaction, so a compound ledger operation (record
appended + stock decremented) lands in storage all at once or not at all.

Saves are optimistic: `load()` remembers the user's ledger version and
`save()` only commits if that version is still current, bumping it in the
same transaction. A save based on a stale read raises `LedgerConflictError`
and writes nothing.
"""

import logging
from typing import Dict, Optional, Type
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.ledger import LedgerState
from core.snapshot import state_from_snapshot
from db.database import Base
from db.distribution import DistributionRecord as DistributionRecordModel
from db.event import Event as EventModel
from db.ledger_version import LedgerVersion
from db.work import Work as WorkModel

logger = logging.getLogger(__name__)


class LedgerConflictError(Exception):
    """The stored ledger changed after it was loaded."""


class LedgerRepository:
    def __init__(self, session: AsyncSession, user_id: UUID):
        self.session = session
        self.user_id = user_id
        # None until load() or save() has read it
        self.version: Optional[int] = None

    async def _current_version(self) -> int:
        res = await self.session.execute(
            select(LedgerVersion.version).where(LedgerVersion.user_id == self.user_id)
        )
        return res.scalar_one_or_none() or 0

    async def _rows(self, model: Type[Base]) -> Dict[UUID, Base]:
        res = await self.session.execute(
            select(model)
            .where(model.user_id == self.user_id)
            .execution_options(populate_existing=True)
        )
        return {row.id: row for row in res.scalars().all()}

    async def load(self) -> LedgerState:
        self.version = await self._current_version()
        works = await self._rows(WorkModel)
        records = await self._rows(DistributionRecordModel)
        events = await self._rows(EventModel)
        snapshot = {
            "works": [w.to_snapshot for w in works.values()],
            "distribution_records": [r.to_snapshot for r in records.values()],
            "events": [e.to_snapshot for e in events.values()],
        }
        return state_from_snapshot(snapshot, user_id=self.user_id)

    async def _bump_version(self) -> int:
        expected = self.version
        if expected is None:
            expected = await self._current_version()

        if expected == 0:
            self.session.add(LedgerVersion(user_id=self.user_id, version=1))
            try:
                await self.session.flush()
            except IntegrityError as e:
                raise LedgerConflictError("ledger was created concurrently") from e
        else:
            res = await self.session.execute(
                update(LedgerVersion)
                .where(LedgerVersion.user_id == self.user_id, LedgerVersion.version == expected)
                .values(version=expected + 1)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                raise LedgerConflictError(f"ledger version {expected} is no longer current")
        return expected + 1

    async def _sync(self, model: Type[Base], entities) -> None:
        existing = await self._rows(model)
        keep = set()
        for entity in entities:
            data = entity.model_dump()
            data["user_id"] = self.user_id
            keep.add(entity.id)
            row = existing.get(entity.id)
            if row is None:
                self.session.add(model(**data))
                continue
            for key, value in data.items():
                setattr(row, key, value)
        for row_id, row in existing.items():
            if row_id not in keep:
                await self.session.delete(row)

    async def save(self, state: LedgerState) -> None:
        if state.user_id is not None and state.user_id != self.user_id:
            raise ValueError("ledger state belongs to a different user")
        try:
            # Version first: a concurrent writer blocks here or fails the check.
            new_version = await self._bump_version()
            await self._sync(WorkModel, state.works)
            await self.session.flush()
            await self._sync(DistributionRecordModel, state.distribution_records)
            await self._sync(EventModel, state.events)
            await self.session.commit()
        except LedgerConflictError:
            await self.session.rollback()
            logger.warning("stale ledger save rejected for user=%s", self.user_id)
            raise
        except Exception:
            await self.session.rollback()
            logger.exception("saving ledger for user=%s failed", self.user_id)
            raise
        self.version = new_version
