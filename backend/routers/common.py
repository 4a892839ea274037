import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user
from core.ledger import DistributionRecord, Event, LedgerState, Work
from core.stats import sold_count
from core.store import LedgerStore
from db.database import get_async_session
from db.repository import LedgerConflictError, LedgerRepository
from db.users import User
from schemas.distributions import DistributionRecordRead
from schemas.events import EventRead
from schemas.works import WorkRead

logger = logging.getLogger(__name__)


class LedgerSession:
    """One request's view of the signed-in user's ledger."""

    def __init__(self, repository: LedgerRepository, state: LedgerState):
        self.repository = repository
        self.store = LedgerStore(state)
        self._dirty = False
        self.store.subscribe(self._mark_dirty)

    def _mark_dirty(self, _state: LedgerState) -> None:
        self._dirty = True

    @property
    def state(self) -> LedgerState:
        return self.store.state

    async def commit(self) -> None:
        if not self._dirty:
            return
        try:
            await self.repository.save(self.store.state)
        except LedgerConflictError:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="The ledger was changed by another request. Reload and try again",
            )
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to save ledger: {e}",
            )
        self._dirty = False


async def get_ledger(
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
) -> LedgerSession:
    repository = LedgerRepository(db, user.id)
    return LedgerSession(repository, await repository.load())


def not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


def serialize_work(w: Work) -> WorkRead:
    return WorkRead(
        id=w.id,
        title=w.title,
        initial_stock=w.initial_stock,
        current_stock=w.current_stock,
        sold=sold_count(w),
        price=w.price,
        memo=w.memo,
        created_at=w.created_at,
        updated_at=w.updated_at,
    )


def serialize_record(r: DistributionRecord, work_title: Optional[str] = None) -> DistributionRecordRead:
    return DistributionRecordRead(
        id=r.id,
        work_id=r.work_id,
        work_title=work_title,
        quantity=r.quantity,
        event_name=r.event_name,
        memo=r.memo,
        distributed_at=r.distributed_at,
    )


def serialize_event(e: Event) -> EventRead:
    return EventRead(
        id=e.id,
        name=e.name,
        date=e.date,
        location=e.location,
        memo=e.memo,
        created_at=e.created_at,
    )
