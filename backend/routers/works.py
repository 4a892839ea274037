from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from core import ledger
from core.ledger import NO_STOCK, LedgerValidationError
from core.stats import works_newest_first
from routers.common import LedgerSession, get_ledger, not_found, serialize_record, serialize_work
from schemas.distributions import DistributionRecordRead, DistributionRegistered
from schemas.works import (
    ActionResultRead,
    DistributionCreate,
    RestockRequest,
    WorkCreate,
    WorkRead,
    WorkUpdate,
)

router = APIRouter()


@router.get("/", response_model=List[WorkRead])
async def list_works(session: LedgerSession = Depends(get_ledger)):
    return [serialize_work(w) for w in works_newest_first(session.state)]


@router.post("/", response_model=WorkRead, status_code=status.HTTP_201_CREATED)
async def create_work(payload: WorkCreate, session: LedgerSession = Depends(get_ledger)):
    try:
        work = session.store.add_work(
            payload.title,
            payload.initial_stock,
            price=payload.price,
            memo=payload.memo,
        )
    except LedgerValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await session.commit()
    return serialize_work(work)


@router.get("/{work_id}", response_model=WorkRead)
async def get_work(work_id: UUID, session: LedgerSession = Depends(get_ledger)):
    work = ledger.get_work(session.state, work_id)
    if not work:
        raise not_found("Work")
    return serialize_work(work)


@router.patch("/{work_id}", response_model=WorkRead)
async def update_work(work_id: UUID, payload: WorkUpdate, session: LedgerSession = Depends(get_ledger)):
    if ledger.get_work(session.state, work_id) is None:
        raise not_found("Work")

    data = payload.model_dump(exclude_unset=True)
    try:
        work = session.store.update_work(work_id, data)
    except LedgerValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await session.commit()
    return serialize_work(work)


@router.delete("/{work_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work(work_id: UUID, session: LedgerSession = Depends(get_ledger)):
    if ledger.get_work(session.state, work_id) is None:
        raise not_found("Work")
    session.store.delete_work(work_id)
    await session.commit()
    return None


@router.post("/{work_id}/restock", response_model=ActionResultRead)
async def restock_work(work_id: UUID, payload: RestockRequest, session: LedgerSession = Depends(get_ledger)):
    if ledger.get_work(session.state, work_id) is None:
        raise not_found("Work")
    result = session.store.restock(work_id, payload.quantity)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    await session.commit()
    return ActionResultRead(**result.model_dump())


@router.get("/{work_id}/distributions", response_model=List[DistributionRecordRead])
async def list_work_distributions(work_id: UUID, session: LedgerSession = Depends(get_ledger)):
    work = ledger.get_work(session.state, work_id)
    if not work:
        raise not_found("Work")
    records = sorted(
        ledger.records_for_work(session.state, work_id),
        key=lambda r: r.distributed_at,
        reverse=True,
    )
    return [serialize_record(r, work.title) for r in records]


@router.post("/{work_id}/distributions", response_model=DistributionRegistered, status_code=status.HTTP_201_CREATED)
async def register_distribution(
    work_id: UUID,
    payload: DistributionCreate,
    session: LedgerSession = Depends(get_ledger),
):
    """
    Register copies distributed for a work.

    - Requests above the current stock are clamped; the response then carries
      `registered_quantity` below the request and an informational `message`.
    - 409 when the work has no stock left, 400 when the quantity is below 1.
    """
    work = ledger.get_work(session.state, work_id)
    if not work:
        raise not_found("Work")

    result = session.store.register_distribution(
        work_id,
        payload.quantity,
        event_id=payload.event_id,
        memo=payload.memo,
        distributed_at=payload.distributed_at,
    )
    if not result.success:
        code = status.HTTP_409_CONFLICT if result.message == NO_STOCK else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=result.message)

    await session.commit()
    record = ledger.get_distribution_record(session.state, result.record_id)
    return DistributionRegistered(
        **result.model_dump(),
        record=serialize_record(record, work.title) if record else None,
    )
