from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from core import ledger
from core.ledger import LedgerValidationError
from core.stats import distribution_history
from routers.common import LedgerSession, get_ledger, not_found, serialize_record
from schemas.distributions import DistributionRecordRead, DistributionUpdate

router = APIRouter()


@router.get("/", response_model=List[DistributionRecordRead])
async def list_distributions(session: LedgerSession = Depends(get_ledger)):
    """Distribution history, newest first."""
    return [serialize_record(r, title) for r, title in distribution_history(session.state)]


@router.patch("/{record_id}", response_model=DistributionRecordRead)
async def update_distribution(
    record_id: UUID,
    payload: DistributionUpdate,
    session: LedgerSession = Depends(get_ledger),
):
    record = ledger.get_distribution_record(session.state, record_id)
    if not record:
        raise not_found("Distribution record")
    work = ledger.get_work(session.state, record.work_id)
    if not work:
        raise not_found("Work")

    data = payload.model_dump(exclude_unset=True)
    try:
        updated = session.store.update_distribution_record(record_id, data)
    except LedgerValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await session.commit()
    return serialize_record(updated, work.title)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_distribution(record_id: UUID, session: LedgerSession = Depends(get_ledger)):
    """Delete a record; its quantity goes back into the work's stock."""
    if ledger.get_distribution_record(session.state, record_id) is None:
        raise not_found("Distribution record")
    session.store.delete_distribution_record(record_id)
    await session.commit()
    return None
