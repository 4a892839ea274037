from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from uuid import UUID

from core import ledger
from core.ledger import LedgerValidationError
from core.stats import events_by_date
from routers.common import LedgerSession, get_ledger, not_found, serialize_event
from schemas.events import EventRead, EventCreate, EventUpdate

router = APIRouter()


@router.get("/", response_model=List[EventRead])
async def list_events(session: LedgerSession = Depends(get_ledger)):
    return [serialize_event(e) for e in events_by_date(session.state)]


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: UUID, session: LedgerSession = Depends(get_ledger)):
    e = ledger.get_event(session.state, event_id)
    if not e:
        raise not_found("Event")
    return serialize_event(e)


@router.post("/", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventCreate, session: LedgerSession = Depends(get_ledger)):
    try:
        e = session.store.add_event(
            payload.name,
            date=payload.date,
            location=payload.location,
            memo=payload.memo,
        )
    except LedgerValidationError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))
    await session.commit()
    return serialize_event(e)


@router.patch("/{event_id}", response_model=EventRead)
async def update_event(event_id: UUID, payload: EventUpdate, session: LedgerSession = Depends(get_ledger)):
    if ledger.get_event(session.state, event_id) is None:
        raise not_found("Event")

    data = payload.model_dump(exclude_unset=True)
    try:
        e = session.store.update_event(event_id, data)
    except LedgerValidationError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))
    await session.commit()
    return serialize_event(e)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: UUID, session: LedgerSession = Depends(get_ledger)):
    # Distribution records keep the event name they were registered with.
    if ledger.get_event(session.state, event_id) is None:
        raise not_found("Event")
    session.store.delete_event(event_id)
    await session.commit()
    return None
