from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from core.snapshot import reassign_ids, state_from_snapshot, state_to_snapshot
from routers.common import LedgerSession, get_ledger

router = APIRouter()


@router.get("/snapshot", response_model=Dict)
async def export_snapshot(session: LedgerSession = Depends(get_ledger)):
    return state_to_snapshot(session.state)


@router.put("/snapshot", response_model=Dict)
async def import_snapshot(
    payload: Dict[str, Any] = Body(...),
    session: LedgerSession = Depends(get_ledger),
):
    """
    Replace the signed-in user's ledger with a snapshot.

    Accepts this API's own export as well as the legacy browser-storage
    export. Entries that fail sanitizing are dropped, and anything owned by
    another account is ignored.
    """
    state = reassign_ids(state_from_snapshot(payload, user_id=session.store.user_id))
    session.store.replace(state)
    await session.commit()
    return {
        "ok": True,
        "works": len(state.works),
        "distribution_records": len(state.distribution_records),
        "events": len(state.events),
    }
