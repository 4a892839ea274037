from fastapi import APIRouter, Depends

from core import ledger
from core.stats import compute_dashboard_stats
from routers.common import LedgerSession, get_ledger, serialize_record
from schemas.dashboard import DashboardRead

router = APIRouter()


@router.get("/", response_model=DashboardRead)
async def get_dashboard(session: LedgerSession = Depends(get_ledger)):
    stats = compute_dashboard_stats(session.state)
    last = stats.last_distribution
    last_out = None
    if last is not None:
        work = ledger.get_work(session.state, last.work_id)
        last_out = serialize_record(last, work.title if work else None)
    return DashboardRead(
        **stats.model_dump(exclude={"last_distribution"}),
        last_distribution=last_out,
    )
