from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel

from core.ledger import DistributionRecord, Event, LedgerState, Work


class DashboardStats(BaseModel):
    total_works: int
    total_initial_stock: int
    total_current_stock: int
    total_sold: int
    estimated_revenue: float
    sold_ratio: int
    # Works without a price contribute 0 to estimated_revenue.
    unpriced_works: int
    last_distribution_at: Optional[datetime] = None
    last_distribution: Optional[DistributionRecord] = None


def sold_count(work: Work) -> int:
    return max(work.initial_stock - work.current_stock, 0)


def _round_half_up(x: float) -> int:
    # Round half up; percentages are never negative here.
    return int(x + 0.5)


def compute_dashboard_stats(state: LedgerState) -> DashboardStats:
    works = state.works
    total_initial = sum(w.initial_stock for w in works)
    total_current = sum(w.current_stock for w in works)
    total_sold = sum(sold_count(w) for w in works)
    revenue = sum(sold_count(w) * (w.price or 0) for w in works)
    sold_ratio = _round_half_up(total_sold / total_initial * 100) if total_initial > 0 else 0

    last = max(state.distribution_records, key=lambda r: r.distributed_at, default=None)

    return DashboardStats(
        total_works=len(works),
        total_initial_stock=total_initial,
        total_current_stock=total_current,
        total_sold=total_sold,
        estimated_revenue=float(revenue),
        sold_ratio=sold_ratio,
        unpriced_works=sum(1 for w in works if w.price is None),
        last_distribution_at=last.distributed_at if last else None,
        last_distribution=last,
    )


def distribution_history(state: LedgerState) -> List[Tuple[DistributionRecord, Optional[str]]]:
    """Records newest first, each with its work title (None when the work is unknown)."""
    titles = {w.id: w.title for w in state.works}
    records = sorted(state.distribution_records, key=lambda r: r.distributed_at, reverse=True)
    return [(r, titles.get(r.work_id)) for r in records]


def works_newest_first(state: LedgerState) -> List[Work]:
    return sorted(state.works, key=lambda w: w.created_at, reverse=True)


def events_by_date(state: LedgerState) -> List[Event]:
    return sorted(state.events, key=lambda e: e.date)
