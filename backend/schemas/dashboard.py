from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from schemas.distributions import DistributionRecordRead


class DashboardRead(BaseModel):
    total_works: int
    total_initial_stock: int
    total_current_stock: int
    total_sold: int
    estimated_revenue: float
    sold_ratio: int
    unpriced_works: int
    last_distribution_at: Optional[datetime] = None
    last_distribution: Optional[DistributionRecordRead] = None
