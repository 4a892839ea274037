from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel

from schemas.works import ActionResultRead


class DistributionRecordRead(BaseModel):
    id: UUID
    work_id: UUID
    work_title: Optional[str] = None
    quantity: int
    event_name: Optional[str] = None
    memo: Optional[str] = None
    distributed_at: datetime


class DistributionUpdate(BaseModel):
    quantity: Optional[float] = None
    memo: Optional[str] = None
    event_name: Optional[str] = None
    distributed_at: Optional[Union[datetime, str]] = None


class DistributionRegistered(ActionResultRead):
    record: Optional[DistributionRecordRead] = None
