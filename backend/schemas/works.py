from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel


class WorkCreate(BaseModel):
    title: str
    initial_stock: float = 0
    price: Optional[float] = None
    memo: Optional[str] = None


class WorkUpdate(BaseModel):
    title: Optional[str] = None
    initial_stock: Optional[float] = None
    current_stock: Optional[float] = None
    price: Optional[float] = None
    memo: Optional[str] = None


class WorkRead(BaseModel):
    id: UUID
    title: str
    initial_stock: int
    current_stock: int
    sold: int
    price: Optional[float] = None
    memo: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RestockRequest(BaseModel):
    quantity: float


class DistributionCreate(BaseModel):
    quantity: float
    event_id: Optional[UUID] = None
    memo: Optional[str] = None
    # Unparseable values fall back to "now" in the ledger
    distributed_at: Optional[Union[datetime, str]] = None


class ActionResultRead(BaseModel):
    success: bool
    message: Optional[str] = None
    registered_quantity: Optional[int] = None
    record_id: Optional[UUID] = None
