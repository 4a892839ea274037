from pydantic import BaseModel
from typing import Optional, Union
from uuid import UUID
from datetime import datetime


class EventRead(BaseModel):
    id: UUID
    name: str
    date: datetime
    location: Optional[str] = None
    memo: Optional[str] = None
    created_at: datetime


class EventCreate(BaseModel):
    name: str
    # Missing or unparseable dates default to the current time
    date: Optional[Union[datetime, str]] = None
    location: Optional[str] = None
    memo: Optional[str] = None


class EventUpdate(BaseModel):
    name: Optional[str] = None
    date: Optional[Union[datetime, str]] = None
    location: Optional[str] = None
    memo: Optional[str] = None
