from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, validator

class TournamentModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    organizer_id: Optional[str] = None # References the organizer's account, not owned
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @validator('end_date')
    def end_date_after_start_date(cls, v, values, **kwargs):
        if v and values.get('start_date') and v < values['start_date']:
            raise ValueError('End date must be after start date')
        return v


# Fields an organizer may change after creation
ADMINISTRATIVE_FIELDS = frozenset({"name", "location", "start_date", "end_date"})
