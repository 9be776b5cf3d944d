from pydantic import BaseModel, Field
from typing import Optional
from datetime import date

class TournamentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name of the tournament")
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = Field(None, description="Must not be before start_date")
    organizer_id: Optional[str] = None

class TournamentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

class ManualPlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
