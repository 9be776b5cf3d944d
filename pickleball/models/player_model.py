import re
from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, EmailStr, Field, validator

class PlayerModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    # Set for manual entries owned by one tournament; registered players leave it empty
    tournament_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @validator('name')
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Player name is required')
        return v.strip()

    @validator('phone')
    def phone_has_enough_digits(cls, v):
        if v is None or v == "":
            return None
        if len(re.sub(r"\D", "", v)) < 10:
            raise ValueError('Phone number must contain at least 10 digits')
        return v

    @property
    def is_manual(self) -> bool:
        return self.tournament_id is not None
