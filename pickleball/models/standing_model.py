from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

class StandingModel(BaseModel):
    """Derived per-team ranking row for one pool. Never patched, only replaced."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    tournament_id: str
    pool: int = Field(ge=1, le=2)
    team_id: str
    team_number: int
    rank: int = 0
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    total_points_for: int = 0
    total_points_against: int = 0
    computed_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @property
    def point_differential(self) -> int:
        return self.total_points_for - self.total_points_against
