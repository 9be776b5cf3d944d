from datetime import datetime
from typing import List
from uuid import uuid4

from pydantic import BaseModel, Field

TEAM_COUNT = 6
TEAMS_PER_POOL = 3
POOLS = (1, 2)
MAX_PLAYERS_PER_TEAM = 2 # doubles

def pool_for_team_number(team_number: int) -> int:
    return 1 if team_number <= TEAMS_PER_POOL else 2

class TeamModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    tournament_id: str
    team_number: int = Field(ge=1, le=TEAM_COUNT)
    pool: int = Field(ge=1, le=2)
    name: str = ""
    player_ids: List[str] = Field(default_factory=list, max_length=MAX_PLAYERS_PER_TEAM)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True
