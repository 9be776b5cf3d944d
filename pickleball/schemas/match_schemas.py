from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class MatchCreate(BaseModel):
    tournament_id: str
    team1_players: List[str] = Field(..., description="One player for singles, two for doubles")
    team2_players: List[str]
    scheduled_at: datetime
    referee_id: Optional[str] = None

class PointCreate(BaseModel):
    team: int = Field(..., description="Scoring team, 1 or 2")

class RefereeAssignment(BaseModel):
    referee_id: Optional[str] = None

class ScoreRead(BaseModel):
    match_id: str
    score_team1: int
    score_team2: int
    points_recorded: int
