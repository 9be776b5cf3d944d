from datetime import datetime
from enum import Enum
from typing import List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field

class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"

class MatchType(str, Enum):
    POOL = "pool"
    SEMIFINAL = "semifinal"
    FINAL = "final"

# Allowed forward transitions; anything else is rejected
NEXT_STATUS = {
    MatchStatus.SCHEDULED: MatchStatus.LIVE,
    MatchStatus.LIVE: MatchStatus.COMPLETED,
}

SCORE_FIELDS = {1: "score_team1", 2: "score_team2"}


class MatchModel(BaseModel):
    """Freeform singles or doubles match between ad hoc player line-ups."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    tournament_id: str
    team1_players: List[str] = Field(min_length=1, max_length=2)
    team2_players: List[str] = Field(min_length=1, max_length=2)
    referee_id: Optional[str] = None
    scheduled_at: datetime
    status: MatchStatus = MatchStatus.SCHEDULED
    score_team1: int = Field(default=0, ge=0)
    score_team2: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True
        use_enum_values = True
        validate_default = True


class PoolMatchModel(BaseModel):
    """Structured match between two configured teams: pool play, semifinal or final."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    tournament_id: str
    team1_id: str
    team2_id: str
    match_type: MatchType = MatchType.POOL
    pool: Optional[int] = None # Only set for pool play
    match_round: int = Field(ge=1)
    match_number: int = Field(ge=1) # Position in the tournament's fixture list
    referee_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    status: MatchStatus = MatchStatus.SCHEDULED
    score_team1: int = Field(default=0, ge=0)
    score_team2: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True
        use_enum_values = True
        validate_default = True


AnyMatch = Union[MatchModel, PoolMatchModel]


class PointModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    match_id: str
    scoring_team: int = Field(ge=1, le=2)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    sequence: int = Field(ge=1) # Per-match ordinal, breaks timestamp ties

    class Config:
        from_attributes = True


def ledger_order(point: PointModel):
    return (point.timestamp, point.sequence)


def winning_slot(match: AnyMatch) -> Optional[int]:
    """Returns 1 or 2 for the side with the strictly higher score, None on a tie."""
    if match.score_team1 > match.score_team2:
        return 1
    if match.score_team2 > match.score_team1:
        return 2
    return None
