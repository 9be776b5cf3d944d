from typing import List, Optional

from pydantic import BaseModel, Field

from pickleball.models.match_model import PoolMatchModel

class BracketModel(BaseModel):
    tournament_id: str
    pool_matches: List[PoolMatchModel] = Field(default_factory=list)
    semifinals: List[PoolMatchModel] = Field(default_factory=list)
    final: Optional[PoolMatchModel] = None
    champion_team_id: Optional[str] = None

    class Config:
        from_attributes = True

    @property
    def pool_play_complete(self) -> bool:
        return bool(self.pool_matches) and all(m.status == "completed" for m in self.pool_matches)
