from pydantic import BaseModel, Field
from typing import List

class AssignPlayersRequest(BaseModel):
    """Payload for adding players to a team roster."""
    player_ids: List[str] = Field(..., min_length=1, max_length=2, description="IDs of the players to add.")
