from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, UniqueConstraint
from pickleball.core.database import Base
import datetime

class Team(Base):
    __tablename__ = "teams"
    __table_args__ = (UniqueConstraint("tournament_id", "team_number", name="uq_team_number"),)

    id = Column(String(36), primary_key=True, index=True)
    tournament_id = Column(String(36), ForeignKey("tournaments.id"), nullable=False, index=True)
    team_number = Column(Integer, nullable=False)
    pool = Column(Integer, nullable=False)
    name = Column(String, default="")
    player_ids = Column(JSON, default=list) # Ordered, at most 2 for doubles
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
