from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from pickleball.core.database import Base
import datetime

class Standing(Base):
    __tablename__ = "pool_standings"
    __table_args__ = (UniqueConstraint("tournament_id", "pool", "team_id", name="uq_standing_team"),)

    id = Column(String(36), primary_key=True, index=True)
    tournament_id = Column(String(36), ForeignKey("tournaments.id"), index=True)
    pool = Column(Integer, nullable=False)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False)
    team_number = Column(Integer, nullable=False)
    rank = Column(Integer, nullable=False)
    matches_played = Column(Integer, default=0)
    wins = Column(Integer, default=0)
    losses = Column(Integer, default=0)
    total_points_for = Column(Integer, default=0)
    total_points_against = Column(Integer, default=0)
    computed_at = Column(DateTime, default=datetime.datetime.utcnow)
