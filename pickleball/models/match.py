from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON
from pickleball.core.database import Base
import datetime

class Match(Base):
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, index=True)
    tournament_id = Column(String(36), ForeignKey("tournaments.id"), index=True)
    team1_players = Column(JSON, nullable=False)
    team2_players = Column(JSON, nullable=False)
    referee_id = Column(String(36), nullable=True, index=True)
    scheduled_at = Column(DateTime, nullable=False)
    status = Column(String, default="scheduled") # "scheduled", "live", "completed"
    score_team1 = Column(Integer, default=0)
    score_team2 = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class PoolMatch(Base):
    __tablename__ = "pool_matches"

    id = Column(String(36), primary_key=True, index=True)
    tournament_id = Column(String(36), ForeignKey("tournaments.id"), index=True)
    team1_id = Column(String(36), ForeignKey("teams.id"))
    team2_id = Column(String(36), ForeignKey("teams.id"))
    match_type = Column(String, default="pool") # "pool", "semifinal", "final"
    pool = Column(Integer, nullable=True)
    match_round = Column(Integer, nullable=False)
    match_number = Column(Integer, nullable=False)
    referee_id = Column(String(36), nullable=True, index=True)
    scheduled_at = Column(DateTime, nullable=True)
    status = Column(String, default="scheduled")
    score_team1 = Column(Integer, default=0)
    score_team2 = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class Point(Base):
    __tablename__ = "points"

    id = Column(String(36), primary_key=True, index=True)
    # Either a matches.id or a pool_matches.id, so no foreign key
    match_id = Column(String(36), nullable=False, index=True)
    scoring_team = Column(Integer, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    sequence = Column(Integer, nullable=False)
