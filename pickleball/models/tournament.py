from sqlalchemy import Column, String, ForeignKey, Date, DateTime
from pickleball.core.database import Base
import datetime

class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    location = Column(String, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    organizer_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class Player(Base):
    __tablename__ = "players"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    tournament_id = Column(String(36), ForeignKey("tournaments.id"), nullable=True, index=True) # Null for registered players
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
