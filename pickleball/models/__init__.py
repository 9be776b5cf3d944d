from pickleball.core.database import Base

# Import all tables here to ensure they are registered with Base
from .tournament import Tournament, Player
from .team import Team
from .match import Match, PoolMatch, Point
from .standing import Standing

# Tables are created by the SQL store on start-up (Base.metadata.create_all),
# not at import time.
