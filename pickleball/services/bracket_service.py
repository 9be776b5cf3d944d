import logging
from typing import Dict, List, Optional

from pickleball.core.locks import KeyedLock
from pickleball.exceptions import (
    AlreadyGenerated,
    DataIntegrityAnomaly,
    PoolPlayIncomplete,
    SemifinalsIncomplete,
)
from pickleball.models.bracket_model import BracketModel
from pickleball.models.match_model import MatchStatus, MatchType, PoolMatchModel, winning_slot
from pickleball.models.notification import EventType
from pickleball.models.standing_model import StandingModel
from pickleball.models.team_model import POOLS, TEAMS_PER_POOL
from pickleball.services.notification_service import NotificationService
from pickleball.services.standings_service import StandingsService
from pickleball.store.base import EntityKind, EntityStore

logger = logging.getLogger(__name__)

# Each pool plays a double round-robin: n * (n - 1) matches per pool
POOL_MATCH_TOTAL = len(POOLS) * TEAMS_PER_POOL * (TEAMS_PER_POOL - 1)


def winner_team_id(match: PoolMatchModel) -> str:
    slot = winning_slot(match)
    if slot is None:
        raise DataIntegrityAnomaly(
            f"Completed {match.match_type} {match.id} is tied {match.score_team1}-{match.score_team2}",
            match_id=match.id,
        )
    return match.team1_id if slot == 1 else match.team2_id


class BracketService:
    """
    Advances a tournament from pool play to the semifinals and final.
    Pairings are fixed: pool 1 winner meets pool 2 runner-up in semifinal 1,
    pool 2 winner meets pool 1 runner-up in semifinal 2, and the two
    semifinal winners meet in the final. Third place in each pool is out.
    """

    def __init__(
        self,
        store: EntityStore,
        notifications: NotificationService,
        standings_service: StandingsService,
        locks: Optional[KeyedLock] = None,
    ):
        self.store = store
        self.notifications = notifications
        self.standings_service = standings_service
        self.locks = locks or KeyedLock()

    def _matches(self, tournament_id: str, match_type: MatchType) -> List[PoolMatchModel]:
        matches = self.store.list(EntityKind.POOL_MATCH, tournament_id=tournament_id, match_type=match_type)
        return sorted(matches, key=lambda m: m.match_number)

    def _next_match_number(self, tournament_id: str) -> int:
        matches = self.store.list(EntityKind.POOL_MATCH, tournament_id=tournament_id)
        return max((m.match_number for m in matches), default=0) + 1

    def _insert_all(self, matches: List[PoolMatchModel]) -> None:
        with self.store.transaction():
            for match in matches:
                self.store.insert(EntityKind.POOL_MATCH, match)
        for match in matches:
            self.notifications.publish(EventType.INSERT, EntityKind.POOL_MATCH, match)

    def generate_semifinals(self, tournament_id: str) -> List[PoolMatchModel]:
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        with self.locks.hold(("bracket", tournament_id)):
            pool_matches = self._matches(tournament_id, MatchType.POOL)
            completed = [m for m in pool_matches if m.status == MatchStatus.COMPLETED]
            if len(pool_matches) != POOL_MATCH_TOTAL or len(completed) != POOL_MATCH_TOTAL:
                logger.warning(
                    "Semifinals refused for tournament %s: %d of %d pool matches completed",
                    tournament_id, len(completed), POOL_MATCH_TOTAL,
                )
                raise PoolPlayIncomplete(
                    f"{len(completed)} of {POOL_MATCH_TOTAL} pool matches completed",
                    tournament_id=tournament_id, completed=len(completed), required=POOL_MATCH_TOTAL,
                )
            if self._matches(tournament_id, MatchType.SEMIFINAL):
                raise AlreadyGenerated(f"Semifinals already generated for tournament {tournament_id}", tournament_id=tournament_id)

            # Rebuild from the completed set rather than trusting stored rows
            standings: Dict[int, List[StandingModel]] = {
                pool: self.standings_service.recompute_standings(tournament_id, pool) for pool in POOLS
            }
            pool1, pool2 = standings[1], standings[2]
            number = self._next_match_number(tournament_id)
            semifinals = [
                PoolMatchModel(
                    tournament_id=tournament_id,
                    team1_id=pool1[0].team_id,
                    team2_id=pool2[1].team_id,
                    match_type=MatchType.SEMIFINAL,
                    match_round=1,
                    match_number=number,
                ),
                PoolMatchModel(
                    tournament_id=tournament_id,
                    team1_id=pool2[0].team_id,
                    team2_id=pool1[1].team_id,
                    match_type=MatchType.SEMIFINAL,
                    match_round=2,
                    match_number=number + 1,
                ),
            ]
            self._insert_all(semifinals)

        eliminated = [rows[-1].team_number for rows in standings.values()]
        logger.info("Generated semifinals for tournament %s; teams %s eliminated", tournament_id, eliminated)
        return semifinals

    def generate_final(self, tournament_id: str) -> PoolMatchModel:
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        with self.locks.hold(("bracket", tournament_id)):
            semifinals = sorted(self._matches(tournament_id, MatchType.SEMIFINAL), key=lambda m: m.match_round)
            completed = [m for m in semifinals if m.status == MatchStatus.COMPLETED]
            if len(semifinals) != 2 or len(completed) != 2:
                logger.warning("Final refused for tournament %s: %d of 2 semifinals completed", tournament_id, len(completed))
                raise SemifinalsIncomplete(
                    f"{len(completed)} of 2 semifinals completed",
                    tournament_id=tournament_id, completed=len(completed),
                )
            if self._matches(tournament_id, MatchType.FINAL):
                raise AlreadyGenerated(f"Final already generated for tournament {tournament_id}", tournament_id=tournament_id)

            final = PoolMatchModel(
                tournament_id=tournament_id,
                team1_id=winner_team_id(semifinals[0]),
                team2_id=winner_team_id(semifinals[1]),
                match_type=MatchType.FINAL,
                match_round=1,
                match_number=self._next_match_number(tournament_id),
            )
            self._insert_all([final])
        logger.info("Generated final for tournament %s", tournament_id)
        return final

    def get_bracket(self, tournament_id: str) -> BracketModel:
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        finals = self._matches(tournament_id, MatchType.FINAL)
        final = finals[0] if finals else None
        champion = None
        if final is not None and final.status == MatchStatus.COMPLETED:
            champion = winner_team_id(final)
        return BracketModel(
            tournament_id=tournament_id,
            pool_matches=self._matches(tournament_id, MatchType.POOL),
            semifinals=sorted(self._matches(tournament_id, MatchType.SEMIFINAL), key=lambda m: m.match_round),
            final=final,
            champion_team_id=champion,
        )
