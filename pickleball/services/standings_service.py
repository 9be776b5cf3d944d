import logging
from typing import Dict, Iterable, List, Optional

from pickleball.core.locks import KeyedLock
from pickleball.exceptions import DataIntegrityAnomaly
from pickleball.models.match_model import MatchStatus, MatchType, PoolMatchModel, winning_slot
from pickleball.models.notification import EventType
from pickleball.models.standing_model import StandingModel
from pickleball.models.team_model import TeamModel
from pickleball.services.notification_service import NotificationService
from pickleball.store.base import EntityKind, EntityStore

logger = logging.getLogger(__name__)


def ranking_key(row: StandingModel):
    """Wins, then point differential, then points scored, all descending; team number breaks what is left."""
    return (-row.wins, -row.point_differential, -row.total_points_for, row.team_number)


def rank_standings(rows: Iterable[StandingModel]) -> List[StandingModel]:
    ordered = sorted(rows, key=ranking_key)
    return [row.model_copy(update={"rank": position}) for position, row in enumerate(ordered, start=1)]


def compute_standings(
    tournament_id: str,
    pool: int,
    teams: List[TeamModel],
    matches: List[PoolMatchModel],
) -> List[StandingModel]:
    """
    Builds ranked standings for one pool from scratch.
    Only completed pool-play matches count. Every team of the pool gets a
    row, including teams that have not finished a match yet.
    Raises DataIntegrityAnomaly for a completed match with a tied score or
    one that references a team outside the pool.
    """
    rows: Dict[str, StandingModel] = {
        team.id: StandingModel(tournament_id=tournament_id, pool=pool, team_id=team.id, team_number=team.team_number)
        for team in teams
    }

    for match in matches:
        if match.match_type != MatchType.POOL or match.status != MatchStatus.COMPLETED:
            continue
        if match.team1_id not in rows or match.team2_id not in rows:
            raise DataIntegrityAnomaly(
                f"Match {match.id} references a team outside pool {pool}",
                match_id=match.id, pool=pool,
            )
        slot = winning_slot(match)
        if slot is None:
            raise DataIntegrityAnomaly(
                f"Completed match {match.id} is tied {match.score_team1}-{match.score_team2}",
                match_id=match.id, pool=pool,
            )

        first, second = rows[match.team1_id], rows[match.team2_id]
        first.matches_played += 1
        second.matches_played += 1
        first.total_points_for += match.score_team1
        first.total_points_against += match.score_team2
        second.total_points_for += match.score_team2
        second.total_points_against += match.score_team1
        winner, loser = (first, second) if slot == 1 else (second, first)
        winner.wins += 1
        loser.losses += 1

    return rank_standings(rows.values())


class StandingsService:
    def __init__(self, store: EntityStore, notifications: NotificationService, locks: Optional[KeyedLock] = None):
        self.store = store
        self.notifications = notifications
        self.locks = locks or KeyedLock()

    def recompute_standings(self, tournament_id: str, pool: int) -> List[StandingModel]:
        """
        Rebuilds the pool's standings from its completed matches and swaps
        the stored set in one transaction. Serialised per pool; safe to
        repeat since the result depends only on the completed-match set.
        """
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        with self.locks.hold(("standings", tournament_id, pool)):
            teams = self.store.list(EntityKind.TEAM, tournament_id=tournament_id, pool=pool)
            matches = self.store.list(
                EntityKind.POOL_MATCH,
                tournament_id=tournament_id,
                pool=pool,
                match_type=MatchType.POOL,
                status=MatchStatus.COMPLETED,
            )
            try:
                rows = compute_standings(tournament_id, pool, teams, matches)
            except DataIntegrityAnomaly as e:
                logger.error("Standings for tournament %s pool %s not updated: %s", tournament_id, pool, e.message)
                raise

            with self.store.transaction():
                previous = self.store.list(EntityKind.STANDING, tournament_id=tournament_id, pool=pool)
                for row in previous:
                    self.store.delete(EntityKind.STANDING, row.id)
                for row in rows:
                    self.store.insert(EntityKind.STANDING, row)

            for row in previous:
                self.notifications.publish(EventType.DELETE, EntityKind.STANDING, row)
            for row in rows:
                self.notifications.publish(EventType.INSERT, EntityKind.STANDING, row)

        logger.info(
            "Recomputed standings for tournament %s pool %s from %d completed matches",
            tournament_id, pool, len(matches),
        )
        return rows

    def get_standings(self, tournament_id: str, pool: Optional[int] = None) -> List[StandingModel]:
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        filters = {"tournament_id": tournament_id}
        if pool is not None:
            filters["pool"] = pool
        rows = self.store.list(EntityKind.STANDING, **filters)
        return sorted(rows, key=lambda row: (row.pool, row.rank))
