import itertools
import logging
from typing import Dict, List, Optional, Tuple

from pickleball.core.locks import KeyedLock
from pickleball.exceptions import (
    AlreadyGenerated,
    ConstraintViolation,
    InvalidTeamConfiguration,
    RecordNotFound,
)
from pickleball.models.match_model import MatchType, PoolMatchModel
from pickleball.models.notification import EventType
from pickleball.models.team_model import (
    MAX_PLAYERS_PER_TEAM,
    POOLS,
    TEAM_COUNT,
    TEAMS_PER_POOL,
    TeamModel,
    pool_for_team_number,
)
from pickleball.services.notification_service import NotificationService
from pickleball.store.base import EntityKind, EntityStore

logger = logging.getLogger(__name__)

ROUNDS_PER_POOL = 2


def round_robin_fixtures(teams: List[TeamModel]) -> List[Tuple[int, TeamModel, TeamModel]]:
    """
    Double round-robin for one pool: every pair meets once per round.
    Round 1 lists pairs in team-number order, (1,2), (1,3), (2,3); round 2
    repeats them with home and away swapped, (2,1), (3,1), (3,2).
    """
    ordered = sorted(teams, key=lambda t: t.team_number)
    pairs = list(itertools.combinations(ordered, 2))
    return [(1, home, away) for home, away in pairs] + [(2, away, home) for home, away in pairs]


class SchedulerService:
    def __init__(self, store: EntityStore, notifications: NotificationService, locks: Optional[KeyedLock] = None):
        self.store = store
        self.notifications = notifications
        self.locks = locks or KeyedLock()

    # --- Team configuration ---

    def list_teams(self, tournament_id: str) -> List[TeamModel]:
        return sorted(self.store.list(EntityKind.TEAM, tournament_id=tournament_id), key=lambda t: t.team_number)

    def get_team(self, tournament_id: str, team_id: str) -> TeamModel:
        team = self.store.get(EntityKind.TEAM, team_id)
        if team.tournament_id != tournament_id:
            raise RecordNotFound(f"Team {team_id} is not part of tournament {tournament_id}", team_id=team_id)
        return team

    def configure_teams(self, tournament_id: str) -> List[TeamModel]:
        """
        Creates the six teams of a tournament (1-3 in pool 1, 4-6 in pool 2).
        Returns the existing teams unchanged if they were already created.
        """
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        with self.locks.hold(("teams", tournament_id)):
            existing = self.list_teams(tournament_id)
            if existing:
                return existing

            teams = [
                TeamModel(
                    tournament_id=tournament_id,
                    team_number=number,
                    pool=pool_for_team_number(number),
                    name=f"Team {number}",
                )
                for number in range(1, TEAM_COUNT + 1)
            ]
            with self.store.transaction():
                for team in teams:
                    self.store.insert(EntityKind.TEAM, team)

            for team in teams:
                self.notifications.publish(EventType.INSERT, EntityKind.TEAM, team)
        logger.info("Configured %d teams for tournament %s", len(teams), tournament_id)
        return teams

    def assign_players(self, team_id: str, player_ids: List[str]) -> TeamModel:
        """Adds players to a team's roster, keeping at most two per team and one team per player."""
        team = self.store.get(EntityKind.TEAM, team_id)
        with self.locks.hold(("teams", team.tournament_id)):
            team = self.store.get(EntityKind.TEAM, team_id)
            if len(set(player_ids)) != len(player_ids):
                raise ConstraintViolation("The same player was listed twice", team_id=team_id)
            if len(team.player_ids) + len(player_ids) > MAX_PLAYERS_PER_TEAM:
                raise ConstraintViolation(
                    f"Team {team.team_number} can have at most {MAX_PLAYERS_PER_TEAM} players",
                    team_id=team_id,
                )

            assigned: Dict[str, int] = {}
            for other in self.store.list(EntityKind.TEAM, tournament_id=team.tournament_id):
                for player_id in other.player_ids:
                    assigned[player_id] = other.team_number
            for player_id in player_ids:
                player = self.store.get(EntityKind.PLAYER, player_id)
                if player.tournament_id is not None and player.tournament_id != team.tournament_id:
                    raise ConstraintViolation(
                        f"Player {player.name} belongs to another tournament",
                        team_id=team_id, player_id=player_id,
                    )
                if player_id in assigned:
                    raise ConstraintViolation(
                        f"Player {player_id} is already on team {assigned[player_id]}",
                        team_id=team_id, player_id=player_id,
                    )

            updated = self.store.update(EntityKind.TEAM, team_id, {"player_ids": team.player_ids + list(player_ids)})
            self.notifications.publish(EventType.UPDATE, EntityKind.TEAM, updated)
        logger.info("Added %d player(s) to team %s", len(player_ids), team_id)
        return updated

    def remove_player(self, team_id: str, player_id: str) -> TeamModel:
        team = self.store.get(EntityKind.TEAM, team_id)
        with self.locks.hold(("teams", team.tournament_id)):
            team = self.store.get(EntityKind.TEAM, team_id)
            if player_id not in team.player_ids:
                raise RecordNotFound(f"Player {player_id} is not on team {team.team_number}", team_id=team_id, player_id=player_id)
            roster = [p for p in team.player_ids if p != player_id]
            updated = self.store.update(EntityKind.TEAM, team_id, {"player_ids": roster})
            self.notifications.publish(EventType.UPDATE, EntityKind.TEAM, updated)
        return updated

    # --- Fixture generation ---

    def _teams_by_pool(self, tournament_id: str) -> Dict[int, List[TeamModel]]:
        by_pool: Dict[int, List[TeamModel]] = {pool: [] for pool in POOLS}
        for team in self.list_teams(tournament_id):
            if team.pool not in by_pool:
                raise InvalidTeamConfiguration(f"Team {team.team_number} is in unknown pool {team.pool}", tournament_id=tournament_id)
            by_pool[team.pool].append(team)

        for pool, teams in by_pool.items():
            if len(teams) != TEAMS_PER_POOL:
                raise InvalidTeamConfiguration(
                    f"Pool {pool} has {len(teams)} teams, expected {TEAMS_PER_POOL}",
                    tournament_id=tournament_id, pool=pool, teams=len(teams),
                )
        return by_pool

    def generate_pool_matches(self, tournament_id: str) -> List[PoolMatchModel]:
        """
        One-time generation of the 12 pool-play matches (6 per pool, every
        team playing 4). Not idempotent: a second call raises AlreadyGenerated.
        """
        self.store.get(EntityKind.TOURNAMENT, tournament_id)
        with self.locks.hold(("bracket", tournament_id)):
            existing = self.store.list(EntityKind.POOL_MATCH, tournament_id=tournament_id, match_type=MatchType.POOL)
            if existing:
                logger.warning("Pool matches already generated for tournament %s", tournament_id)
                raise AlreadyGenerated(
                    f"Pool matches already generated for tournament {tournament_id}",
                    tournament_id=tournament_id, existing=len(existing),
                )

            by_pool = self._teams_by_pool(tournament_id)
            matches: List[PoolMatchModel] = []
            for pool in POOLS:
                for match_round, home, away in round_robin_fixtures(by_pool[pool]):
                    matches.append(PoolMatchModel(
                        tournament_id=tournament_id,
                        team1_id=home.id,
                        team2_id=away.id,
                        match_type=MatchType.POOL,
                        pool=pool,
                        match_round=match_round,
                        match_number=len(matches) + 1,
                    ))

            with self.store.transaction():
                for match in matches:
                    self.store.insert(EntityKind.POOL_MATCH, match)

            for match in matches:
                self.notifications.publish(EventType.INSERT, EntityKind.POOL_MATCH, match)
        logger.info("Generated %d pool matches for tournament %s", len(matches), tournament_id)
        return matches

    def list_pool_matches(self, tournament_id: str, match_type: Optional[MatchType] = None) -> List[PoolMatchModel]:
        filters = {"tournament_id": tournament_id}
        if match_type is not None:
            filters["match_type"] = match_type
        return sorted(self.store.list(EntityKind.POOL_MATCH, **filters), key=lambda m: m.match_number)
