import logging
from typing import Any, Dict, List, Optional

from pickleball.core.locks import KeyedLock
from pickleball.exceptions import ConstraintViolation, RecordNotFound
from pickleball.models.notification import EventType
from pickleball.models.player_model import PlayerModel
from pickleball.models.tournament_model import ADMINISTRATIVE_FIELDS, TournamentModel
from pickleball.services.notification_service import NotificationService
from pickleball.store.base import EntityKind, EntityStore

logger = logging.getLogger(__name__)


class TournamentService:
    def __init__(self, store: EntityStore, notifications: NotificationService, locks: Optional[KeyedLock] = None):
        self.store = store
        self.notifications = notifications
        self.locks = locks or KeyedLock()

    def create_tournament(self, tournament: TournamentModel) -> TournamentModel:
        created = self.store.insert(EntityKind.TOURNAMENT, tournament)
        logger.info("Created tournament %s (%s)", created.name, created.id)
        self.notifications.publish(EventType.INSERT, EntityKind.TOURNAMENT, created)
        return created

    def get_tournament(self, tournament_id: str) -> TournamentModel:
        return self.store.get(EntityKind.TOURNAMENT, tournament_id)

    def list_tournaments(self, organizer_id: Optional[str] = None) -> List[TournamentModel]:
        filters = {}
        if organizer_id is not None:
            filters["organizer_id"] = organizer_id
        tournaments = self.store.list(EntityKind.TOURNAMENT, **filters)
        return sorted(tournaments, key=lambda t: t.created_at, reverse=True)

    def update_tournament(self, tournament_id: str, patch: Dict[str, Any]) -> TournamentModel:
        """Changes administrative fields only (name, location, dates)."""
        if "id" in patch and patch["id"] != tournament_id:
            raise ValueError("Tournament ID cannot be changed.")
        protected = sorted(set(patch) - ADMINISTRATIVE_FIELDS - {"id"})
        if protected:
            raise ValueError(f"Field(s) cannot be changed after creation: {', '.join(protected)}")

        changes = {name: value for name, value in patch.items() if name != "id"}
        updated = self.store.update(EntityKind.TOURNAMENT, tournament_id, changes)
        self.notifications.publish(EventType.UPDATE, EntityKind.TOURNAMENT, updated)
        return updated

    # --- Players ---

    def list_players(self, tournament_id: str) -> List[PlayerModel]:
        players = self.store.list(EntityKind.PLAYER, tournament_id=tournament_id)
        return sorted(players, key=lambda p: p.name.lower())

    def add_manual_player(
        self,
        tournament_id: str,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> PlayerModel:
        """Adds a tournament-scoped player without an account. Names are unique per tournament, ignoring case."""
        self.get_tournament(tournament_id)
        player = PlayerModel(name=name, email=email or None, phone=phone, tournament_id=tournament_id)

        with self.locks.hold(("players", tournament_id)):
            for other in self.store.list(EntityKind.PLAYER, tournament_id=tournament_id):
                if other.name.lower() == player.name.lower():
                    raise ConstraintViolation(
                        f"A player named {player.name} already exists in this tournament",
                        tournament_id=tournament_id, name=player.name,
                    )
            created = self.store.insert(EntityKind.PLAYER, player)

        logger.info("Added manual player %s to tournament %s", created.name, tournament_id)
        self.notifications.publish(EventType.INSERT, EntityKind.PLAYER, created)
        return created

    def register_player(self, player: PlayerModel) -> PlayerModel:
        """Stores a registered (account-backed) player that tournaments reference by id only."""
        if player.tournament_id is not None:
            raise ValueError("Registered players are not owned by a tournament.")
        created = self.store.insert(EntityKind.PLAYER, player)
        self.notifications.publish(EventType.INSERT, EntityKind.PLAYER, created)
        return created

    def remove_player(self, tournament_id: str, player_id: str) -> None:
        player = self.store.get(EntityKind.PLAYER, player_id)
        if player.tournament_id != tournament_id:
            raise RecordNotFound(f"Player {player_id} is not part of tournament {tournament_id}", player_id=player_id)

        for team in self.store.list(EntityKind.TEAM, tournament_id=tournament_id):
            if player_id in team.player_ids:
                raise ConstraintViolation(
                    f"Player {player.name} is on team {team.team_number}; remove them from the team first",
                    player_id=player_id, team_id=team.id,
                )
        self.store.delete(EntityKind.PLAYER, player_id)
        logger.info("Removed player %s from tournament %s", player_id, tournament_id)
        self.notifications.publish(EventType.DELETE, EntityKind.PLAYER, player)
