from typing import Optional

from pickleball.core.config import Settings, settings as default_settings
from pickleball.core.locks import KeyedLock
from pickleball.services.bracket_service import BracketService
from pickleball.services.match_service import MatchService
from pickleball.services.notification_service import NotificationService
from pickleball.services.scheduler_service import SchedulerService
from pickleball.services.standings_service import StandingsService
from pickleball.services.tournament_service import TournamentService
from pickleball.store import EntityStore, create_store


class ServiceContainer:
    """All engine services wired to one store, one notifier and one lock registry."""

    def __init__(self, store: EntityStore, notifications: NotificationService):
        self.store = store
        self.notifications = notifications
        # Shared so that every service agrees on what a given key guards
        self.locks = KeyedLock()
        self.tournaments = TournamentService(store, notifications, self.locks)
        self.standings = StandingsService(store, notifications, self.locks)
        self.scheduler = SchedulerService(store, notifications, self.locks)
        self.matches = MatchService(store, notifications, self.standings, self.locks)
        self.bracket = BracketService(store, notifications, self.standings, self.locks)

    def close(self) -> None:
        self.store.close()


def build_services(
    settings: Optional[Settings] = None,
    store: Optional[EntityStore] = None,
    notifications: Optional[NotificationService] = None,
) -> ServiceContainer:
    settings = settings or default_settings
    if store is None:
        store = create_store(settings)
    if notifications is None:
        notifications = NotificationService(queue_size=settings.NOTIFICATION_QUEUE_SIZE)
    return ServiceContainer(store, notifications)
