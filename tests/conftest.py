import pytest

from pickleball.models.match_model import MatchType
from pickleball.models.tournament_model import TournamentModel
from pickleball.services.container import ServiceContainer
from pickleball.services.notification_service import NotificationService
from pickleball.store.base import EntityKind
from pickleball.store.memory import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notifications():
    return NotificationService(queue_size=1024)


@pytest.fixture
def services(store, notifications):
    container = ServiceContainer(store, notifications)
    yield container
    container.close()


@pytest.fixture
def tournament(services):
    return services.tournaments.create_tournament(TournamentModel(name="Spring Open", location="Riverside Courts"))


@pytest.fixture
def teams(services, tournament):
    return services.scheduler.configure_teams(tournament.id)


@pytest.fixture
def pool_matches(services, tournament, teams):
    return services.scheduler.generate_pool_matches(tournament.id)


@pytest.fixture
def play_match(services):
    """Drives a match through the referee flow: start, one call per point, end."""
    def play(match_id, score_team1, score_team2):
        services.matches.start_match(match_id)
        for _ in range(score_team1):
            services.matches.record_point(match_id, 1)
        for _ in range(score_team2):
            services.matches.record_point(match_id, 2)
        return services.matches.end_match(match_id)
    return play


@pytest.fixture
def complete_match(store):
    """Marks a bracket match completed with a final score, bypassing the ledger."""
    def complete(match_id, score_team1, score_team2):
        return store.update(
            EntityKind.POOL_MATCH,
            match_id,
            {"status": "completed", "score_team1": score_team1, "score_team2": score_team2},
        )
    return complete


@pytest.fixture
def find_pool_match(services, tournament, pool_matches):
    """Looks up a generated pool match by the team numbers on each side."""
    def find(team1_number, team2_number):
        numbers = {t.id: t.team_number for t in services.scheduler.list_teams(tournament.id)}
        for match in services.scheduler.list_pool_matches(tournament.id, match_type=MatchType.POOL):
            if (numbers[match.team1_id], numbers[match.team2_id]) == (team1_number, team2_number):
                return match
        raise LookupError(f"No pool match {team1_number} vs {team2_number}")
    return find
