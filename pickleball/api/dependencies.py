from fastapi import Depends, Request

from pickleball.services.bracket_service import BracketService
from pickleball.services.container import ServiceContainer
from pickleball.services.match_service import MatchService
from pickleball.services.scheduler_service import SchedulerService
from pickleball.services.standings_service import StandingsService
from pickleball.services.tournament_service import TournamentService


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_tournament_service(services: ServiceContainer = Depends(get_services)) -> TournamentService:
    return services.tournaments


def get_scheduler_service(services: ServiceContainer = Depends(get_services)) -> SchedulerService:
    return services.scheduler


def get_match_service(services: ServiceContainer = Depends(get_services)) -> MatchService:
    return services.matches


def get_standings_service(services: ServiceContainer = Depends(get_services)) -> StandingsService:
    return services.standings


def get_bracket_service(services: ServiceContainer = Depends(get_services)) -> BracketService:
    return services.bracket
