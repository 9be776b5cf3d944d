from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from pickleball.api.dependencies import get_scheduler_service
from pickleball.models.match_model import MatchType, PoolMatchModel
from pickleball.models.team_model import TeamModel
from pickleball.schemas import team_schemas
from pickleball.services.scheduler_service import SchedulerService

router = APIRouter()


@router.post("/{tournament_id}/teams", response_model=List[TeamModel], summary="Configure Teams")
def configure_teams(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: SchedulerService = Depends(get_scheduler_service),
):
    """Creates teams 1-6 (teams 1-3 in pool 1, 4-6 in pool 2). Existing teams are returned as they are."""
    return service.configure_teams(tournament_id)


@router.get("/{tournament_id}/teams", response_model=List[TeamModel], summary="List Teams")
def list_teams(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: SchedulerService = Depends(get_scheduler_service),
):
    return service.list_teams(tournament_id)


@router.post("/{tournament_id}/teams/{team_id}/players", response_model=TeamModel, summary="Assign Players to Team")
def assign_players(
    players_in: team_schemas.AssignPlayersRequest,
    tournament_id: str = Path(..., description="The ID of the tournament"),
    team_id: str = Path(..., description="The ID of the team"),
    service: SchedulerService = Depends(get_scheduler_service),
):
    service.get_team(tournament_id, team_id)
    return service.assign_players(team_id, players_in.player_ids)


@router.delete("/{tournament_id}/teams/{team_id}/players/{player_id}", response_model=TeamModel, summary="Remove Player from Team")
def remove_team_player(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    team_id: str = Path(..., description="The ID of the team"),
    player_id: str = Path(..., description="The ID of the player"),
    service: SchedulerService = Depends(get_scheduler_service),
):
    service.get_team(tournament_id, team_id)
    return service.remove_player(team_id, player_id)


@router.post(
    "/{tournament_id}/pool-matches",
    response_model=List[PoolMatchModel],
    status_code=status.HTTP_201_CREATED,
    summary="Generate Pool Matches",
)
def generate_pool_matches(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: SchedulerService = Depends(get_scheduler_service),
):
    """Generates the 12 pool-play matches once. A second call is rejected with 409."""
    return service.generate_pool_matches(tournament_id)


@router.get("/{tournament_id}/pool-matches", response_model=List[PoolMatchModel], summary="List Pool and Bracket Matches")
def list_pool_matches(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    match_type: Optional[MatchType] = Query(None, description="pool, semifinal or final"),
    service: SchedulerService = Depends(get_scheduler_service),
):
    return service.list_pool_matches(tournament_id, match_type=match_type)
