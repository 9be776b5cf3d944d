from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from pickleball.api.dependencies import get_bracket_service, get_match_service, get_standings_service
from pickleball.models.bracket_model import BracketModel
from pickleball.models.match_model import MatchModel, PoolMatchModel
from pickleball.models.standing_model import StandingModel
from pickleball.models.team_model import POOLS
from pickleball.services.bracket_service import BracketService
from pickleball.services.match_service import MatchService
from pickleball.services.standings_service import StandingsService

router = APIRouter()


@router.get("/{tournament_id}/standings", response_model=List[StandingModel], summary="Get Pool Standings")
def get_standings(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    pool: Optional[int] = Query(None, ge=1, le=2, description="Restrict to one pool"),
    service: StandingsService = Depends(get_standings_service),
):
    return service.get_standings(tournament_id, pool=pool)


@router.post("/{tournament_id}/standings/recompute", response_model=List[StandingModel], summary="Recompute Pool Standings")
def recompute_standings(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    pool: Optional[int] = Query(None, ge=1, le=2, description="Recompute one pool only"),
    service: StandingsService = Depends(get_standings_service),
):
    pools = [pool] if pool is not None else list(POOLS)
    rows: List[StandingModel] = []
    for number in pools:
        rows.extend(service.recompute_standings(tournament_id, number))
    return rows


@router.post(
    "/{tournament_id}/semifinals",
    response_model=List[PoolMatchModel],
    status_code=status.HTTP_201_CREATED,
    summary="Generate Semifinals",
)
def generate_semifinals(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: BracketService = Depends(get_bracket_service),
):
    """Requires all 12 pool matches to be completed."""
    return service.generate_semifinals(tournament_id)


@router.post("/{tournament_id}/final", response_model=PoolMatchModel, status_code=status.HTTP_201_CREATED, summary="Generate Final")
def generate_final(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: BracketService = Depends(get_bracket_service),
):
    """Requires both semifinals to be completed."""
    return service.generate_final(tournament_id)


@router.get("/{tournament_id}/bracket", response_model=BracketModel, summary="Get Bracket")
def get_bracket(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: BracketService = Depends(get_bracket_service),
):
    return service.get_bracket(tournament_id)


@router.get("/{tournament_id}/matches", response_model=List[MatchModel], summary="List Freeform Matches")
def list_tournament_matches(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: MatchService = Depends(get_match_service),
):
    return service.list_matches(tournament_id)
