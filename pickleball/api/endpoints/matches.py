from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from pickleball.api.dependencies import get_match_service
from pickleball.models.match_model import AnyMatch, MatchModel, PointModel
from pickleball.schemas import match_schemas
from pickleball.services.match_service import MatchService

router = APIRouter()


@router.post("", response_model=MatchModel, status_code=status.HTTP_201_CREATED, summary="Create Freeform Match")
def create_match(
    match_in: match_schemas.MatchCreate,
    service: MatchService = Depends(get_match_service),
):
    """
    Creates a singles or doubles match outside the pool bracket.

    - **team1_players** / **team2_players**: one or two player IDs each, no player on both sides.
    - **scheduled_at**: required.
    """
    return service.create_match(
        match_in.tournament_id,
        match_in.team1_players,
        match_in.team2_players,
        match_in.scheduled_at,
        referee_id=match_in.referee_id,
    )


@router.get("/live", response_model=List[AnyMatch], summary="List Live Matches")
def list_live_matches(
    tournament_id: Optional[str] = Query(None, description="Restrict to one tournament"),
    service: MatchService = Depends(get_match_service),
):
    return service.list_live_matches(tournament_id=tournament_id)


@router.get("/referee/{referee_id}", response_model=List[AnyMatch], summary="List Referee Matches")
def list_referee_matches(
    referee_id: str = Path(..., description="The referee's user ID"),
    service: MatchService = Depends(get_match_service),
):
    return service.list_referee_matches(referee_id)


@router.get("/{match_id}", response_model=AnyMatch, summary="Get Match")
def get_match(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.get_match(match_id)


@router.get("/{match_id}/points", response_model=List[PointModel], summary="Get Point Ledger")
def list_points(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.list_points(match_id)


@router.get("/{match_id}/score", response_model=match_schemas.ScoreRead, summary="Get Score from Ledger")
def get_score(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    points = service.list_points(match_id)
    score_team1, score_team2 = service.get_score(match_id)
    return match_schemas.ScoreRead(
        match_id=match_id,
        score_team1=score_team1,
        score_team2=score_team2,
        points_recorded=len(points),
    )


@router.post("/{match_id}/start", response_model=AnyMatch, summary="Start Match")
def start_match(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.start_match(match_id)


@router.post("/{match_id}/points", response_model=AnyMatch, summary="Record Point")
def record_point(
    point_in: match_schemas.PointCreate,
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.record_point(match_id, point_in.team)


@router.post("/{match_id}/undo", response_model=AnyMatch, summary="Undo Last Point")
def undo_last_point(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.undo_last_point(match_id)


@router.post("/{match_id}/end", response_model=AnyMatch, summary="End Match")
def end_match(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.end_match(match_id)


@router.put("/{match_id}/referee", response_model=AnyMatch, summary="Assign Referee")
def assign_referee(
    referee_in: match_schemas.RefereeAssignment,
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    return service.assign_referee(match_id, referee_in.referee_id)


@router.get("/{match_id}/verify", response_model=AnyMatch, summary="Verify Score Against Ledger")
def verify_ledger(
    match_id: str = Path(..., description="The ID of the match"),
    service: MatchService = Depends(get_match_service),
):
    """Returns the match if its score agrees with its point ledger, 500 otherwise."""
    return service.verify_ledger(match_id)
