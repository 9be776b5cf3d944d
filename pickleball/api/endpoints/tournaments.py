from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from pickleball.api.dependencies import get_tournament_service
from pickleball.models.player_model import PlayerModel
from pickleball.models.tournament_model import TournamentModel
from pickleball.schemas import tournament_schemas
from pickleball.services.tournament_service import TournamentService

router = APIRouter()


@router.post("", response_model=TournamentModel, status_code=status.HTTP_201_CREATED, summary="Create Tournament")
def create_tournament(
    tournament_in: tournament_schemas.TournamentCreate,
    service: TournamentService = Depends(get_tournament_service),
):
    """
    Creates a tournament.

    - **name**: 1-100 characters.
    - **start_date** / **end_date** (optional): the end date may not be before the start date.
    """
    try:
        tournament = TournamentModel(**tournament_in.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return service.create_tournament(tournament)


@router.get("", response_model=List[TournamentModel], summary="List Tournaments")
def list_tournaments(
    organizer_id: Optional[str] = Query(None, description="Only tournaments created by this organizer"),
    service: TournamentService = Depends(get_tournament_service),
):
    return service.list_tournaments(organizer_id=organizer_id)


@router.get("/{tournament_id}", response_model=TournamentModel, summary="Get Tournament")
def get_tournament(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: TournamentService = Depends(get_tournament_service),
):
    return service.get_tournament(tournament_id)


@router.patch("/{tournament_id}", response_model=TournamentModel, summary="Update Tournament Details")
def update_tournament(
    tournament_in: tournament_schemas.TournamentUpdate,
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: TournamentService = Depends(get_tournament_service),
):
    """Only the administrative fields (name, location, dates) can be changed."""
    patch = tournament_in.model_dump(exclude_unset=True)
    if not patch:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="No fields to update")
    try:
        return service.update_tournament(tournament_id, patch)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# --- Players ---

@router.post("/{tournament_id}/players", response_model=PlayerModel, status_code=status.HTTP_201_CREATED, summary="Add Manual Player")
def add_manual_player(
    player_in: tournament_schemas.ManualPlayerCreate,
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: TournamentService = Depends(get_tournament_service),
):
    """Adds a player without an account. Names must be unique within the tournament."""
    try:
        return service.add_manual_player(tournament_id, player_in.name, email=player_in.email, phone=player_in.phone)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/{tournament_id}/players", response_model=List[PlayerModel], summary="List Players")
def list_players(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    service: TournamentService = Depends(get_tournament_service),
):
    service.get_tournament(tournament_id)
    return service.list_players(tournament_id)


@router.delete("/{tournament_id}/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove Player")
def remove_player(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    player_id: str = Path(..., description="The ID of the player to remove"),
    service: TournamentService = Depends(get_tournament_service),
):
    service.remove_player(tournament_id, player_id)
