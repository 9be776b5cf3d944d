"""Entity store contract.

The engine never talks to a database directly. Every service receives an
``EntityStore`` and reads and writes records by kind and id through it, so
the persistence technology can be swapped (in-memory for tests and local
runs, SQLAlchemy for anything durable).
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple, Type

from pydantic import BaseModel

from pickleball.exceptions import ConstraintViolation
from pickleball.models.match_model import MatchModel, PointModel, PoolMatchModel
from pickleball.models.player_model import PlayerModel
from pickleball.models.standing_model import StandingModel
from pickleball.models.team_model import TeamModel
from pickleball.models.tournament_model import TournamentModel


class EntityKind(str, Enum):
    TOURNAMENT = "tournament"
    PLAYER = "player"
    TEAM = "team"
    MATCH = "match"
    POOL_MATCH = "pool_match"
    POINT = "point"
    STANDING = "standing"


RECORD_TYPES: Dict[EntityKind, Type[BaseModel]] = {
    EntityKind.TOURNAMENT: TournamentModel,
    EntityKind.PLAYER: PlayerModel,
    EntityKind.TEAM: TeamModel,
    EntityKind.MATCH: MatchModel,
    EntityKind.POOL_MATCH: PoolMatchModel,
    EntityKind.POINT: PointModel,
    EntityKind.STANDING: StandingModel,
}

# Field combinations that must be unique among records of a kind
UNIQUE_KEYS: Dict[EntityKind, List[Tuple[str, ...]]] = {
    EntityKind.TEAM: [("tournament_id", "team_number")],
    EntityKind.STANDING: [("tournament_id", "pool", "team_id")],
}


def normalize_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def check_filters(kind: EntityKind, filters: Dict[str, Any]) -> Dict[str, Any]:
    """Rejects unknown filter fields and unwraps enum values."""
    fields = RECORD_TYPES[kind].model_fields
    unknown = [name for name in filters if name not in fields]
    if unknown:
        raise ValueError(f"Unknown filter field(s) for {kind.value}: {', '.join(sorted(unknown))}")
    return {name: normalize_value(value) for name, value in filters.items()}


def check_record(kind: EntityKind, record: BaseModel) -> None:
    expected = RECORD_TYPES[kind]
    if not isinstance(record, expected):
        raise TypeError(f"Expected {expected.__name__} for {kind.value}, got {type(record).__name__}")


def apply_patch(kind: EntityKind, record: BaseModel, patch: Dict[str, Any]) -> BaseModel:
    """Returns a new, re-validated record with ``patch`` applied."""
    if "id" in patch and patch["id"] != record.id:
        raise ConstraintViolation(f"{kind.value} id cannot be changed.", kind=kind.value, id=record.id)
    fields = type(record).model_fields
    unknown = [name for name in patch if name not in fields]
    if unknown:
        raise ValueError(f"Unknown field(s) for {kind.value}: {', '.join(sorted(unknown))}")
    data = record.model_dump()
    data.update({name: normalize_value(value) for name, value in patch.items()})
    return type(record)(**data)


class EntityStore(ABC):
    """
    Durable record store keyed by entity id.

    ``list`` returns records in no guaranteed order; callers sort.
    Writes issued inside ``transaction()`` commit together or not at all.
    Errors: RecordNotFound, ConstraintViolation (distinct from not-found),
    StoreUnavailable for collaborator failures. Nothing is retried here.
    """

    @abstractmethod
    def get(self, kind: EntityKind, record_id: str) -> BaseModel:
        ...

    @abstractmethod
    def list(self, kind: EntityKind, **filters: Any) -> List[BaseModel]:
        ...

    @abstractmethod
    def insert(self, kind: EntityKind, record: BaseModel) -> BaseModel:
        ...

    @abstractmethod
    def update(self, kind: EntityKind, record_id: str, patch: Dict[str, Any]) -> BaseModel:
        ...

    @abstractmethod
    def delete(self, kind: EntityKind, record_id: str) -> None:
        ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        ...

    def close(self) -> None:
        pass
