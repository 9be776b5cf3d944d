import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from pickleball.core.database import Base, create_db_engine, create_session_factory
from pickleball.exceptions import ConstraintViolation, PickleballError, RecordNotFound, StoreUnavailable
from pickleball.models import Match, Player, Point, PoolMatch, Standing, Team, Tournament
from pickleball.store.base import (
    RECORD_TYPES,
    EntityKind,
    EntityStore,
    apply_patch,
    check_filters,
    check_record,
)

logger = logging.getLogger(__name__)

TABLES = {
    EntityKind.TOURNAMENT: Tournament,
    EntityKind.PLAYER: Player,
    EntityKind.TEAM: Team,
    EntityKind.MATCH: Match,
    EntityKind.POOL_MATCH: PoolMatch,
    EntityKind.POINT: Point,
    EntityKind.STANDING: Standing,
}


def translate_error(exc: SQLAlchemyError) -> PickleballError:
    if isinstance(exc, IntegrityError):
        return ConstraintViolation(f"Constraint violated: {exc.orig}")
    return StoreUnavailable(f"Database error: {exc}")


class SQLStore(EntityStore):
    """
    SQLAlchemy-backed store. Each thread gets its own session for the
    duration of a transaction; operations outside a transaction run in a
    short transaction of their own.

    An engine on a StaticPool (in-memory SQLite) hands every session the
    same DBAPI connection, so transactions on it are serialised store-wide.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None and database_url is None:
            raise ValueError("SQLStore needs a database_url or an engine")
        self.engine = engine if engine is not None else create_db_engine(database_url)
        self.SessionLocal = create_session_factory(self.engine)
        self._local = threading.local()
        self._shared_connection = isinstance(self.engine.pool, StaticPool)
        self._connection_lock = threading.RLock()
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "session", None) is not None:
            # Nested: the outermost transaction commits
            yield
            return
        with self._connection_lock if self._shared_connection else nullcontext():
            try:
                session = self.SessionLocal()
            except SQLAlchemyError as exc:
                raise translate_error(exc) from exc
            self._local.session = session
            try:
                yield
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error("Store transaction failed: %s", exc)
                raise translate_error(exc) from exc
            except BaseException:
                session.rollback()
                raise
            finally:
                self._local.session = None
                session.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        current = getattr(self._local, "session", None)
        if current is None:
            with self.transaction():
                yield self._local.session
            return
        try:
            yield current
            current.flush()
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def _to_record(self, kind: EntityKind, row) -> BaseModel:
        return RECORD_TYPES[kind].model_validate(row)

    def _get_row(self, session: Session, kind: EntityKind, record_id: str):
        row = session.get(TABLES[kind], record_id)
        if row is None:
            raise RecordNotFound(f"{kind.value} {record_id} not found", kind=kind.value, id=record_id)
        return row

    def get(self, kind: EntityKind, record_id: str) -> BaseModel:
        kind = EntityKind(kind)
        with self._session() as session:
            return self._to_record(kind, self._get_row(session, kind, record_id))

    def list(self, kind: EntityKind, **filters: Any) -> List[BaseModel]:
        kind = EntityKind(kind)
        wanted = check_filters(kind, filters)
        with self._session() as session:
            rows = session.scalars(select(TABLES[kind]).filter_by(**wanted)).all()
            return [self._to_record(kind, row) for row in rows]

    def insert(self, kind: EntityKind, record: BaseModel) -> BaseModel:
        kind = EntityKind(kind)
        check_record(kind, record)
        with self._session() as session:
            if session.get(TABLES[kind], record.id) is not None:
                raise ConstraintViolation(f"{kind.value} {record.id} already exists", kind=kind.value, id=record.id)
            session.add(TABLES[kind](**record.model_dump()))
        return record.model_copy(deep=True)

    def update(self, kind: EntityKind, record_id: str, patch: Dict[str, Any]) -> BaseModel:
        kind = EntityKind(kind)
        with self._session() as session:
            row = self._get_row(session, kind, record_id)
            updated = apply_patch(kind, self._to_record(kind, row), patch)
            for name, value in updated.model_dump().items():
                setattr(row, name, value)
        return updated

    def delete(self, kind: EntityKind, record_id: str) -> None:
        kind = EntityKind(kind)
        with self._session() as session:
            session.delete(self._get_row(session, kind, record_id))

    def close(self) -> None:
        self.engine.dispose()
