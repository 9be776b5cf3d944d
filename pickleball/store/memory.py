import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from pydantic import BaseModel

from pickleball.exceptions import ConstraintViolation, RecordNotFound, StoreUnavailable
from pickleball.store.base import (
    UNIQUE_KEYS,
    EntityKind,
    EntityStore,
    apply_patch,
    check_filters,
    check_record,
)

logger = logging.getLogger(__name__)


class MemoryStore(EntityStore):
    """
    Process-local store. Records are kept as pydantic models and copied on
    the way in and out so callers can never mutate stored state by accident.
    A single re-entrant lock guards all tables; a transaction holds it for
    its whole duration and restores a snapshot if the block raises.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._tables: Dict[EntityKind, Dict[str, BaseModel]] = {kind: {} for kind in EntityKind}
        self._depth = 0
        self._closed = False

    def _table(self, kind: EntityKind) -> Dict[str, BaseModel]:
        if self._closed:
            raise StoreUnavailable("Memory store has been closed.", kind=kind.value)
        return self._tables[kind]

    def _check_unique(self, kind: EntityKind, record: BaseModel) -> None:
        table = self._tables[kind]
        for fields in UNIQUE_KEYS.get(kind, []):
            key = tuple(getattr(record, name) for name in fields)
            for other in table.values():
                if other.id != record.id and tuple(getattr(other, name) for name in fields) == key:
                    raise ConstraintViolation(
                        f"Duplicate {kind.value} for {dict(zip(fields, key))}",
                        kind=kind.value,
                        fields=fields,
                    )

    def get(self, kind: EntityKind, record_id: str) -> BaseModel:
        kind = EntityKind(kind)
        with self._lock:
            record = self._table(kind).get(record_id)
            if record is None:
                raise RecordNotFound(f"{kind.value} {record_id} not found", kind=kind.value, id=record_id)
            return record.model_copy(deep=True)

    def list(self, kind: EntityKind, **filters: Any) -> List[BaseModel]:
        kind = EntityKind(kind)
        wanted = check_filters(kind, filters)
        with self._lock:
            table = self._table(kind)
            return [
                record.model_copy(deep=True)
                for record in table.values()
                if all(getattr(record, name) == value for name, value in wanted.items())
            ]

    def insert(self, kind: EntityKind, record: BaseModel) -> BaseModel:
        kind = EntityKind(kind)
        check_record(kind, record)
        with self._lock:
            table = self._table(kind)
            if record.id in table:
                raise ConstraintViolation(f"{kind.value} {record.id} already exists", kind=kind.value, id=record.id)
            self._check_unique(kind, record)
            table[record.id] = record.model_copy(deep=True)
            return record.model_copy(deep=True)

    def update(self, kind: EntityKind, record_id: str, patch: Dict[str, Any]) -> BaseModel:
        kind = EntityKind(kind)
        with self._lock:
            table = self._table(kind)
            current = table.get(record_id)
            if current is None:
                raise RecordNotFound(f"{kind.value} {record_id} not found", kind=kind.value, id=record_id)
            updated = apply_patch(kind, current, patch)
            self._check_unique(kind, updated)
            table[record_id] = updated
            return updated.model_copy(deep=True)

    def delete(self, kind: EntityKind, record_id: str) -> None:
        kind = EntityKind(kind)
        with self._lock:
            table = self._table(kind)
            if record_id not in table:
                raise RecordNotFound(f"{kind.value} {record_id} not found", kind=kind.value, id=record_id)
            del table[record_id]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._closed:
                raise StoreUnavailable("Memory store has been closed.")
            snapshot = None
            if self._depth == 0:
                # Stored records are replaced, never mutated, so a shallow copy per table is enough
                snapshot = {kind: dict(table) for kind, table in self._tables.items()}
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._tables = snapshot
                    logger.debug("Memory store transaction rolled back")
                raise
            finally:
                self._depth -= 1

    def close(self) -> None:
        with self._lock:
            self._closed = True
