from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field

class EventType(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

class ChangeEvent(BaseModel):
    event_type: EventType
    kind: str # EntityKind value
    record: Dict[str, Any]
    published_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True
        validate_default = True
