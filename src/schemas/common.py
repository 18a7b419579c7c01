"""Shared schema definitions.

Enumerations used across users, assignments and submissions, the common
pydantic base model, and helpers for merging partial updates.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Type, TypeVar

import pytz
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class Section(str, Enum):
    EINSTEIN_G11 = "EINSTEIN_G11"
    GALILEI_G12 = "GALILEI_G12"
    NONE = "NONE"


class SubmissionStatus(str, Enum):
    ON_TIME = "ON_TIME"
    LATE = "LATE"


class TrackerModel(BaseModel):
    """Base model persisted with camelCase keys.

    Python code uses snake_case attributes; the durable store and the HTTP
    surface use camelCase names. Both are accepted on input. Instances are immutable; updates build new copies.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_state(self) -> Dict[str, Any]:
        """Dump to the JSON-compatible form stored in the durable store."""
        return self.model_dump(mode="json", by_alias=True)


M = TypeVar("M", bound=TrackerModel)


def utc_now_iso() -> str:
    return datetime.now(pytz.utc).isoformat()


def normalize_fields(model_cls: Type[TrackerModel], data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map camelCase or snake_case keys onto field names, dropping unknown keys."""
    lookup: Dict[str, str] = {}
    for name, field in model_cls.model_fields.items():
        lookup[name] = name
        if field.alias:
            lookup[field.alias] = name
    return {lookup[key]: value for key, value in data.items() if key in lookup}


def merge_fields(model: M, updates: Mapping[str, Any]) -> M:
    """Return a validated copy of ``model`` with ``updates`` merged in.

    The identifier is never overwritten.
    """
    changes = normalize_fields(type(model), updates)
    changes.pop("id", None)
    merged = model.model_dump()
    merged.update(changes)
    return type(model).model_validate(merged)
