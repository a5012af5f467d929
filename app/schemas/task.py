"""Pydantic schemas for task request/response validation."""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

STATUSES = ("all", "active", "completed")
SORTS = ("created", "due", "priority")

PATCHABLE_FIELDS = ("title", "completed", "priority", "due_date", "tags", "notes")


# Les corps de requête restent permissifs : la coercition est faite par le service
# (priorité "abc" -> 1, tags non-liste -> [], ...), pas par pydantic.

class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Any] = None
    title: Any = None
    completed: Any = False
    priority: Any = None
    due_date: Any = None
    tags: Any = None
    notes: Any = None


class TaskUpdate(BaseModel):
    """Patch partiel : seuls les champs présents dans le corps sont appliqués."""
    model_config = ConfigDict(extra="ignore")

    title: Any = None
    completed: Any = None
    priority: Any = None
    due_date: Any = None
    tags: Any = None
    notes: Any = None

    def supplied(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in PATCHABLE_FIELDS if name in self.model_fields_set}


class TaskResponse(BaseModel):
    id: str
    title: str
    completed: bool
    priority: int
    due_date: Optional[datetime]
    tags: List[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskQuery(BaseModel):
    """Filtres de liste ; les valeurs inconnues retombent sur les défauts."""

    q: str = ""
    status: str = "all"
    sort: str = "created"

    @field_validator("q", mode="before")
    @classmethod
    def _strip_q(cls, value):
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value):
        value = (value or "").strip().lower() if isinstance(value, str) else ""
        return value if value in STATUSES else "all"

    @field_validator("sort", mode="before")
    @classmethod
    def _known_sort(cls, value):
        value = (value or "").strip().lower() if isinstance(value, str) else ""
        return value if value in SORTS else "created"


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskPatch:
    """Valeurs déjà coercées ; UNSET = champ absent du patch."""

    title: Union[str, _Unset] = UNSET
    completed: Union[bool, _Unset] = UNSET
    priority: Union[int, _Unset] = UNSET
    due_date: Union[Optional[datetime], _Unset] = UNSET
    tags: Union[List[str], _Unset] = UNSET
    notes: Union[Optional[str], _Unset] = UNSET

    def changes(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def is_empty(self) -> bool:
        return not self.changes()
