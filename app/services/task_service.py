"""
Task service - validation, coercion et accès au stockage

Les règles de coercition sont partagées entre création et patch, et sont
appliquées avant tout appel au repository.
"""

import logging
import math
import re
import uuid
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from functools import wraps
from typing import Any, Callable, List, Optional, Union

from app.core.errors import InternalError, NotFound, TaskStoreError, ValidationError
from app.repositories.base import TaskRepository
from app.schemas.task import TaskCreate, TaskPatch, TaskQuery, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)

PRIORITY_MIN = 1
PRIORITY_MAX = 3
PRIORITY_DEFAULT = 1
DEFAULT_LIST_LIMIT = 200

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ============ COERCITION ============

def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def clamp_priority(value: Any) -> int:
    """
    Priorité ramenée dans [1, 3].

    - entier : tel quel, flottant : tronqué
    - texte : entier en tête ("2", " 3x") sinon invalide
    - invalide ou absent -> 1
    """
    parsed = None
    if isinstance(value, bool) or value is None:
        parsed = None
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else None
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        parsed = int(match.group(1)) if match else None

    if parsed is None:
        return PRIORITY_DEFAULT
    return min(PRIORITY_MAX, max(PRIORITY_MIN, parsed))


def normalize_title(value: Any) -> str:
    title = value.strip() if isinstance(value, str) else ""
    if not title:
        raise ValidationError("title is required")
    return title


def coerce_tags(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value if tag]


def coerce_notes(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def parse_due_date(value: Any) -> Optional[datetime]:
    """Date d'échéance en UTC naïf ; valeur fausse -> pas d'échéance"""
    if not value:
        return None
    if isinstance(value, bool):
        raise ValidationError("due_date is not a valid timestamp")
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        # millisecondes epoch, comme Date.now() côté navigateur
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            raise ValidationError("due_date is not a valid timestamp")
    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            return to_utc_naive(datetime.fromisoformat(text))
        except ValueError:
            raise ValidationError("due_date is not a valid timestamp")
    raise ValidationError("due_date is not a valid timestamp")


def build_patch(data: TaskUpdate) -> TaskPatch:
    """Ne garde que les champs fournis, coercés comme à la création."""
    supplied = data.supplied()
    values = {}
    if "title" in supplied:
        values["title"] = normalize_title(supplied["title"])
    if "completed" in supplied:
        values["completed"] = bool(supplied["completed"])
    if "priority" in supplied:
        values["priority"] = clamp_priority(supplied["priority"])
    if "due_date" in supplied:
        values["due_date"] = parse_due_date(supplied["due_date"])
    if "tags" in supplied:
        values["tags"] = coerce_tags(supplied["tags"])
    if "notes" in supplied:
        values["notes"] = coerce_notes(supplied["notes"])
    return TaskPatch(**values)


def require_id(task_id: Any) -> str:
    if task_id is None or not str(task_id).strip():
        raise ValidationError("id required")
    return str(task_id)


def new_task_id(value: Any) -> str:
    # id fourni mais vide (ou blanc) -> id généré, sinon get/delete le refuseraient
    if value is None or not str(value).strip():
        return str(uuid.uuid4())
    return str(value)


def _storage_boundary(method):
    # erreurs métier -> telles quelles ; le reste -> InternalError (détail loggé seulement)
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except TaskStoreError:
            raise
        except Exception as e:
            logger.exception(f"Task store failure in {method.__name__} ({self.backend}): {e}")
            raise InternalError() from e
    return wrapper


# ============ SERVICE ============

class TaskService:
    def __init__(
        self,
        repository: TaskRepository,
        clock: Callable[[], datetime] = utcnow,
        list_limit: int = DEFAULT_LIST_LIMIT,
    ):
        self.repository = repository
        self.clock = clock
        self.list_limit = list_limit

    @property
    def backend(self) -> str:
        return self.repository.backend

    @_storage_boundary
    def list_tasks(self, filters: Optional[TaskQuery] = None) -> List[TaskResponse]:
        return self.repository.list(filters or TaskQuery(), self.list_limit)

    @_storage_boundary
    def get_task(self, task_id: Any) -> TaskResponse:
        task = self.repository.get(require_id(task_id))
        if task is None:
            raise NotFound()
        return task

    @_storage_boundary
    def create_task(self, data: Union[TaskCreate, Mapping]) -> TaskResponse:
        if isinstance(data, Mapping):
            data = TaskCreate.model_validate(data)

        title = normalize_title(data.title)
        task_id = new_task_id(data.id)
        now = self.clock()
        task = TaskResponse(
            id=task_id,
            title=title,
            completed=bool(data.completed),
            priority=clamp_priority(data.priority),
            due_date=parse_due_date(data.due_date),
            tags=coerce_tags(data.tags),
            notes=coerce_notes(data.notes),
            created_at=now,
            updated_at=now,
        )
        created = self.repository.add(task)
        logger.info("Task created id=%s", created.id)
        return created

    @_storage_boundary
    def update_task(self, task_id: Any, data: Union[TaskUpdate, TaskPatch, Mapping]) -> TaskResponse:
        task_id = require_id(task_id)
        if isinstance(data, Mapping):
            data = TaskUpdate.model_validate(data)
        patch = data if isinstance(data, TaskPatch) else build_patch(data)
        if patch.is_empty():
            raise ValidationError("no fields to update")

        updated = self.repository.update(task_id, patch.changes(), self.clock())
        if updated is None:
            raise NotFound()
        logger.info("Task updated id=%s fields=%s", task_id, sorted(patch.changes()))
        return updated

    @_storage_boundary
    def delete_task(self, task_id: Any) -> None:
        task_id = require_id(task_id)
        self.repository.delete(task_id)
        logger.info("Task deleted id=%s", task_id)
