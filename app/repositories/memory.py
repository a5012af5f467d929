from datetime import datetime
from typing import Any, List, Optional

from app.core.errors import ValidationError
from app.repositories.base import TaskRepository, bump_updated_at
from app.schemas.task import TaskQuery, TaskResponse


def sort_tasks(tasks: List[TaskResponse], sort: str) -> List[TaskResponse]:
    # tris stables successifs : clé la moins importante en premier
    ordered = sorted(tasks, key=lambda t: t.id)
    ordered.sort(key=lambda t: t.created_at, reverse=True)
    if sort == "due":
        ordered.sort(key=lambda t: (t.due_date is None, t.due_date or datetime.min))
    elif sort == "priority":
        ordered.sort(key=lambda t: t.priority)
    return ordered


def matches_text(task: TaskResponse, needle: str) -> bool:
    needle = needle.lower()
    return needle in task.title.lower() or needle in (task.notes or "").lower()


class InMemoryRepository(TaskRepository):
    """
    Stockage non durable, pour tester l'app sans base.

    Perdu au redémarrage, non partagé entre processus, non synchronisé.
    """

    backend = "memory"

    def __init__(self):
        self._tasks: dict[str, TaskResponse] = {}

    def list(self, filters: TaskQuery, limit: int) -> List[TaskResponse]:
        tasks = list(self._tasks.values())

        if filters.q:
            tasks = [t for t in tasks if matches_text(t, filters.q)]

        if filters.status == "active":
            tasks = [t for t in tasks if not t.completed]
        elif filters.status == "completed":
            tasks = [t for t in tasks if t.completed]

        return [t.model_copy(deep=True) for t in sort_tasks(tasks, filters.sort)[:limit]]

    def get(self, task_id: str) -> Optional[TaskResponse]:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    def add(self, task: TaskResponse) -> TaskResponse:
        if task.id in self._tasks:
            raise ValidationError("task id already exists")
        self._tasks[task.id] = task.model_copy(deep=True)
        return task.model_copy(deep=True)

    def update(self, task_id: str, changes: dict[str, Any], touched_at: datetime) -> Optional[TaskResponse]:
        current = self._tasks.get(task_id)
        if current is None:
            return None
        updated = current.model_copy(update={
            **changes,
            "updated_at": bump_updated_at(current.updated_at, touched_at),
        }, deep=True)
        self._tasks[task_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)

    def __len__(self) -> int:
        return len(self._tasks)
