"""Interface de stockage des tâches.

Le service ne dépend que de `TaskRepository` ; les deux variantes
(relationnelle et mémoire) doivent donner exactement les mêmes résultats
pour le filtrage, le tri, les patches et la détection des doublons.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, List, Optional

from app.schemas.task import TaskQuery, TaskResponse

TICK = timedelta(microseconds=1)


def bump_updated_at(previous: datetime, now: datetime) -> datetime:
    # updated_at doit augmenter strictement, même si l'horloge n'a pas bougé
    if previous is not None and now <= previous:
        return previous + TICK
    return now


class TaskRepository(ABC):
    backend = "abstract"

    @abstractmethod
    def list(self, filters: TaskQuery, limit: int) -> List[TaskResponse]:
        """Tâches filtrées et triées, au plus `limit`."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskResponse]:
        """None si absente."""

    @abstractmethod
    def add(self, task: TaskResponse) -> TaskResponse:
        """Enregistre une tâche complète. ValidationError si l'id existe déjà."""

    @abstractmethod
    def update(self, task_id: str, changes: dict[str, Any], touched_at: datetime) -> Optional[TaskResponse]:
        """Applique `changes` et rafraîchit updated_at. None si absente."""

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Idempotent."""
