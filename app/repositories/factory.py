import logging

from app.repositories.base import TaskRepository
from app.repositories.memory import InMemoryRepository
from app.repositories.relational import RelationalRepository

logger = logging.getLogger(__name__)


def build_repository(settings) -> TaskRepository:
    """Choisi une fois au démarrage : base si DATABASE_URL, sinon mémoire."""
    if settings.DATABASE_URL:
        return RelationalRepository.from_url(settings.DATABASE_URL, echo=settings.SQL_ECHO)

    logger.warning("No DATABASE_URL configured, using in-memory task store (data is not persisted)")
    return InMemoryRepository()
