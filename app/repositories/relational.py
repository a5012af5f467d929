import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import String, func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.core.database import Base, make_engine, make_session_factory
from app.core.errors import ValidationError
from app.models.task import Task
from app.repositories.base import TaskRepository, bump_updated_at
from app.schemas.task import TaskQuery, TaskResponse

logger = logging.getLogger(__name__)


def _lower(expr):
    return func.lower(expr, type_=String)


class RelationalRepository(TaskRepository):
    """Stockage durable via SQLAlchemy (PostgreSQL/Neon en prod, SQLite en local)."""

    backend = "relational"

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.engine = engine
        self._session_factory = make_session_factory(engine)
        if create_schema:
            # Init DB
            Base.metadata.create_all(bind=engine)
        logger.info("Relational task store ready url=%s", engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "RelationalRepository":
        return cls(make_engine(url, echo=echo))

    def list(self, filters: TaskQuery, limit: int) -> List[TaskResponse]:
        with self._session_factory() as db:
            query = db.query(Task)

            if filters.q:
                # contains() lie le paramètre et échappe % et _
                needle = filters.q.lower()
                query = query.filter(or_(
                    _lower(Task.title).contains(needle, autoescape=True),
                    _lower(func.coalesce(Task.notes, "")).contains(needle, autoescape=True),
                ))

            if filters.status == "active":
                query = query.filter(Task.completed.is_(False))
            elif filters.status == "completed":
                query = query.filter(Task.completed.is_(True))

            if filters.sort == "due":
                query = query.order_by(Task.due_date.is_(None), Task.due_date.asc())
            elif filters.sort == "priority":
                query = query.order_by(Task.priority.asc())
            query = query.order_by(Task.created_at.desc(), Task.id.asc())

            return [TaskResponse.model_validate(row) for row in query.limit(limit).all()]

    def get(self, task_id: str) -> Optional[TaskResponse]:
        with self._session_factory() as db:
            row = db.get(Task, task_id)
            return TaskResponse.model_validate(row) if row else None

    def add(self, task: TaskResponse) -> TaskResponse:
        with self._session_factory() as db:
            row = Task(**task.model_dump())
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise ValidationError("task id already exists")
            return TaskResponse.model_validate(row)

    def update(self, task_id: str, changes: dict[str, Any], touched_at: datetime) -> Optional[TaskResponse]:
        with self._session_factory() as db:
            row = db.get(Task, task_id)
            if row is None:
                return None
            for name, value in changes.items():
                setattr(row, name, value)
            row.updated_at = bump_updated_at(row.updated_at, touched_at)
            db.commit()
            return TaskResponse.model_validate(row)

    def delete(self, task_id: str) -> None:
        with self._session_factory() as db:
            db.query(Task).filter(Task.id == task_id).delete(synchronize_session=False)
            db.commit()
