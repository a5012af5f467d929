"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, Text
from app.core.database import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True, index=True)

    title = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(Integer, nullable=False, default=1)
    due_date = Column(DateTime, nullable=True, index=True)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    # toujours renseignés par le service (UTC naïf)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)
