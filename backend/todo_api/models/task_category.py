from datetime import datetime, timezone
from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship
from todo_api.core.database import Base
from todo_api.models.types import UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskCategory(Base):
    __tablename__ = "task_categories"

    # Composite key: a (task, category) pair can only be linked once
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)
    assigned_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    # Relationships
    task = relationship("TaskItem", back_populates="task_categories")
    category = relationship("Category", back_populates="task_categories")
