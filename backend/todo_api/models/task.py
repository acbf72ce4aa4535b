from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from todo_api.core.database import Base
from todo_api.models.types import UTCDateTime

class TaskItem(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=False, default="")
    priority = Column(String(10), nullable=False, default="medium")  # low, medium, high
    due_date = Column(UTCDateTime, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="tasks")
    task_categories = relationship(
        "TaskCategory", back_populates="task", cascade="all, delete-orphan", passive_deletes=True
    )
