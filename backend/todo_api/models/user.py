from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from todo_api.core.database import Base
from todo_api.models.types import UTCDateTime

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(UTCDateTime, server_default=func.now())

    # Relationships
    tasks = relationship(
        "TaskItem", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    categories = relationship(
        "Category", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
