from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from todo_api.core.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, index=True, nullable=False)
    # each user owns their own categories
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="categories")
    task_categories = relationship(
        "TaskCategory", back_populates="category", cascade="all, delete-orphan", passive_deletes=True
    )
