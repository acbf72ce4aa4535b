from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from todo_api.schemas.category import CategoryResponse
from todo_api.schemas.user import UserResponse

class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    is_completed: bool = False
    description: str = ""
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    user_id: int
    # Optional list of categories to link the task to
    category_ids: List[int] = []

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    is_completed: Optional[bool] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    user_id: Optional[int] = None  # reassignment
    category_ids: Optional[List[int]] = None  # replaces the current links

class TaskResponse(BaseModel):
    id: int
    title: str
    is_completed: bool
    description: str
    priority: TaskPriority
    due_date: Optional[datetime]

    # Related data
    user: Optional[UserResponse] = None
    categories: List[CategoryResponse] = []

    class Config:
        from_attributes = True
