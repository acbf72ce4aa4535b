import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from todo_api.core.database import get_db
from todo_api.mappers.category import category_to_response
from todo_api.models.category import Category
from todo_api.models.task import TaskItem
from todo_api.models.task_category import TaskCategory
from todo_api.schemas.category import CategoryResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks/{task_id}/categories",
    tags=["task-categories"],
    responses={404: {"description": "Not found"}},
)

@router.get("/", response_model=List[CategoryResponse])
async def get_task_categories(task_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(TaskItem)
        .where(TaskItem.id == task_id)
        .options(selectinload(TaskItem.task_categories).selectinload(TaskCategory.category))
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    links = sorted(task.task_categories, key=lambda tc: tc.category_id)
    return [category_to_response(link.category) for link in links]

@router.post("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_category(task_id: int, category_id: int, db: AsyncSession = Depends(get_db)):
    """Link an existing category to an existing task"""
    if await db.get(TaskItem, task_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Task with id {task_id} does not exist.",
        )

    if await db.get(Category, category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Category with id {category_id} does not exist.",
        )

    if await db.get(TaskCategory, (task_id, category_id)) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This category is already assigned to the task.",
        )

    db.add(TaskCategory(task_id=task_id, category_id=category_id))
    await db.commit()
    logger.info("Assigned category %s to task %s", category_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_category(task_id: int, category_id: int, db: AsyncSession = Depends(get_db)):
    link = await db.get(TaskCategory, (task_id, category_id))
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category is not assigned to the task")

    await db.delete(link)
    await db.commit()
    logger.info("Removed category %s from task %s", category_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
