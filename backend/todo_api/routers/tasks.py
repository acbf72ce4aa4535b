import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from todo_api.core.config import settings
from todo_api.core.database import get_db
from todo_api.mappers.task import task_to_entity, task_to_response, update_task_from
from todo_api.models.category import Category
from todo_api.models.task import TaskItem
from todo_api.models.task_category import TaskCategory
from todo_api.models.user import User
from todo_api.schemas.common import PagedResult
from todo_api.schemas.task import TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={404: {"description": "Not found"}},
)

SORT_ORDER_DESCENDING = "desc"

# Stored as labels, ranked here so "priority" sorts low < medium < high
PRIORITY_RANK = case(
    (TaskItem.priority == "low", 0),
    (TaskItem.priority == "medium", 1),
    (TaskItem.priority == "high", 2),
    else_=1,
)

SORT_COLUMNS = {
    "title": TaskItem.title,
    "priority": PRIORITY_RANK,
    "duedate": TaskItem.due_date,
    "due_date": TaskItem.due_date,
}

TASK_LOAD_OPTIONS = (
    selectinload(TaskItem.user),
    selectinload(TaskItem.task_categories).selectinload(TaskCategory.category),
)


def build_task_query(
    user_id: Optional[int] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
):
    """
    Build the filtered, ordered SELECT behind the task listing.

    Filtering by `category` matches the category name exactly. Unknown
    `sort_by` values are ignored; the id is always the final tie-breaker
    so pagination is stable.
    """
    query = select(TaskItem)

    if user_id is not None:
        query = query.where(TaskItem.user_id == user_id)

    if category:
        query = query.where(
            TaskItem.task_categories.any(TaskCategory.category.has(Category.name == category))
        )

    column = SORT_COLUMNS.get(sort_by.lower()) if sort_by else None
    if column is not None:
        descending = sort_order == SORT_ORDER_DESCENDING
        query = query.order_by(column.desc() if descending else column.asc())

    return query.order_by(TaskItem.id)


async def get_task_or_none(db: AsyncSession, task_id: int) -> Optional[TaskItem]:
    result = await db.execute(
        select(TaskItem).where(TaskItem.id == task_id).options(*TASK_LOAD_OPTIONS)
    )
    return result.scalar_one_or_none()


async def load_categories(db: AsyncSession, category_ids: List[int]) -> List[Category]:
    """Fetch the categories for `category_ids`, or 400 if any id is unknown."""
    wanted = set(category_ids)
    if not wanted:
        return []

    result = await db.execute(select(Category).where(Category.id.in_(sorted(wanted))))
    categories = result.scalars().all()
    if len(categories) != len(wanted):
        logger.info("Rejected unknown category ids in %s", sorted(wanted))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="One or more provided category IDs do not exist.",
        )
    return list(categories)


async def ensure_user_exists(db: AsyncSession, user_id: int) -> None:
    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.first() is None:
        logger.info("Rejected reference to missing user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"User with ID {user_id} does not exist.",
        )


@router.get("/", response_model=PagedResult[TaskResponse])
async def get_tasks(
    user_id: Optional[int] = None,
    category: Optional[str] = None,
    page_number: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
    db: AsyncSession = Depends(get_db),
):
    query = build_task_query(user_id, category, sort_by, sort_order)

    total_items = await db.scalar(
        select(func.count()).select_from(query.order_by(None).subquery())
    )

    result = await db.execute(
        query.options(*TASK_LOAD_OPTIONS)
        .offset((page_number - 1) * page_size)
        .limit(page_size)
    )
    tasks = result.scalars().all()

    return PagedResult[TaskResponse](
        items=[task_to_response(task) for task in tasks],
        page_number=page_number,
        page_size=page_size,
        total_items=total_items or 0,
    )

@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, db: AsyncSession = Depends(get_db)):
    task = await get_task_or_none(db, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task_to_response(task)

@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(task_in: TaskCreate, response: Response, db: AsyncSession = Depends(get_db)):
    await ensure_user_exists(db, task_in.user_id)
    categories = await load_categories(db, task_in.category_ids)

    new_task = task_to_entity(task_in)
    new_task.task_categories = [TaskCategory(category=category) for category in categories]
    db.add(new_task)
    await db.commit()

    logger.info("Created task %s for user %s", new_task.id, new_task.user_id)
    response.headers["Location"] = f"/tasks/{new_task.id}"

    # Reload with relationships for the response body
    db.expunge_all()
    return task_to_response(await get_task_or_none(db, new_task.id))

@router.put("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_task(task_id: int, task_in: TaskUpdate, db: AsyncSession = Depends(get_db)):
    task = await get_task_or_none(db, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    if task_in.user_id is not None:
        await ensure_user_exists(db, task_in.user_id)

    if task_in.category_ids is not None:
        categories = await load_categories(db, task_in.category_ids)
        wanted = {category.id for category in categories}
        current = {link.category_id for link in task.task_categories}
        for link in list(task.task_categories):
            if link.category_id not in wanted:
                task.task_categories.remove(link)
        for category in categories:
            if category.id not in current:
                task.task_categories.append(TaskCategory(category=category))

    update_task_from(task, task_in)
    await db.commit()
    logger.info("Updated task %s", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: int, db: AsyncSession = Depends(get_db)):
    task = await db.get(TaskItem, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    await db.delete(task)
    await db.commit()
    logger.info("Deleted task %s", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
