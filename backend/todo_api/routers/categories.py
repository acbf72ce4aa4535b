import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from todo_api.core.database import get_db
from todo_api.mappers.category import category_to_entity, category_to_response, update_category_from
from todo_api.mappers.task import task_to_response
from todo_api.models.category import Category
from todo_api.models.task import TaskItem
from todo_api.models.task_category import TaskCategory
from todo_api.models.user import User
from todo_api.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from todo_api.schemas.task import TaskResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/categories",
    tags=["categories"],
    responses={404: {"description": "Not found"}},
)

def _name_conflict(name: str) -> HTTPException:
    logger.info("Rejected duplicate category name %r", name)
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Category with name {name} already exists.",
    )

@router.get("/", response_model=List[CategoryResponse])
async def get_categories(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Category).order_by(Category.id))
    return [category_to_response(category) for category in result.scalars().all()]

@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category_to_response(category)

@router.get("/{category_id}/tasks", response_model=List[TaskResponse])
async def get_category_tasks(category_id: int, db: AsyncSession = Depends(get_db)):
    """Get the tasks linked to a category"""
    result = await db.execute(
        select(Category)
        .where(Category.id == category_id)
        .options(
            selectinload(Category.task_categories)
            .selectinload(TaskCategory.task)
            .selectinload(TaskItem.user),
            selectinload(Category.task_categories)
            .selectinload(TaskCategory.task)
            .selectinload(TaskItem.task_categories)
            .selectinload(TaskCategory.category),
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    links = sorted(category.task_categories, key=lambda tc: tc.task_id)
    return [task_to_response(link.task) for link in links]

@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(category_in: CategoryCreate, response: Response, db: AsyncSession = Depends(get_db)):
    # Check that the owner exists
    result = await db.execute(select(User.id).where(User.id == category_in.user_id))
    if result.first() is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"User with ID {category_in.user_id} does not exist.",
        )

    result = await db.execute(select(Category.id).where(Category.name == category_in.name))
    if result.first():
        raise _name_conflict(category_in.name)

    new_category = category_to_entity(category_in)
    db.add(new_category)
    await db.commit()
    await db.refresh(new_category)

    logger.info("Created category %s (%s)", new_category.id, new_category.name)
    response.headers["Location"] = f"/api/categories/{new_category.id}"
    return category_to_response(new_category)

@router.put("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_category(category_id: int, category_in: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    if category_in.name is not None:
        result = await db.execute(
            select(Category.id).where(Category.name == category_in.name, Category.id != category_id)
        )
        if result.first():
            raise _name_conflict(category_in.name)

    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    update_category_from(category, category_in)
    await db.commit()
    logger.info("Updated category %s", category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    await db.delete(category)
    await db.commit()
    logger.info("Deleted category %s", category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
