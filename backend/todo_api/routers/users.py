import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from todo_api.core.database import get_db
from todo_api.mappers.task import task_to_response
from todo_api.mappers.user import update_user_from, user_to_entity, user_to_response
from todo_api.models.task import TaskItem
from todo_api.models.task_category import TaskCategory
from todo_api.models.user import User
from todo_api.schemas.task import TaskResponse
from todo_api.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "Not found"}},
)

async def _ensure_unique(
    db: AsyncSession,
    username: Optional[str],
    email: Optional[str],
    exclude_id: Optional[int] = None,
):
    if username is not None:
        query = select(User.id).where(User.username == username)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query)).first():
            logger.info("Rejected duplicate username %r", username)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Username {username} already exists.",
            )

    if email is not None:
        query = select(User.id).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query)).first():
            logger.info("Rejected duplicate email %r", email)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"User with the same email {email} already exists.",
            )

@router.get("/", response_model=List[UserResponse])
async def get_users(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).order_by(User.id))
    return [user_to_response(user) for user in result.scalars().all()]

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user_to_response(user)

@router.get("/{user_id}/tasks", response_model=List[TaskResponse])
async def get_user_tasks(user_id: int, db: AsyncSession = Depends(get_db)):
    """Get every task owned by the user, with its categories"""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(
            selectinload(User.tasks).selectinload(TaskItem.user),
            selectinload(User.tasks)
            .selectinload(TaskItem.task_categories)
            .selectinload(TaskCategory.category),
        )
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return [task_to_response(task) for task in sorted(user.tasks, key=lambda t: t.id)]

@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user_in: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    await _ensure_unique(db, user_in.username, user_in.email)

    new_user = user_to_entity(user_in)
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    logger.info("Created user %s (%s)", new_user.id, new_user.username)
    response.headers["Location"] = f"/users/{new_user.id}"
    return user_to_response(new_user)

@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(user_id: int, user_in: UserUpdate, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    await _ensure_unique(db, user_in.username, user_in.email, exclude_id=user_id)

    update_user_from(user, user_in)
    await db.commit()
    logger.info("Updated user %s", user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a user; their tasks and categories go with them"""
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %s", user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
