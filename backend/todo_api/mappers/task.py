"""
Conversions between TaskItem rows and the task DTOs.

`task_to_response` reads `task.user` and `task.task_categories[*].category`,
so callers must eager-load both relationships (async sessions cannot
lazy-load on attribute access).
"""
from todo_api.mappers.category import category_to_response
from todo_api.mappers.user import user_to_response
from todo_api.models.task import TaskItem
from todo_api.schemas.task import TaskCreate, TaskResponse, TaskUpdate


def task_to_response(task: TaskItem) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        is_completed=task.is_completed,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        user=user_to_response(task.user) if task.user is not None else None,
        categories=[category_to_response(tc.category) for tc in task.task_categories],
    )


def task_to_entity(dto: TaskCreate) -> TaskItem:
    # category links are attached by the caller once the ids are verified
    return TaskItem(
        title=dto.title,
        is_completed=dto.is_completed,
        description=dto.description,
        priority=dto.priority.value,
        due_date=dto.due_date,
        user_id=dto.user_id,
    )


def update_task_from(task: TaskItem, dto: TaskUpdate) -> None:
    """
    Partial update of the scalar columns.

    Fields left out of the request (or sent as null) keep their current
    value. `category_ids` is not handled here since replacing links needs
    the database.
    """
    if dto.title is not None:
        task.title = dto.title
    if dto.is_completed is not None:
        task.is_completed = dto.is_completed
    if dto.description is not None:
        task.description = dto.description
    if dto.priority is not None:
        task.priority = dto.priority.value
    if dto.due_date is not None:
        task.due_date = dto.due_date
    if dto.user_id is not None:
        task.user_id = dto.user_id
