from todo_api.models.category import Category
from todo_api.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate


def category_to_response(category: Category) -> CategoryResponse:
    return CategoryResponse.model_validate(category)


def category_to_entity(dto: CategoryCreate) -> Category:
    return Category(name=dto.name, user_id=dto.user_id)


def update_category_from(category: Category, dto: CategoryUpdate) -> None:
    if dto.name is not None:
        category.name = dto.name
