from todo_api.models.user import User
from todo_api.schemas.user import UserCreate, UserResponse, UserUpdate


def user_to_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def user_to_entity(dto: UserCreate) -> User:
    return User(username=dto.username, email=dto.email)


def update_user_from(user: User, dto: UserUpdate) -> None:
    """Copy only the fields the client actually sent."""
    if dto.username is not None:
        user.username = dto.username
    if dto.email is not None:
        user.email = dto.email
