"""Schemas for the user administration endpoints."""

from pydantic import BaseModel

from app.models.user import UserRole
from app.schemas.auth import UserResponse


class UserRoleUpdate(BaseModel):
    """Change a user's marketplace role."""

    role: UserRole


class UserListResponse(BaseModel):
    """Paginated list of users."""

    items: list[UserResponse]
    total: int
