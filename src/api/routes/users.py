"""User profile routes.

Endpoints:
- POST /users: Create a user
- GET /users/{user_id}: Get a user
- PUT /users/{user_id}: Partially update a user (lastLoginAt, completedLessons)
- DELETE /users/{user_id}: Delete a user

Domain errors raised by the use cases are rendered by the handlers in
api.errors; routes only deal with the success path.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import (
    get_create_user,
    get_delete_user,
    get_get_user,
    get_update_user,
)
from api.models import CreateUserRequest, ErrorResponse, UpdateUserRequest, UserResponse
from api.security import require_api_key
from services.user_use_cases import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    UpdateUserUseCase,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("", response_model=UserResponse, response_model_exclude_none=True)
async def create_user(
    request: CreateUserRequest,
    use_case: CreateUserUseCase = Depends(get_create_user),
):
    """Create a user. 400 if fields are missing or the userId is taken."""
    logger.info("Create user request received", extra={"userId": request.userId})

    user = use_case.execute(
        user_id=request.userId,
        email=request.email,
        name=request.name,
        picture=request.picture,
        created_at=request.createdAt,
        last_login_at=request.lastLoginAt,
    )

    logger.info("User created successfully", extra={"userId": user.user_id})
    return UserResponse.from_domain(user)


@router.get("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def get_user(
    user_id: str,
    use_case: GetUserUseCase = Depends(get_get_user),
):
    """Get a user by ID. The path parameter arrives percent-decoded."""
    user = use_case.execute(user_id)

    logger.info("User retrieved successfully", extra={"userId": user.user_id})
    return UserResponse.from_domain(user)


@router.put("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    use_case: UpdateUserUseCase = Depends(get_update_user),
):
    """Merge lastLoginAt and/or completedLessons into an existing user."""
    user = use_case.execute(
        user_id=user_id,
        last_login_at=request.lastLoginAt,
        completed_lessons=request.completedLessons,
    )

    logger.info("User updated successfully", extra={
        "userId": user.user_id,
        "completedLessons": len(user.completed_lessons),
    })
    return UserResponse.from_domain(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    use_case: DeleteUserUseCase = Depends(get_delete_user),
):
    """Delete a user. 204 with no body on success."""
    use_case.execute(user_id)

    logger.info("User deleted successfully", extra={"userId": user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
