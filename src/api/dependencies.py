from fastapi import HTTPException, Request

from services.context import ServiceContext
from services.user_use_cases import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    UpdateUserUseCase,
)


def get_context(request: Request) -> ServiceContext:
    """Return the ServiceContext built at startup, raising 503 if missing."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return context


def get_create_user(request: Request) -> CreateUserUseCase:
    return CreateUserUseCase(get_context(request))


def get_get_user(request: Request) -> GetUserUseCase:
    return GetUserUseCase(get_context(request))


def get_update_user(request: Request) -> UpdateUserUseCase:
    return UpdateUserUseCase(get_context(request))


def get_delete_user(request: Request) -> DeleteUserUseCase:
    return DeleteUserUseCase(get_context(request))
