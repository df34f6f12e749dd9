"""ua_user REST endpoints.

POST   /users, /users/   — create (201)
GET    /users, /users/   — list, newest first
GET    /users/{user_id}  — detail
PUT    /users/{user_id}  — partial merge (same as PATCH)
PATCH  /users/{user_id}  — partial merge
DELETE /users/{user_id}  — physical delete
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.ua_common.response import ApiResponse, success_response
from src.ua_user.api.dependencies import get_account_service
from src.ua_user.application.schemas import CreateUserRequest, UpdateUserRequest
from src.ua_user.application.service import AccountService
from src.ua_user.domain.models import UserPatch

router = APIRouter(prefix="/users", tags=["users"])

Service = Annotated[AccountService, Depends(get_account_service)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Create a new user",
)
@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def create_user(body: CreateUserRequest, service: Service) -> ApiResponse:
    user = await service.create_user(
        body.name,
        body.email,
        body.password,
        age=body.age,
        is_active=body.is_active,
    )
    return success_response(user.model_dump(mode="json"))


@router.get(
    "",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Get all users",
)
@router.get(
    "/",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def list_users(service: Service) -> ApiResponse:
    users = await service.list_users()
    return success_response([u.model_dump(mode="json") for u in users])


@router.get(
    "/{user_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Get user by ID",
)
async def get_user(user_id: int, service: Service) -> ApiResponse:
    user = await service.get_user(user_id)
    return success_response(user.model_dump(mode="json"))


@router.api_route(
    "/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Update user",
)
async def update_user(user_id: int, body: UpdateUserRequest, service: Service) -> ApiResponse:
    patch = UserPatch.from_mapping(body.model_dump(exclude_unset=True))
    user = await service.update_user(user_id, patch)
    return success_response(user.model_dump(mode="json"))


@router.delete(
    "/{user_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Delete user",
)
async def delete_user(user_id: int, service: Service) -> ApiResponse:
    await service.delete_user(user_id)
    return success_response(message="User deleted successfully")
