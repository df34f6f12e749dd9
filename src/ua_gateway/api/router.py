"""Auth API router: signup, login.

Login only checks credentials and returns the user's public projection;
no token or session is issued.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.ua_common.response import ApiResponse, success_response
from src.ua_user.api.dependencies import get_account_service
from src.ua_user.application.schemas import LoginRequest, SignupRequest
from src.ua_user.application.service import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="User registration",
)
async def signup(
    body: SignupRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    user = await service.signup(body.name, body.email, body.password, age=body.age)
    return success_response(user.model_dump(mode="json"))


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="User login",
)
async def login(
    body: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    user = await service.login(body.email, body.password)
    return success_response(user.model_dump(mode="json"))
