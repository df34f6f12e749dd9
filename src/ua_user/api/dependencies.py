"""FastAPI dependency: get_account_service.

The service is built once in the application lifespan and kept on app.state;
tests swap it with app.dependency_overrides[get_account_service].
"""

from fastapi import Request

from src.ua_user.application.service import AccountService


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service
