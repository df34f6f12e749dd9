"""Unified API response wrapper.

All API endpoints return this format:
{
    "success": true,
    "data": { ... },     // omitted when empty
    "message": "..."     // omitted when empty
}
"""

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool = True
    data: Any = None
    message: str | None = None


def success_response(data: Any = None, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)


def error_response(message: str) -> ApiResponse:
    return ApiResponse(success=False, data=None, message=message)
