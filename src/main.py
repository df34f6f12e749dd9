"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8080
      or: python -m src.main   (HOST/PORT from settings)
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import anyio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import text

from config.settings import Settings, settings
from src.ua_common.database import build_engine, build_session_factory, init_schema
from src.ua_common.errors import AppError, InternalError
from src.ua_common.logging import configure_logging
from src.ua_common.response import error_response
from src.ua_gateway.api.router import router as auth_router
from src.ua_gateway.auth.password import PasswordHasher
from src.ua_gateway.middleware.request_log import RequestLogMiddleware
from src.ua_user.api.router import router as user_router
from src.ua_user.application.service import AccountService
from src.ua_user.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
DOCS_URL = "/api/docs"


async def init_app_state(app: FastAPI, app_settings: Settings = settings) -> None:
    """Build engine, bootstrap the users table and wire the AccountService."""
    configure_logging(app_settings.LOG_LEVEL)

    engine = build_engine(
        app_settings.database_url,
        echo=app_settings.DEBUG,
        pool_size=app_settings.DATABASE_POOL_SIZE,
        max_overflow=app_settings.DATABASE_MAX_OVERFLOW,
    )
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await init_schema(engine)
    logger.info("database ready, users table ensured")

    hasher = PasswordHasher(rounds=app_settings.BCRYPT_ROUNDS)
    # Precompute the hash used for unknown-email logins
    await anyio.to_thread.run_sync(lambda: hasher.dummy_hash)

    app.state.engine = engine
    app.state.account_service = AccountService(
        UserRepository(build_session_factory(engine)),
        hasher,
    )


async def close_app_state(app: FastAPI) -> None:
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        await engine.dispose()
        app.state.engine = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: connect + create-if-absent. Shutdown: dispose the pool."""
    await init_app_state(app)
    yield
    await close_app_state(app)


app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    description="CRUD API for user accounts with password signup/login",
    docs_url=DOCS_URL,
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Origin",
        "Content-Type",
        "Content-Length",
        "Accept-Encoding",
        "X-CSRF-Token",
        "Authorization",
        "Accept",
    ],
    expose_headers=["Content-Length", "Content-Type", "X-Request-ID"],
)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(message).model_dump(exclude_none=True),
    )


def _describe_validation_errors(errors: list[dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        field = ".".join(str(p) for p in err["loc"][1:]) or "body"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("app error %d: %s", exc.code, exc.message)
    return _envelope(exc.http_status, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = list(exc.errors())
    if any(err["loc"][:1] == ("path",) for err in errors):
        return _envelope(400, "Invalid user ID")
    return _envelope(400, f"Invalid request data: {_describe_validation_errors(errors)}")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    err = InternalError()
    return _envelope(err.http_status, err.message)


app.include_router(auth_router, prefix="/api")
app.include_router(user_router, prefix="/api")


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": VERSION,
        "docs": DOCS_URL,
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {
        "status": "ok",
        "message": "Service is running",
        "time": datetime.now(timezone.utc).isoformat(),
    }


@app.api_route("/api", methods=["GET", "HEAD"], include_in_schema=False)
async def api_index() -> RedirectResponse:
    return RedirectResponse(DOCS_URL, status_code=301)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host=settings.HOST, port=settings.PORT)
