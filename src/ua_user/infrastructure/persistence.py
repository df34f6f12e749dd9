"""UserRepository — concrete implementation of UserRepositoryProtocol.

Every public method opens its own session and transaction from the injected
session factory, so each call is atomic on its own. Email uniqueness is left
entirely to the uq_users_email constraint: a violation on INSERT/UPDATE is
translated into DuplicateEmailError, never pre-checked here.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import case, delete, insert, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ua_common.errors import DuplicateEmailError, StorageError
from src.ua_user.domain.models import NewUser, User, UserPatch
from src.ua_user.infrastructure.db_models import UserModel

logger = logging.getLogger(__name__)

_EMAIL_CONSTRAINT_MARKERS = ("uq_users_email", "users.email")

_users = UserModel.__table__
_USER_COLUMNS = (
    _users.c.id,
    _users.c.name,
    _users.c.email,
    _users.c.password_hash,
    _users.c.age,
    _users.c.is_active,
    _users.c.created_at,
    _users.c.updated_at,
)

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_user(row: object) -> User:
    return User(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        password_hash=row.password_hash,  # type: ignore[attr-defined]
        age=row.age,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _is_email_violation(exc: IntegrityError) -> bool:
    detail = str(exc.orig)
    return any(marker in detail for marker in _EMAIL_CONSTRAINT_MARKERS)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRepository:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def find_by_email(self, email: str) -> User | None:
        stmt = select(*_USER_COLUMNS).where(_users.c.email == email)
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).fetchone()
        except SQLAlchemyError as exc:
            raise self._storage_error("find_by_email", exc) from exc
        return _row_to_user(row) if row else None

    async def find_by_id(self, user_id: int) -> User | None:
        stmt = select(*_USER_COLUMNS).where(_users.c.id == user_id)
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).fetchone()
        except SQLAlchemyError as exc:
            raise self._storage_error("find_by_id", exc) from exc
        return _row_to_user(row) if row else None

    async def insert(self, candidate: NewUser) -> User:
        now = self._clock()
        stmt = (
            insert(_users)
            .values(
                name=candidate.name,
                email=candidate.email,
                password_hash=candidate.password_hash,
                age=candidate.age,
                is_active=candidate.is_active,
                created_at=now,
                updated_at=now,
            )
            .returning(*_USER_COLUMNS)
        )
        try:
            async with self._session_factory.begin() as session:
                row = (await session.execute(stmt)).one()
        except IntegrityError as exc:
            if _is_email_violation(exc):
                raise DuplicateEmailError(candidate.email) from exc
            raise self._storage_error("insert", exc) from exc
        except SQLAlchemyError as exc:
            raise self._storage_error("insert", exc) from exc
        return _row_to_user(row)

    async def update(self, user_id: int, patch: UserPatch) -> User | None:
        """Apply only the fields set on ``patch``; updated_at is always refreshed.

        updated_at never drops below created_at, even if this clock is behind
        the one that inserted the row.
        """
        now = literal(self._clock(), _users.c.updated_at.type)
        values = patch.present()
        values["updated_at"] = case(
            (_users.c.created_at > now, _users.c.created_at), else_=now
        )
        stmt = (
            update(_users)
            .where(_users.c.id == user_id)
            .values(**values)
            .returning(*_USER_COLUMNS)
        )
        try:
            async with self._session_factory.begin() as session:
                row = (await session.execute(stmt)).fetchone()
        except IntegrityError as exc:
            if patch.is_set("email") and _is_email_violation(exc):
                raise DuplicateEmailError(patch.email) from exc
            raise self._storage_error("update", exc) from exc
        except SQLAlchemyError as exc:
            raise self._storage_error("update", exc) from exc
        return _row_to_user(row) if row else None

    async def delete(self, user_id: int) -> bool:
        """Physically delete the row. Returns False if no row had that id."""
        stmt = delete(_users).where(_users.c.id == user_id)
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(stmt)
                deleted = result.rowcount > 0
        except SQLAlchemyError as exc:
            raise self._storage_error("delete", exc) from exc
        return deleted

    async def list_all(self) -> list[User]:
        """All users, newest first."""
        stmt = select(*_USER_COLUMNS).order_by(
            _users.c.created_at.desc(), _users.c.id.desc()
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).fetchall()
        except SQLAlchemyError as exc:
            raise self._storage_error("list_all", exc) from exc
        return [_row_to_user(row) for row in rows]

    @staticmethod
    def _storage_error(operation: str, exc: SQLAlchemyError) -> StorageError:
        logger.error("users.%s failed: %s", operation, exc.__class__.__name__, exc_info=exc)
        return StorageError()
