"""AccountService — user lifecycle and password authentication.

The service owns no connection state: the repository and password hasher are
constructed once by the application and injected here. Input shape is
validated by the request schemas before any method is called.

Email uniqueness is decided by the store's unique constraint. Any pre-check
done here is advisory; a DuplicateEmailError from the store is the final word
and always surfaces as EmailExistsError (409).
"""

import logging

import anyio

from src.ua_common.errors import (
    DuplicateEmailError,
    EmailExistsError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from src.ua_gateway.auth.password import PasswordHasher
from src.ua_user.application.schemas import UserResponse
from src.ua_user.domain.models import NewUser, UserPatch
from src.ua_user.domain.repository import UserRepositoryProtocol

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, repo: UserRepositoryProtocol, hasher: PasswordHasher) -> None:
        self._repo = repo
        self._hasher = hasher

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        age: int | None = None,
        is_active: bool | None = None,
    ) -> UserResponse:
        password_hash = await self._hash(password)
        candidate = NewUser(
            name=name,
            email=email,
            password_hash=password_hash,
            age=age,
            is_active=True if is_active is None else is_active,
        )
        try:
            user = await self._repo.insert(candidate)
        except DuplicateEmailError:
            raise EmailExistsError(email) from None

        logger.info("user created id=%d", user.id)
        return UserResponse.from_domain(user)

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        age: int | None = None,
    ) -> UserResponse:
        """Self-service registration: same as create_user, always active."""
        return await self.create_user(name, email, password, age=age, is_active=True)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> UserResponse:
        """Check credentials and return the user's public projection.

        Note: "no such email" and "wrong password" both raise
        InvalidCredentialsError, and an unknown email still pays for one
        bcrypt verification, so neither the response nor its timing tells
        the two apart.
        """
        user = await self._repo.find_by_email(email)
        if user is None:
            await self._verify(password, self._hasher.dummy_hash)
            logger.info("login rejected")
            raise InvalidCredentialsError()

        if not await self._verify(password, user.password_hash):
            logger.info("login rejected")
            raise InvalidCredentialsError()

        logger.info("login ok id=%d", user.id)
        return UserResponse.from_domain(user)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_user(self, user_id: int) -> UserResponse:
        user = await self._repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserResponse.from_domain(user)

    async def list_users(self) -> list[UserResponse]:
        users = await self._repo.list_all()
        return [UserResponse.from_domain(u) for u in users]

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def update_user(self, user_id: int, patch: UserPatch) -> UserResponse:
        """Merge only the fields set on ``patch`` (used for both PUT and PATCH)."""
        existing = await self._repo.find_by_id(user_id)
        if existing is None:
            raise UserNotFoundError(user_id)

        if patch.is_set("email") and patch.email != existing.email:
            holder = await self._repo.find_by_email(patch.email)
            if holder is not None and holder.id != user_id:
                raise EmailExistsError(patch.email, taken_on_update=True)

        try:
            updated = await self._repo.update(user_id, patch)
        except DuplicateEmailError:
            raise EmailExistsError(patch.email, taken_on_update=True) from None

        # Deleted between the read and the write
        if updated is None:
            raise UserNotFoundError(user_id)

        logger.info("user updated id=%d fields=%s", user_id, sorted(patch.present()))
        return UserResponse.from_domain(updated)

    async def delete_user(self, user_id: int) -> None:
        if not await self._repo.delete(user_id):
            raise UserNotFoundError(user_id)
        logger.info("user deleted id=%d", user_id)

    # ------------------------------------------------------------------
    # bcrypt is CPU-bound; keep it off the event loop
    # ------------------------------------------------------------------

    async def _hash(self, password: str) -> str:
        return await anyio.to_thread.run_sync(self._hasher.hash, password)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await anyio.to_thread.run_sync(self._hasher.verify, password, password_hash)
