"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Contract shared by every implementation:
  - each call is atomic on its own (one transaction per call)
  - insert/update raise DuplicateEmailError when the unique email
    constraint rejects the write
  - backend failures raise StorageError
"""

from typing import Protocol

from src.ua_user.domain.models import NewUser, User, UserPatch


class UserRepositoryProtocol(Protocol):
    async def find_by_email(self, email: str) -> User | None: ...

    async def find_by_id(self, user_id: int) -> User | None: ...

    async def insert(self, candidate: NewUser) -> User: ...

    async def update(self, user_id: int, patch: UserPatch) -> User | None: ...

    async def delete(self, user_id: int) -> bool: ...

    async def list_all(self) -> list[User]: ...
