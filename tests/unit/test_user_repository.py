"""UserRepository against a real SQLite file database (aiosqlite)."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.ua_common.database import build_session_factory
from src.ua_common.errors import DuplicateEmailError, StorageError
from src.ua_user.domain.models import NewUser, UserPatch
from src.ua_user.infrastructure.persistence import UserRepository


def _new_user(email: str = "john@example.com", **kwargs) -> NewUser:
    defaults = dict(name="John Doe", email=email, password_hash="$2b$04$hash", age=30)
    defaults.update(kwargs)
    return NewUser(**defaults)


class TestInsert:
    async def test_assigns_id_and_timestamps(self, repo):
        user = await repo.insert(_new_user())

        assert user.id >= 1
        assert user.created_at is not None
        assert user.updated_at == user.created_at
        assert user.is_active is True

    async def test_ids_are_unique(self, repo):
        a = await repo.insert(_new_user("a@example.com"))
        b = await repo.insert(_new_user("b@example.com"))
        assert a.id != b.id

    async def test_duplicate_email_raises(self, repo):
        await repo.insert(_new_user())

        with pytest.raises(DuplicateEmailError) as exc_info:
            await repo.insert(_new_user(name="Other"))

        assert exc_info.value.email == "john@example.com"

    async def test_failed_insert_leaves_no_row(self, repo):
        await repo.insert(_new_user())
        with pytest.raises(DuplicateEmailError):
            await repo.insert(_new_user(name="Other"))

        assert len(await repo.list_all()) == 1

    async def test_email_match_is_exact(self, repo):
        await repo.insert(_new_user("john@example.com"))
        other = await repo.insert(_new_user("John@example.com"))
        assert other.email == "John@example.com"

    async def test_concurrent_inserts_same_email_exactly_one_wins(self, repo):
        results = await asyncio.gather(
            *(repo.insert(_new_user(name=f"Racer {i}")) for i in range(5)),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, BaseException)]
        assert len(winners) == 1
        assert len(losers) == 4
        assert all(isinstance(e, DuplicateEmailError) for e in losers)

    async def test_id_not_reused_after_delete(self, repo):
        first = await repo.insert(_new_user("a@example.com"))
        second = await repo.insert(_new_user("b@example.com"))
        assert await repo.delete(second.id)

        third = await repo.insert(_new_user("c@example.com"))

        assert third.id not in (first.id, second.id)
        assert third.id > second.id


class TestFind:
    async def test_find_by_id(self, repo):
        created = await repo.insert(_new_user())

        found = await repo.find_by_id(created.id)

        assert found == created

    async def test_find_by_id_missing(self, repo):
        assert await repo.find_by_id(12345) is None

    async def test_find_by_email_returns_hash(self, repo):
        await repo.insert(_new_user())

        found = await repo.find_by_email("john@example.com")

        assert found is not None
        assert found.password_hash == "$2b$04$hash"

    async def test_find_by_email_missing(self, repo):
        assert await repo.find_by_email("ghost@example.com") is None


class TestUpdate:
    async def test_merges_only_present_fields(self, repo):
        created = await repo.insert(_new_user())

        updated = await repo.update(created.id, UserPatch(age=31))

        assert updated is not None
        assert updated.age == 31
        assert updated.name == created.name
        assert updated.email == created.email
        assert updated.is_active == created.is_active
        assert updated.password_hash == created.password_hash
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    async def test_explicit_none_clears_age(self, repo):
        created = await repo.insert(_new_user())

        updated = await repo.update(created.id, UserPatch(age=None))

        assert updated.age is None

    async def test_empty_patch_only_refreshes_timestamp(self, repo):
        created = await repo.insert(_new_user())

        updated = await repo.update(created.id, UserPatch())

        assert updated.name == created.name
        assert updated.updated_at > created.updated_at

    async def test_missing_returns_none(self, repo):
        assert await repo.update(999, UserPatch(age=1)) is None

    async def test_email_collision_raises(self, repo):
        await repo.insert(_new_user("a@example.com"))
        b = await repo.insert(_new_user("b@example.com"))

        with pytest.raises(DuplicateEmailError):
            await repo.update(b.id, UserPatch(email="a@example.com"))

        assert (await repo.find_by_id(b.id)).email == "b@example.com"

    async def test_keeping_own_email_is_fine(self, repo):
        created = await repo.insert(_new_user())

        updated = await repo.update(created.id, UserPatch(email="john@example.com", name="Johnny"))

        assert updated.name == "Johnny"


class TestDelete:
    async def test_delete_then_missing(self, repo):
        created = await repo.insert(_new_user())

        assert await repo.delete(created.id) is True
        assert await repo.find_by_id(created.id) is None
        assert await repo.delete(created.id) is False


class TestListAll:
    async def test_newest_first(self, repo):
        a = await repo.insert(_new_user("a@example.com"))
        b = await repo.insert(_new_user("b@example.com"))
        c = await repo.insert(_new_user("c@example.com"))

        users = await repo.list_all()

        assert [u.id for u in users] == [c.id, b.id, a.id]

    async def test_empty(self, repo):
        assert await repo.list_all() == []


class TestBackendFailure:
    async def test_operational_error_becomes_storage_error(self):
        session_factory = MagicMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
        )
        repo = UserRepository(session_factory)

        with pytest.raises(StorageError) as exc_info:
            await repo.find_by_id(1)

        assert exc_info.value.message == "Database error"


class TestClock:
    async def test_timestamps_come_from_injected_clock(self, engine):
        ticks = iter(
            [datetime(2026, 1, 1, tzinfo=UTC), datetime(2026, 1, 1, tzinfo=UTC) + timedelta(hours=1)]
        )
        repo = UserRepository(build_session_factory(engine), clock=lambda: next(ticks))

        created = await repo.insert(_new_user())
        updated = await repo.update(created.id, UserPatch(name="Johnny"))

        assert created.created_at == created.updated_at
        assert updated.created_at == created.created_at
        assert updated.updated_at - updated.created_at == timedelta(hours=1)

    async def test_clock_behind_created_at_does_not_break_update(self, engine):
        t0 = datetime(2026, 1, 1, tzinfo=UTC)
        ticks = iter([t0, t0 - timedelta(milliseconds=5)])
        repo = UserRepository(build_session_factory(engine), clock=lambda: next(ticks))

        created = await repo.insert(_new_user())
        updated = await repo.update(created.id, UserPatch(age=31))

        assert updated.age == 31
        assert updated.updated_at == updated.created_at == created.created_at
