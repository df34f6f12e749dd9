"""Domain models for ua_user — pure dataclasses, no I/O.

UserPatch is a field mask: every attribute defaults to UNSET, so "not sent"
and "sent as None" stay distinguishable all the way down to the store.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Final


class _Unset:
    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


@dataclass
class User:
    id: int
    name: str
    email: str
    password_hash: str
    age: int | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NewUser:
    """Fields needed to insert a user; id and timestamps are assigned by the store."""

    name: str
    email: str
    password_hash: str
    age: int | None = None
    is_active: bool = True


@dataclass(frozen=True)
class UserPatch:
    name: Any = UNSET
    email: Any = UNSET
    age: Any = UNSET
    is_active: Any = UNSET

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserPatch":
        """Build a patch from the keys actually present in ``data``; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def present(self) -> dict[str, Any]:
        """Only the fields that were explicitly set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not UNSET
