"""Password hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0).  passlib[bcrypt] is intentionally
avoided because passlib is unmaintained and incompatible with bcrypt >=4.

bcrypt only considers the first 72 bytes of a password and bcrypt >=5 refuses
longer input outright; request schemas reject such passwords before they get
here, and ``verify`` treats them as a non-match.
"""

from functools import cached_property

import bcrypt

from src.ua_common.errors import HashingError, InvalidHashFormatError

BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing. Instances are immutable and safe to share."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, plain: str) -> str:
        """Hash a plain-text password with a fresh salt. Returns a utf-8 hash string."""
        try:
            hashed_bytes: bytes = bcrypt.hashpw(
                plain.encode("utf-8"), bcrypt.gensalt(self._rounds)
            )
        except (ValueError, OSError) as exc:
            raise HashingError() from exc
        return hashed_bytes.decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Check a plain-text password against a stored bcrypt hash.

        Raises InvalidHashFormatError if ``hashed`` is not a bcrypt hash.
        """
        encoded = plain.encode("utf-8")
        try:
            hashed_bytes = hashed.encode("ascii")
        except UnicodeEncodeError:
            raise InvalidHashFormatError() from None
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            # Never hashable, so it cannot match anything that was stored
            self._check_format(hashed_bytes)
            return False
        try:
            return bcrypt.checkpw(encoded, hashed_bytes)
        except ValueError:
            raise InvalidHashFormatError() from None

    @cached_property
    def dummy_hash(self) -> str:
        """A valid hash of a random secret, for equal-cost checks on unknown users."""
        return self.hash(bcrypt.gensalt().decode("ascii"))

    @staticmethod
    def _check_format(hashed_bytes: bytes) -> None:
        try:
            bcrypt.checkpw(b"", hashed_bytes)
        except ValueError:
            raise InvalidHashFormatError() from None
