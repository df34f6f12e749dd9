"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  9xxx: System

Every AppError is rendered by the app-level handler as
{"success": false, "message": <message>} with its http_status.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class ConflictError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(1001, message, 409)


class EmailExistsError(ConflictError):
    def __init__(self, email: str, taken_on_update: bool = False) -> None:
        if taken_on_update:
            super().__init__(f"Email {email} is already taken")
        else:
            super().__init__(f"User with email {email} already exists")
        self.email = email


class AuthenticationError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(1002, message, 401)


class InvalidCredentialsError(AuthenticationError):
    """Same message for unknown email and wrong password."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(1003, message, 404)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User with ID {user_id} not found")
        self.user_id = user_id


# --- 9xxx: System ---

class StorageError(AppError):
    def __init__(self, detail: str = "Database error") -> None:
        super().__init__(9001, detail, 500)


class HashingError(AppError):
    def __init__(self) -> None:
        super().__init__(9002, "Error processing password", 500)


class InvalidHashFormatError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Stored credential is malformed", 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9099, detail, 500)


# --- Storage-level signals (never rendered directly) ---

class DuplicateEmailError(Exception):
    """Raised by the user store when the unique email constraint rejects a write."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"duplicate email: {email}")
