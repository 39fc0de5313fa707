"""Exceptions raised by the authorization model and session lifecycle."""


class InvalidRoleError(ValueError):
    """A role value outside the closed role enumeration reached a lookup.

    This is a contract violation by the caller, not a user-facing condition.
    """

    def __init__(self, role: object) -> None:
        self.role = role
        super().__init__(f"Invalid role: {role!r}")


class IncompleteIdentityError(ValueError):
    """An identity payload is missing mandatory fields (``_id`` or ``email``).

    The session layer catches this and treats the identity as absent.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Identity is missing required fields: {', '.join(missing)}")


class AuthApiError(Exception):
    """Login or registration against the external Auth API failed.

    ``message`` is safe to show to the end user.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FormValidationError(ValueError):
    """Login or registration form failed local validation."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
