"""Login and registration form checks.

These run before any call to the Auth API so that obviously bad input never
leaves the service. Each check returns per-field messages suitable for
showing next to the form field.
"""

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from eventhub.auth.roles import SELF_ASSIGNABLE_ROLES, Role

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
NAME_RE = re.compile(r"[a-zA-Z ]+")
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2


class LoginData(BaseModel):
    email: str = ""
    password: str = ""


class RegistrationData(BaseModel):
    """Registration form. Accepts both snake_case and the web client's camelCase."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(default="", alias="fullName")
    email: str = ""
    password: str = ""
    confirm_password: str = Field(default="", alias="confirmPassword")
    location: str = ""
    role: str = Role.USER.value

    def to_payload(self) -> dict[str, str]:
        """Body sent to the Auth API register endpoint."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class PasswordStrength:
    score: int
    label: str
    color: str


_STRENGTH_LEVELS: tuple[PasswordStrength, ...] = (
    PasswordStrength(0, "Very Weak", "red"),
    PasswordStrength(1, "Weak", "orange"),
    PasswordStrength(2, "Fair", "yellow"),
    PasswordStrength(3, "Good", "blue"),
    PasswordStrength(4, "Strong", "green"),
    PasswordStrength(5, "Very Strong", "green"),
    PasswordStrength(6, "Excellent", "green"),
)


def validate_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email) is not None


def validate_password(password: str) -> str | None:
    """Return an error message, or None if the password is acceptable."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if not (
        re.search(r"[a-z]", password)
        and re.search(r"[A-Z]", password)
        and re.search(r"\d", password)
    ):
        return (
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return None


def validate_name(name: str) -> str | None:
    """Return an error message, or None if the name is acceptable."""
    if len(name.strip()) < MIN_NAME_LENGTH:
        return f"Name must be at least {MIN_NAME_LENGTH} characters long"
    if not NAME_RE.fullmatch(name):
        return "Name can only contain letters and spaces"
    return None


def _check_email(email: str, errors: dict[str, str]) -> None:
    if not email:
        errors["email"] = "Email is required"
    elif not validate_email(email):
        errors["email"] = "Please enter a valid email address"


def validate_login_form(data: LoginData) -> dict[str, str]:
    errors: dict[str, str] = {}
    _check_email(data.email, errors)
    if not data.password:
        errors["password"] = "Password is required"
    return errors


def validate_register_form(data: RegistrationData) -> dict[str, str]:
    """Validate every registration field; an empty dict means valid."""
    errors: dict[str, str] = {}

    if not data.full_name:
        errors["full_name"] = "Full name is required"
    elif message := validate_name(data.full_name):
        errors["full_name"] = message

    _check_email(data.email, errors)

    if not data.password:
        errors["password"] = "Password is required"
    elif message := validate_password(data.password):
        errors["password"] = message

    if not data.confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif data.password != data.confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if not data.location.strip():
        errors["location"] = "Location is required"

    if data.role not in {role.value for role in SELF_ASSIGNABLE_ROLES}:
        errors["role"] = "Role must be one of: host, user"

    return errors


def password_strength(password: str) -> PasswordStrength:
    """Score a password from 0 (Very Weak) to 6 (Excellent)."""
    checks = (
        len(password) >= 8,
        len(password) >= 12,
        re.search(r"[a-z]", password) is not None,
        re.search(r"[A-Z]", password) is not None,
        re.search(r"\d", password) is not None,
        re.search(r"[^a-zA-Z\d]", password) is not None,
    )
    return _STRENGTH_LEVELS[sum(checks)]
