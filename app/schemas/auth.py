"""Request bodies for the auth routes, plus the reusable field types."""

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from app.utils.validation_functions import (
    normalize_email,
    validate_address,
    validate_email,
    validate_password_strength,
    validate_user_name,
)

PASSWORD_RULES = (
    "Password must be between 8 and 16 characters and contain at least one "
    "uppercase letter and one special character"
)


def check_email(value: str) -> str:
    value = normalize_email(value)
    if not validate_email(value):
        raise ValueError("Please provide a valid email")
    return value


def check_password(value: str) -> str:
    if not validate_password_strength(value):
        raise ValueError(PASSWORD_RULES)
    return value


def check_user_name(value: str) -> str:
    value = value.strip()
    if not validate_user_name(value):
        raise ValueError("Name must be between 20 and 60 characters")
    return value


def check_user_address(value: str) -> str:
    if not validate_address(value):
        raise ValueError("Address must not exceed 400 characters")
    return value


Email = Annotated[str, AfterValidator(check_email)]
Password = Annotated[str, AfterValidator(check_password)]
UserName = Annotated[str, AfterValidator(check_user_name)]
UserAddress = Annotated[str, AfterValidator(check_user_address)]


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    name: UserName
    email: Email
    password: Password
    address: Optional[UserAddress] = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: Password = Field(..., alias="newPassword")
