"""Request bodies for the admin user routes."""

from typing import Optional

from pydantic import BaseModel

from app.schemas.auth import Email, Password, UserAddress, UserName


class UserCreateRequest(BaseModel):
    name: UserName
    email: Email
    password: Password
    address: Optional[UserAddress] = None
    # Checked against AppRole in the handler so an unknown role maps to InvalidRole
    role: Optional[str] = None


class UserUpdateRequest(BaseModel):
    name: Optional[UserName] = None
    email: Optional[Email] = None
    address: Optional[UserAddress] = None
    role: Optional[str] = None
