"""Request bodies for the store routes."""

import uuid
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from app.schemas.auth import Email
from app.utils.validation_functions import validate_address, validate_store_name


def check_store_name(value: str) -> str:
    value = value.strip()
    if not validate_store_name(value):
        raise ValueError("Store name is required and must not exceed 100 characters")
    return value


def check_store_address(value: str) -> str:
    value = value.strip()
    if not validate_address(value, required=True):
        raise ValueError("Address is required and must not exceed 400 characters")
    return value


StoreName = Annotated[str, AfterValidator(check_store_name)]
StoreAddress = Annotated[str, AfterValidator(check_store_address)]


class StoreCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: StoreName
    email: Email
    address: StoreAddress
    owner_id: uuid.UUID = Field(..., alias="ownerId")


class StoreUpdateRequest(BaseModel):
    name: Optional[StoreName] = None
    email: Optional[Email] = None
    address: Optional[StoreAddress] = None
