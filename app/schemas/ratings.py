"""Request bodies for the rating routes."""

import uuid

from pydantic import BaseModel, ConfigDict, Field

from app.utils.validation_functions import RATING_MAX, RATING_MIN


class RatingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    store_id: uuid.UUID = Field(..., alias="storeId")
    rating: int = Field(..., ge=RATING_MIN, le=RATING_MAX, strict=True)
