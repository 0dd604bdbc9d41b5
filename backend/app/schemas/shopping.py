from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.models.shopping_item import ShoppingPriority
from app.schemas.auth import UserResponse
from app.schemas.base import ApiModel, collapse_whitespace


def clean_item_url(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if not cleaned.lower().startswith(("http://", "https://")):
        raise ValueError("url must start with http:// or https://")
    return cleaned


class ShoppingItemCreateRequest(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    estimated_price_min: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    estimated_price_max: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    priority: ShoppingPriority = ShoppingPriority.MEDIUM
    url: str | None = Field(default=None, max_length=2048)
    household_id: UUID

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> object:
        return collapse_whitespace(value)

    @field_validator("url")
    @classmethod
    def _clean_url(cls, value: str | None) -> str | None:
        return clean_item_url(value)

    @model_validator(mode="after")
    def _price_range_ordered(self) -> "ShoppingItemCreateRequest":
        low, high = self.estimated_price_min, self.estimated_price_max
        if low is not None and high is not None and low > high:
            raise ValueError("estimatedPriceMin cannot exceed estimatedPriceMax")
        return self


class ShoppingItemUpdateRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    estimated_price_min: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    estimated_price_max: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    priority: ShoppingPriority | None = None
    url: str | None = Field(default=None, max_length=2048)
    purchased: bool | None = None
    purchased_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    purchased_date: datetime | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> object:
        return collapse_whitespace(value)

    @field_validator("url")
    @classmethod
    def _clean_url(cls, value: str | None) -> str | None:
        return clean_item_url(value)


class ShoppingItemResponse(ApiModel):
    id: UUID
    name: str
    estimated_price_min: Decimal | None = None
    estimated_price_max: Decimal | None = None
    priority: ShoppingPriority
    url: str | None = None
    purchased: bool
    purchased_price: Decimal | None = None
    purchased_date: datetime | None = None
    household_id: UUID
    user_id: UUID
    created_at: datetime


class ShoppingItemDetailResponse(ShoppingItemResponse):
    user: UserResponse
