from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from affiflow.models import CommissionType
from affiflow.schemas.base import Payload, check_url

COLOR_PATTERN = r'^#[0-9A-Fa-f]{6}$'


def _required(value: Any) -> Any:
    if value is None:
        raise ValueError("Field cannot be null")
    return value


class CategoryCreate(Payload):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class CategoryUpdate(CategoryCreate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)

    @field_validator('name')
    @classmethod
    def check_name_not_null(cls, value: Optional[str]) -> Optional[str]:
        return _required(value)


class ProductCreate(Payload):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    currency: str = Field(default='VND', min_length=3, max_length=3)
    category_id: Optional[str] = None
    active_affiliate_link_id: Optional[str] = None

    @field_validator('image')
    @classmethod
    def check_image(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value, "Invalid image URL")


class ProductUpdate(ProductCreate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)

    @field_validator('name')
    @classmethod
    def check_name_not_null(cls, value: Optional[str]) -> Optional[str]:
        return _required(value)


class AffiliateLinkCreate(Payload):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    original_url: str
    affiliate_url: str
    platform: Optional[str] = Field(default=None, min_length=1, max_length=50)
    commission: Optional[float] = Field(default=None, ge=0, le=100)
    commission_type: CommissionType = CommissionType.PERCENTAGE
    tags: Optional[str] = Field(default=None, max_length=200)
    product_id: str = Field(min_length=1)

    @field_validator('original_url')
    @classmethod
    def check_original_url(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            raise ValueError("Invalid original URL")
        return check_url(value, "Invalid original URL")

    @field_validator('affiliate_url')
    @classmethod
    def check_affiliate_url(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            raise ValueError("Invalid affiliate URL")
        return check_url(value, "Invalid affiliate URL")


class AffiliateLinkUpdate(AffiliateLinkCreate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    original_url: Optional[str] = None
    affiliate_url: Optional[str] = None
    commission_type: Optional[CommissionType] = None
    product_id: Optional[str] = Field(default=None, min_length=1)

    @field_validator('name', 'commission_type')
    @classmethod
    def check_not_null(cls, value: Any) -> Any:
        return _required(value)


__all__ = [
    "CategoryCreate",
    "CategoryUpdate",
    "ProductCreate",
    "ProductUpdate",
    "AffiliateLinkCreate",
    "AffiliateLinkUpdate",
]
