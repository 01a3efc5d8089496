from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from affiflow.models import AnalyticsEventType, VideoType
from affiflow.schemas.base import Payload, check_url


class PostCreate(Payload):
    title: str = Field(min_length=1, max_length=200)
    content: Optional[str] = None
    excerpt: Optional[str] = Field(default=None, max_length=300)
    slug: Optional[str] = None
    video_url: Optional[str] = None
    video_type: Optional[VideoType] = None
    thumbnail: Optional[str] = None
    is_published: bool = False
    published_at: Optional[datetime] = None
    product_ids: Optional[list[str]] = None

    @field_validator('video_url')
    @classmethod
    def check_video_url(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value, "Invalid video URL")

    @field_validator('thumbnail')
    @classmethod
    def check_thumbnail(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value, "Invalid thumbnail URL")


class PostUpdate(PostCreate):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    is_published: Optional[bool] = None

    @field_validator('title', 'is_published')
    @classmethod
    def check_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class EventCreate(Payload):
    event: AnalyticsEventType
    product_id: Optional[str] = None
    affiliate_link_id: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


__all__ = ["PostCreate", "PostUpdate", "EventCreate"]
