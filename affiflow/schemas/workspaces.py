from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from affiflow.schemas.base import Payload, check_url


class WorkspaceCreate(Payload):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    slug: Optional[str] = None


class WorkspaceUpdate(Payload):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    slug: Optional[str] = None
    avatar: Optional[str] = None
    cover: Optional[str] = None
    domain: Optional[str] = Field(default=None, max_length=255)
    theme: Optional[dict[str, Any]] = None

    @field_validator('avatar', 'cover')
    @classmethod
    def check_urls(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value, "Invalid URL")

    @field_validator('name')
    @classmethod
    def check_name_not_null(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("Name is required")
        return value


__all__ = ["WorkspaceCreate", "WorkspaceUpdate"]
