"""Request payload schemas. JSON keys are camelCase; services receive snake_case."""

from affiflow.schemas.auth import RegisterRequest, TokenRequest
from affiflow.schemas.base import Payload, parse_payload
from affiflow.schemas.catalog import (
    AffiliateLinkCreate,
    AffiliateLinkUpdate,
    CategoryCreate,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
)
from affiflow.schemas.posts import EventCreate, PostCreate, PostUpdate
from affiflow.schemas.workspaces import WorkspaceCreate, WorkspaceUpdate

__all__ = [
    "Payload",
    "parse_payload",
    "RegisterRequest",
    "TokenRequest",
    "AffiliateLinkCreate",
    "AffiliateLinkUpdate",
    "CategoryCreate",
    "CategoryUpdate",
    "ProductCreate",
    "ProductUpdate",
    "EventCreate",
    "PostCreate",
    "PostUpdate",
    "WorkspaceCreate",
    "WorkspaceUpdate",
]
