from __future__ import annotations

from pydantic import EmailStr, Field

from affiflow.schemas.base import Payload


class RegisterRequest(Payload):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class TokenRequest(Payload):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


__all__ = ["RegisterRequest", "TokenRequest"]
