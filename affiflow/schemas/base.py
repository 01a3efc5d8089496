from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from affiflow.errors import ValidationError

Schema = TypeVar("Schema", bound="Payload")

_http_url = TypeAdapter(AnyHttpUrl)


class Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra='ignore',
    )

    def provided(self) -> dict[str, Any]:
        """Only the fields the client sent; explicit nulls are kept."""
        return self.model_dump(exclude_unset=True)


def check_url(value: str | None, message: str) -> str | None:
    """Validate an http(s) URL but keep the client's exact string."""
    if value is None or value == '':
        return value
    try:
        _http_url.validate_python(value)
    except PydanticValidationError as exc:
        raise ValueError(message) from exc
    return value


def parse_payload(schema: Type[Schema], data: Any) -> Schema:
    if not isinstance(data, dict):
        raise ValidationError(
            "Validation failed",
            details=[{'field': None, 'message': "Expected a JSON object"}],
        )
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


__all__ = ["Payload", "check_url", "parse_payload"]
