"""Base model for GitLab API responses."""

from __future__ import annotations

from typing import Any, TypeVar, get_args, get_origin

from pydantic import BaseModel, model_validator

ModelT = TypeVar("ModelT", bound="GitLabModel")


def _expects_list(annotation: Any) -> bool:
    if get_origin(annotation) is list:
        return True
    return any(get_origin(arg) is list for arg in get_args(annotation))


class GitLabModel(BaseModel):
    """Base model with the lenient decoding shared by all GitLab API models.

    Unknown fields are ignored, a single object is accepted where a list is
    expected and an empty list is accepted where an object is expected.
    """

    model_config = {"extra": "ignore", "populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _lenient_shapes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        fixed = dict(data)
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key not in fixed:
                continue
            value = fixed[key]
            if _expects_list(field.annotation):
                if value is not None and not isinstance(value, list):
                    fixed[key] = [value]
            elif value == []:
                if field.is_required():
                    fixed[key] = None
                else:
                    del fixed[key]
        return fixed

    @classmethod
    def from_payload(cls: type[ModelT], payload: Any) -> ModelT | None:
        """Decode one object; an empty list decodes as ``None``."""
        if payload is None or payload == []:
            return None
        return cls.model_validate(payload)

    @classmethod
    def list_from_payload(cls: type[ModelT], payload: Any) -> list[ModelT]:
        """Decode a list of objects; a lone object becomes a one-element list."""
        if payload is None:
            return []
        if isinstance(payload, dict):
            payload = [payload]
        return [cls.model_validate(item) for item in payload]
