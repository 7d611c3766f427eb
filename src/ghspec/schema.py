"""Attribute schema and the per-call view of a resource's state."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ResourceValidationError

_ZERO_VALUES: dict[type, Any] = {str: "", bool: False, int: 0}


@dataclass(frozen=True)
class Attribute:
    """Declaration of a single resource attribute."""

    type: type = str
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False
    default: Any = None
    description: str = ""
    diff_suppress: Callable[[Any, Any], bool] | None = None
    validate: Callable[[Any, str], None] | None = None

    @property
    def zero(self) -> Any:
        return _ZERO_VALUES.get(self.type)

    @property
    def configurable(self) -> bool:
        return self.required or self.optional


Schema = Mapping[str, Attribute]


def validate_config(schema: Schema, config: Mapping[str, Any]) -> None:
    """Check desired attributes against the schema."""
    for key, value in config.items():
        attr = schema.get(key)
        if attr is None:
            raise ResourceValidationError(f"unsupported argument '{key}'")
        if not attr.configurable:
            raise ResourceValidationError(f"'{key}' is computed and cannot be set")
        if not isinstance(value, attr.type):
            raise ResourceValidationError(
                f"'{key}' must be of type {attr.type.__name__}, got {type(value).__name__}"
            )
        if attr.validate is not None:
            attr.validate(value, key)

    for key, attr in schema.items():
        if attr.required and key not in config:
            raise ResourceValidationError(f"missing required argument '{key}'")


def apply_defaults(schema: Schema, config: Mapping[str, Any]) -> dict[str, Any]:
    """Return config with schema defaults filled in for unset attributes."""
    result = dict(config)
    for key, attr in schema.items():
        if key not in result and attr.default is not None:
            result[key] = attr.default
    return result


class ResourceData:
    """Attributes and identity of one resource, as seen by a handler."""

    def __init__(
        self,
        schema: Schema,
        attrs: Mapping[str, Any] | None = None,
        *,
        id: str = "",
        new: bool = False,
    ) -> None:
        self._schema = schema
        self._attrs: dict[str, Any] = dict(attrs or {})
        self.id = id
        self.is_new_resource = new

    def get(self, key: str) -> Any:
        attr = self._schema[key]
        value = self._attrs.get(key)
        if value is not None:
            return value
        if attr.default is not None:
            return attr.default
        return attr.zero

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """Return the value and whether it is set to something other than its zero value."""
        value = self.get(key)
        return value, value is not None and value != self._schema[key].zero

    def set(self, key: str, value: Any) -> None:
        if key not in self._schema:
            raise KeyError(f"unknown attribute '{key}'")
        self._attrs[key] = value

    def set_id(self, id: str) -> None:
        self.id = id

    @property
    def attributes(self) -> dict[str, Any]:
        return {key: self.get(key) for key in self._schema}

    def __repr__(self) -> str:
        return f"ResourceData(id={self.id!r}, new={self.is_new_resource})"
