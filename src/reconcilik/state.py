"""Desired-state and wire-object models."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DesiredState(BaseModel):
    """Caller-supplied description of one object instance.

    Presence is tracked by pydantic's ``model_fields_set``: a field the caller
    never assigned is absent, even when its default equals an explicit value.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def present_fields(self) -> set[str]:
        return set(self.model_fields_set)

    def is_set(self, field: str) -> bool:
        return field in self.model_fields_set

    def drift(
        self,
        actual: DesiredState,
        *,
        ignore: Iterable[str] = (),
    ) -> dict[str, tuple[Any, Any]]:
        """Return {field: (desired, actual)} for set fields that differ."""
        fields = self.model_fields_set - set(ignore)
        if not fields:
            return {}
        desired = self.model_dump(include=fields)
        current = actual.model_dump(include=fields)
        return {
            name: (value, current.get(name))
            for name, value in desired.items()
            if current.get(name) != value
        }


class WireObject(BaseModel):
    """The platform's representation of an object, keyed by its identifier."""

    model_config = ConfigDict(frozen=True)

    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)
