"""Resource adapter ABC and adapter registration."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar
from urllib.parse import quote

from .client import ApiVersion
from .state import DesiredState, WireObject

logger = logging.getLogger(__name__)

# -- Resource Registry --

_resource_registry: dict[str, type[Resource]] = {}


def resource(name: str):
    """Register a Resource class under a type name."""

    def decorator(cls):
        cls.name = name
        _resource_registry[name] = cls
        return cls

    return decorator


def get_resource(name: str, **path_params: str) -> Resource:
    """Instantiate the adapter registered under `name`."""
    if name not in _resource_registry:
        raise ValueError(f"Unknown resource type: '{name}'")
    cls = _resource_registry[name]
    logger.debug("Resolving resource '%s' -> %s", name, cls.__name__)
    return cls(**path_params)


# -- Resource ABC --


class Resource[S: DesiredState](ABC):
    """Per-type serialization and endpoint mapping used by the reconciler."""

    name: ClassVar[str] = ""
    api_version: ClassVar[ApiVersion] = ApiVersion.V2
    id_field: ClassVar[str] = "id"
    update_method: ClassVar[str] = "PUT"

    # fields a create payload must carry
    required: ClassVar[frozenset[str]] = frozenset()

    # fields the server computes; never sent
    read_only: ClassVar[frozenset[str]] = frozenset()

    # fields the server accepts but never returns; excluded from drift
    write_only: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, **path_params: str) -> None:
        self.path_params = path_params

    @property
    @abstractmethod
    def state_type(self) -> type[S]:
        """Desired-state model for this resource."""

    @property
    @abstractmethod
    def collection_path(self) -> str:
        """Collection endpoint template, e.g. ``/usergroups/{group_id}/members``."""

    @property
    def label(self) -> str:
        return self.name or type(self).__name__

    def endpoint_for(self, identifier: str | None = None) -> str:
        """Collection endpoint, or the object endpoint when given an identifier."""
        try:
            path = self.collection_path.format(**self.path_params)
        except KeyError as exc:
            raise ValueError(f"{self.label}: missing path parameter {exc}") from None
        if identifier:
            path = f"{path}/{quote(identifier, safe='')}"
        return path

    def serialize(self, state: S) -> dict[str, Any]:
        """Wire payload holding only the fields the caller set."""
        return state.model_dump(
            mode="json",
            by_alias=True,
            exclude_unset=True,
            exclude=set(self.read_only),
        )

    def missing_required(self, state: S) -> list[str]:
        return sorted(
            name for name in self.required if getattr(state, name, None) is None
        )

    def identifier_of(self, raw: Mapping[str, Any]) -> str:
        value = raw.get(self.id_field)
        if value in (None, ""):
            raise ValueError(f"{self.label}: response has no '{self.id_field}'")
        return str(value)

    def deserialize(self, raw: Any) -> WireObject:
        if not isinstance(raw, Mapping):
            raise ValueError(f"{self.label}: expected a JSON object, got {type(raw).__name__}")
        return WireObject(id=self.identifier_of(raw), attributes=dict(raw))

    def to_state(self, wire: WireObject) -> S:
        """Map a snapshot onto the desired-state model."""
        return self.state_type.model_validate(wire.attributes)
