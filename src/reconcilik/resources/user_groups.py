"""User groups (v2 ``/usergroups``)."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import field_validator

from ..client import Client
from ..context import Context
from ..query import Filter, ListReader
from ..resource import Resource, resource
from ..state import DesiredState, WireObject

_ATTR_NAME = re.compile(r"[^a-zA-Z0-9]+")

MembershipMethod = Literal["STATIC", "DYNAMIC_REVIEW_REQUIRED", "DYNAMIC_AUTOMATED"]


def sanitize_attribute_name(name: str) -> str:
    """Attribute names may only contain letters and digits."""
    return _ATTR_NAME.sub("", name)


class UserGroupState(DesiredState):
    name: str | None = None
    description: str | None = None
    type: str | None = None
    attributes: dict[str, str] | None = None
    membership_method: MembershipMethod | None = None
    member_suggestions_notify: bool | None = None

    # computed by the server
    member_count: int | None = None

    @field_validator("attributes")
    @classmethod
    def _sanitize_attributes(cls, value: dict[str, str] | None) -> dict[str, str] | None:
        if value is None:
            return None
        return {sanitize_attribute_name(k): v for k, v in value.items()}


@resource("user_group")
class UserGroups(Resource[UserGroupState]):
    state_type = UserGroupState
    collection_path = "/usergroups"
    required = frozenset({"name"})
    read_only = frozenset({"member_count"})


class UserGroupLookup:
    """Find a user group by its unique name."""

    def __init__(self, client: Client) -> None:
        self.reader = ListReader.for_resource(client, UserGroups())

    def by_name(self, name: str, ctx: Context | None = None) -> WireObject:
        return self.reader.find_one(Filter(field="name", value=name), ctx=ctx)
