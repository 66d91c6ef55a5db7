"""System users (v1 ``/systemusers``)."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from ..client import ApiVersion
from ..resource import Resource, resource
from ..state import DesiredState


class SystemUserState(DesiredState):
    # v1 mixes lowercase, snake_case and camelCase keys; aliases are explicit
    model_config = ConfigDict(alias_generator=None, populate_by_name=True, extra="ignore")

    username: str | None = None
    email: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    middlename: str | None = None
    displayname: str | None = None
    description: str | None = None
    password: str | None = Field(default=None, repr=False)
    activated: bool | None = None
    mfa_enabled: bool | None = None
    password_never_expires: bool | None = None
    company: str | None = None
    department: str | None = None
    job_title: str | None = Field(default=None, alias="jobTitle")
    employee_type: str | None = Field(default=None, alias="employeeType")
    location: str | None = None

    # computed by the server
    account_locked: bool | None = None
    created: str | None = None


@resource("system_user")
class SystemUsers(Resource[SystemUserState]):
    state_type = SystemUserState
    api_version = ApiVersion.V1
    collection_path = "/systemusers"
    id_field = "_id"
    required = frozenset({"username", "email"})
    read_only = frozenset({"account_locked", "created"})
    write_only = frozenset({"password"})
