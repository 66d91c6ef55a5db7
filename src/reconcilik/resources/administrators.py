"""Administrators (v2 ``/administrators``), read-only list queries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..client import ApiVersion, Client
from ..context import Context
from ..query import ListReader, QuerySpec
from ..state import WireObject


class Administrator(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    email: str = ""
    firstname: str = ""
    lastname: str = ""
    is_super_admin: bool = Field(default=False, alias="isSuperAdmin")
    created: str = ""
    updated: str = ""

    @classmethod
    def from_wire(cls, wire: WireObject) -> Administrator:
        return cls.model_validate({**wire.attributes, "id": wire.id})


class AdministratorReader:
    """List administrators one page at a time."""

    path = "/administrators"

    def __init__(self, client: Client) -> None:
        self.reader = ListReader(client, self.path, api_version=ApiVersion.V2)

    def list(
        self, query: QuerySpec | None = None, ctx: Context | None = None
    ) -> tuple[list[Administrator], int]:
        """Return one page of administrators and the server-reported total."""
        envelope = self.reader.list(query, ctx)
        return [Administrator.from_wire(item) for item in envelope.items], envelope.total_count
