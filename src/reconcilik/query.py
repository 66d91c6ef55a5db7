"""Filter, sort and pagination for read-only list queries."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .client import ApiVersion, Client
from .context import Context
from .errors import ApiError, ClassifiedError, ErrorKind, invalid_response
from .resource import Resource
from .state import WireObject

logger = logging.getLogger(__name__)

MAX_LIMIT = 1000
DEFAULT_LIMIT = 100


class Operator(StrEnum):
    EQ = "eq"
    NE = "ne"
    IN = "in"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    CONTAINS = "contains"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class Filter(BaseModel):
    """One (field, operator, value) condition; filters combine with AND."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    value: str
    operator: Operator = Operator.EQ


class Sort(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    direction: SortDirection = SortDirection.ASC


class QuerySpec(BaseModel):
    """A single page request."""

    model_config = ConfigDict(frozen=True)

    filters: tuple[Filter, ...] = ()
    sort: Sort | None = None
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)

    def params(self) -> list[tuple[str, str]]:
        """Encode as ordered query parameters."""
        params: list[tuple[str, str]] = []
        for i, flt in enumerate(self.filters):
            params.append((f"filter[{i}].field", flt.field))
            params.append((f"filter[{i}].value", flt.value))
            params.append((f"filter[{i}].operator", flt.operator.value))
        if self.sort is not None:
            params.append(("sort", self.sort.field))
            params.append(("sortDirection", self.sort.direction.value))
        params.append(("limit", str(self.limit)))
        params.append(("skip", str(self.offset)))
        return params

    def next_page(self, envelope: ListEnvelope) -> QuerySpec | None:
        """The query for the following page, or None when this was the last."""
        if not envelope.items:
            return None
        offset = self.offset + len(envelope.items)
        if offset >= envelope.total_count:
            return None
        return self.model_copy(update={"offset": offset})


class ListEnvelope(BaseModel):
    """One page of results plus the server-reported total."""

    model_config = ConfigDict(frozen=True)

    items: tuple[WireObject, ...] = ()
    total_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> ListEnvelope:
        if self.total_count < len(self.items):
            raise ValueError("total_count cannot be less than the number of items")
        return self

    def __len__(self) -> int:
        return len(self.items)


class ListReader:
    """Issues one list call per query against a collection endpoint."""

    def __init__(
        self,
        client: Client,
        path: str,
        *,
        api_version: ApiVersion = ApiVersion.V2,
        id_field: str = "id",
    ) -> None:
        self.client = client
        self.path = path
        self.api_version = api_version
        self.id_field = id_field

    @classmethod
    def for_resource(cls, client: Client, resource: Resource) -> ListReader:
        return cls(
            client,
            resource.endpoint_for(),
            api_version=resource.api_version,
            id_field=resource.id_field,
        )

    def _item(self, raw: Any) -> WireObject:
        if not isinstance(raw, Mapping):
            raise ValueError(f"list item is not an object: {raw!r}")
        identifier = raw.get(self.id_field)
        if identifier in (None, ""):
            raise ValueError(f"list item has no '{self.id_field}'")
        return WireObject(id=str(identifier), attributes=dict(raw))

    def _envelope(self, query: QuerySpec, payload: Any) -> ListEnvelope:
        if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
            results, total = list(payload), None
        elif isinstance(payload, Mapping) and isinstance(payload.get("results"), list):
            results, total = payload["results"], payload.get("totalCount")
        else:
            raise ValueError(f"unexpected list response from {self.path}")

        if len(results) > query.limit:
            logger.warning(
                "%s returned %d items for limit %d; truncating",
                self.path,
                len(results),
                query.limit,
            )
            results = results[: query.limit]

        items = tuple(self._item(raw) for raw in results)

        if total is None:
            total = len(items)
        elif not isinstance(total, int) or isinstance(total, bool):
            raise ValueError(f"invalid totalCount from {self.path}: {total!r}")
        elif total < len(items):
            logger.warning(
                "%s reported totalCount %d below %d returned items",
                self.path,
                total,
                len(items),
            )
            total = len(items)

        return ListEnvelope(items=items, total_count=total)

    def list(self, query: QuerySpec | None = None, ctx: Context | None = None) -> ListEnvelope:
        """Fetch exactly one page; raises ApiError on a classified failure."""
        query = query or QuerySpec()
        logger.debug(
            "Listing %s (filters=%d, limit=%d, offset=%d)",
            self.path,
            len(query.filters),
            query.limit,
            query.offset,
        )
        payload = self.client.request(
            "GET",
            self.path,
            params=query.params(),
            api_version=self.api_version,
            ctx=ctx,
        )
        try:
            return self._envelope(query, payload)
        except ValueError as exc:
            raise ApiError(invalid_response(str(exc))) from None

    def find_one(self, *filters: Filter, ctx: Context | None = None) -> WireObject:
        """Return the single object matching all filters.

        Raises ApiError with kind NOT_FOUND when nothing matches and
        INVALID_INPUT when the filters match more than one object.
        """
        envelope = self.list(QuerySpec(filters=filters, limit=2), ctx)
        criteria = ", ".join(f"{f.field} {f.operator} {f.value!r}" for f in filters)
        if not envelope.items:
            raise ApiError(
                ClassifiedError(
                    kind=ErrorKind.NOT_FOUND,
                    code=ErrorKind.NOT_FOUND.value,
                    message=f"no object in {self.path} matches {criteria or 'the query'}",
                )
            )
        if len(envelope.items) > 1 or envelope.total_count > 1:
            raise ApiError(
                ClassifiedError(
                    kind=ErrorKind.INVALID_INPUT,
                    code=ErrorKind.INVALID_INPUT.value,
                    message=(
                        f"{envelope.total_count} objects in {self.path} match "
                        f"{criteria or 'the query'}"
                    ),
                )
            )
        return envelope.items[0]
