"""Shared fixtures: an in-memory platform mounted on the client's session."""

from __future__ import annotations

import itertools
import json
from typing import Any
from urllib.parse import parse_qsl, unquote, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter

from reconcilik.client import Client
from reconcilik.config import ClientConfig
from reconcilik.resource import Resource
from reconcilik.state import DesiredState

API_KEY = "test-api-key"
BASE_URL = "https://platform.test"
CREATED = "2026-01-01T00:00:00Z"


# -- Test resource --


class WidgetState(DesiredState):
    name: str | None = None
    color: str | None = None
    size: int | None = None
    created: str | None = None


class Widgets(Resource[WidgetState]):
    name = "widget"
    state_type = WidgetState
    collection_path = "/widgets"
    required = frozenset({"name"})
    read_only = frozenset({"created"})


# -- Fake platform --


class Collection:
    def __init__(
        self,
        *,
        id_field: str = "id",
        unique: str | None = None,
        defaults: dict[str, Any] | None = None,
        empty_not_found: bool = False,
    ) -> None:
        self.id_field = id_field
        self.unique = unique
        self.defaults = defaults or {}
        self.empty_not_found = empty_not_found
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}

    def in_tenant(self, org: str) -> list[dict[str, Any]]:
        return [obj for (tenant, _), obj in self.objects.items() if tenant == org]


def _matches(obj: dict[str, Any], field: str, operator: str, value: str) -> bool:
    actual = obj.get(field)
    text = "" if actual is None else str(actual)
    if operator == "eq":
        return text == value
    if operator == "ne":
        return text != value
    if operator == "in":
        return text in value.split("|")
    if operator == "contains":
        return value in text
    compare = {
        "gt": text > value,
        "ge": text >= value,
        "lt": text < value,
        "le": text <= value,
    }
    return compare[operator]


class FakePlatform(BaseAdapter):
    """In-memory multi-tenant platform speaking the v1/v2 REST dialect."""

    def __init__(self, api_key: str = API_KEY) -> None:
        super().__init__()
        self.api_key = api_key
        self.requests: list[requests.PreparedRequest] = []
        self.timeouts: list[Any] = []
        self._ids = itertools.count(1)
        self._injected: list[tuple[str, str, Any]] = []
        self.collections: dict[str, Collection] = {
            "/api/v2/widgets": Collection(unique="name", defaults={"size": 1}),
            "/api/v2/usergroups": Collection(
                unique="name",
                defaults={"type": "user_group", "membershipMethod": "STATIC", "memberCount": 0},
            ),
            "/api/v2/administrators": Collection(),
            "/api/systemusers": Collection(
                id_field="_id",
                unique="username",
                defaults={"activated": False, "account_locked": False},
                empty_not_found=True,
            ),
        }

    # -- test helpers --

    def seed(self, path: str, obj: dict[str, Any], org: str = "") -> str:
        coll = self.collections[path]
        identifier = obj.get(coll.id_field) or self._next_id()
        coll.objects[(org, identifier)] = {**obj, coll.id_field: identifier}
        return identifier

    def get(self, path: str, identifier: str, org: str = "") -> dict[str, Any] | None:
        return self.collections[path].objects.get((org, identifier))

    def inject(self, method: str, path: str, outcome: Any) -> None:
        """Answer the next matching request with (status, body) or raise an exception."""
        self._injected.append((method.upper(), path, outcome))

    def calls(self, method: str | None = None) -> list[requests.PreparedRequest]:
        return [r for r in self.requests if method is None or r.method == method]

    # -- adapter interface --

    def close(self) -> None:
        pass

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        parts = urlsplit(request.url)
        path = parts.path

        for i, (method, prefix, outcome) in enumerate(self._injected):
            if method == request.method and path.startswith(prefix):
                del self._injected[i]
                if isinstance(outcome, Exception):
                    raise outcome
                status, body = outcome
                return self._response(request, status, body)

        if request.headers.get("x-api-key") != self.api_key:
            return self._response(request, 401, {"message": "invalid api key"})

        org = request.headers.get("x-org-id", "")
        for prefix, coll in self.collections.items():
            if path == prefix:
                return self._collection(request, coll, org, dict(parse_qsl(parts.query)))
            if path.startswith(prefix + "/"):
                identifier = unquote(path[len(prefix) + 1 :])
                return self._object(request, coll, org, identifier)
        return self._response(request, 404, {"message": f"no route for {path}"})

    # -- handlers --

    def _next_id(self) -> str:
        return f"{next(self._ids):024x}"

    def _collection(self, request, coll: Collection, org: str, query: dict[str, str]):
        if request.method == "POST":
            body = json.loads(request.body or b"{}")
            if coll.unique and any(
                obj.get(coll.unique) == body.get(coll.unique) for obj in coll.in_tenant(org)
            ):
                return self._response(
                    request, 409, {"message": f"{body.get(coll.unique)} already exists"}
                )
            identifier = self._next_id()
            obj = {**coll.defaults, **body, coll.id_field: identifier, "created": CREATED}
            coll.objects[(org, identifier)] = obj
            # only the identifier comes back; the rest requires a read
            return self._response(request, 201, {coll.id_field: identifier})

        if request.method == "GET":
            items = coll.in_tenant(org)
            i = 0
            while f"filter[{i}].field" in query:
                field = query[f"filter[{i}].field"]
                value = query[f"filter[{i}].value"]
                operator = query.get(f"filter[{i}].operator", "eq")
                items = [obj for obj in items if _matches(obj, field, operator, value)]
                i += 1
            if "sort" in query:
                items = sorted(
                    items,
                    key=lambda obj: str(obj.get(query["sort"], "")),
                    reverse=query.get("sortDirection") == "desc",
                )
            skip = int(query.get("skip", 0))
            limit = int(query.get("limit", 100))
            page = items[skip : skip + limit]
            return self._response(request, 200, {"results": page, "totalCount": len(items)})

        return self._response(request, 405, {"message": "method not allowed"})

    def _object(self, request, coll: Collection, org: str, identifier: str):
        key = (org, identifier)
        if key not in coll.objects:
            if coll.empty_not_found:
                return self._response(request, 404, None)
            return self._response(request, 404, {"message": "Not Found"})

        if request.method == "GET":
            return self._response(request, 200, coll.objects[key])
        if request.method in ("PUT", "PATCH"):
            body = json.loads(request.body or b"{}")
            coll.objects[key].update(body)
            return self._response(request, 200, coll.objects[key])
        if request.method == "DELETE":
            del coll.objects[key]
            return self._response(request, 204, None)
        return self._response(request, 405, {"message": "method not allowed"})

    def _response(self, request, status: int, body: Any) -> requests.Response:
        resp = requests.Response()
        resp.status_code = status
        if body is None:
            resp._content = b""
        elif isinstance(body, bytes):
            resp._content = body
        else:
            resp._content = json.dumps(body).encode()
        resp.headers["Content-Type"] = "application/json"
        resp.encoding = "utf-8"
        resp.url = request.url
        resp.request = request
        resp.connection = self
        return resp


# -- Fixtures --


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def make_client(platform):
    clients: list[Client] = []

    def _make(org_id: str = "", api_key: str = API_KEY, timeout: float = 30.0) -> Client:
        session = requests.Session()
        session.mount(BASE_URL, platform)
        client = Client(
            ClientConfig(api_key=api_key, org_id=org_id, base_url=BASE_URL, timeout=timeout),
            session=session,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def client(make_client) -> Client:
    return make_client()
