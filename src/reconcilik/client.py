"""Transport client for the platform's versioned REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, NamedTuple

import requests

from .config import ClientConfig
from .context import Context
from .errors import ApiError, ErrorKind, TransportFailure, classify, invalid_response

logger = logging.getLogger(__name__)

USER_AGENT = "reconcilik/0.1.0"

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})

QueryParams = Mapping[str, str] | Sequence[tuple[str, str]]


class ApiVersion(Enum):
    """API generations and their path prefixes."""

    V1 = "/api"
    V2 = "/api/v2"

    @property
    def prefix(self) -> str:
        return self.value

    def path(self, path: str) -> str:
        """Join a resource path onto this generation's prefix (idempotent)."""
        if not path.startswith("/"):
            path = "/" + path
        if path == self.prefix or path.startswith(self.prefix + "/"):
            return path
        return self.prefix + path


class Response(NamedTuple):
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Client:
    """Authenticated request execution against the platform.

    Holds only immutable configuration plus a pooled session, so one client
    may be shared by independent reconciliations. No retries are performed.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self._session = session if session is not None else requests.Session()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    @property
    def org_id(self) -> str:
        return self.config.org_id

    def headers(self) -> dict[str, str]:
        """Headers attached to every request."""
        headers = {
            "x-api-key": self.config.api_key.get_secret_value(),
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self.config.org_id:
            headers["x-org-id"] = self.config.org_id
        return headers

    def url_for(self, path: str, api_version: ApiVersion = ApiVersion.V2) -> str:
        return self.config.base_url + api_version.path(path)

    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: QueryParams | None = None,
        api_version: ApiVersion = ApiVersion.V2,
        ctx: Context | None = None,
    ) -> Response:
        """Issue one request and return the raw status and body.

        Any HTTP status is returned as-is; only failures that never produced a
        response raise TransportFailure. A body of None sends no payload.
        """
        method = method.upper()
        if body is not None and method not in WRITE_METHODS:
            raise ValueError(f"{method} requests cannot carry a body")

        ctx = ctx or Context()
        ctx.check()

        url = self.url_for(path, api_version)
        data = json.dumps(body).encode() if body is not None else None
        timeout = ctx.timeout(self.config.timeout)

        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=self.headers(),
                timeout=timeout,
            )
        except requests.Timeout as exc:
            raise TransportFailure(
                ErrorKind.DEADLINE_EXCEEDED, f"{method} {url} timed out: {exc}"
            ) from exc
        except requests.ConnectionError as exc:
            raise TransportFailure(
                ErrorKind.UNAVAILABLE, f"{method} {url} failed to connect: {exc}"
            ) from exc
        except requests.RequestException as exc:
            raise TransportFailure(ErrorKind.UNAVAILABLE, f"{method} {url} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, url, resp.status_code)

        # the response may have arrived after the caller gave up
        ctx.check()
        return Response(status=resp.status_code, body=resp.content or b"")

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: QueryParams | None = None,
        api_version: ApiVersion = ApiVersion.V2,
        ctx: Context | None = None,
    ) -> Any:
        """Execute a request and decode its JSON payload.

        Returns None for an empty success body; raises ApiError for any
        non-2xx status.
        """
        resp = self.execute(method, path, body, params=params, api_version=api_version, ctx=ctx)
        if not resp.ok:
            raise ApiError(classify(resp.status, resp.body))
        if not resp.body.strip():
            return None
        try:
            return json.loads(resp.body)
        except (ValueError, RecursionError):
            raise ApiError(
                invalid_response(f"{method.upper()} {path} returned a non-JSON body", resp.status)
            ) from None
