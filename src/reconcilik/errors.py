"""Error taxonomy and classification of platform error responses."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class ErrorKind(StrEnum):
    """Closed set of error kinds; values double as the stable error codes."""

    AUTH_FAILED = "AUTH_FAILED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_INPUT = "INVALID_INPUT"
    INTERNAL = "INTERNAL"
    UNAVAILABLE = "UNAVAILABLE"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    UNKNOWN = "UNKNOWN"

    @property
    def retryable(self) -> bool:
        """Whether a caller may reasonably retry an error of this kind."""
        return self in (ErrorKind.UNAVAILABLE, ErrorKind.DEADLINE_EXCEEDED)


_STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.INVALID_INPUT,
    401: ErrorKind.AUTH_FAILED,
    403: ErrorKind.PERMISSION_DENIED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.ALREADY_EXISTS,
    500: ErrorKind.INTERNAL,
    503: ErrorKind.UNAVAILABLE,
    504: ErrorKind.DEADLINE_EXCEEDED,
}

INVALID_RESPONSE = "INVALID_RESPONSE"


def kind_for_status(status: int | None) -> ErrorKind:
    """Map an HTTP status onto the taxonomy (UNKNOWN when unmapped)."""
    if status is None:
        return ErrorKind.UNKNOWN
    return _STATUS_KINDS.get(status, ErrorKind.UNKNOWN)


@dataclass(frozen=True)
class ClassifiedError:
    """An error reduced to the taxonomy, decoupled from transport detail."""

    kind: ErrorKind
    code: str
    message: str
    status: int | None = None
    transport: bool = False

    def __str__(self) -> str:
        status = self.status if self.status is not None else "-"
        return f"[{self.code} - {status}] {self.message}"


class ReconcilikError(Exception):
    """Base class for all errors raised by reconcilik."""


class ApiError(ReconcilikError):
    """A classified failure returned by the platform."""

    def __init__(self, error: ClassifiedError) -> None:
        super().__init__(str(error))
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def status(self) -> int | None:
        return self.error.status


class TransportFailure(ApiError):
    """The request never produced an HTTP response (network, timeout, cancel)."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(
            ClassifiedError(kind=kind, code=kind.value, message=message, transport=True)
        )


def invalid_response(message: str, status: int | None = None) -> ClassifiedError:
    """Describe a successful response whose payload could not be used."""
    return ClassifiedError(
        kind=ErrorKind.UNKNOWN,
        code=INVALID_RESPONSE,
        message=message,
        status=status,
    )


def _decode(body: bytes | str) -> dict | None:
    """Decode an error body into a dict, or None when it is not a JSON object."""
    try:
        data = json.loads(body)
    except (ValueError, TypeError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def classify(status: int, body: bytes | str | None) -> ClassifiedError:
    """Classify an HTTP error response.

    Never raises: empty or malformed bodies degrade to the ``UNKNOWN`` code
    while keeping the status, and the kind still follows the status table so
    a bare 404 is recognizable as NOT_FOUND.
    """
    fallback = f"Unknown error with status code {status}"
    status_kind = kind_for_status(status)

    data = _decode(body) if body else None
    if data is None:
        if body:
            logger.debug("Unparseable error body for status %d", status)
        return ClassifiedError(
            kind=status_kind,
            code=ErrorKind.UNKNOWN.value,
            message=fallback,
            status=status,
        )

    message = data.get("message") or data.get("error") or fallback
    code = data.get("code")
    if not isinstance(message, str):
        message = str(message)
    if not isinstance(code, str) or not code:
        code = status_kind.value

    try:
        kind = ErrorKind(code)
    except ValueError:
        kind = status_kind

    return ClassifiedError(kind=kind, code=code, message=message, status=status)
