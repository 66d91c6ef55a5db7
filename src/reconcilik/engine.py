"""Reconciliation state machine: create, read, update, delete and import."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .client import Client
from .context import Context
from .errors import ApiError, ClassifiedError, ErrorKind, invalid_response
from .resource import Resource, get_resource
from .state import DesiredState, WireObject

logger = logging.getLogger(__name__)


class Operation(StrEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    IMPORT = "import"


@dataclass(frozen=True)
class OperationResult[S: DesiredState]:
    """Outcome of one reconciliation step.

    A success carries a snapshot, or no snapshot when the object is absent.
    A failure carries only the classified error.
    """

    operation: Operation
    identifier: str
    snapshot: WireObject | None = None
    state: S | None = None
    error: ClassifiedError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.snapshot is not None:
            raise ValueError("an operation result cannot hold both a snapshot and an error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def absent(self) -> bool:
        """Succeeded, and the object does not exist remotely."""
        return self.ok and self.snapshot is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error else None

    def unwrap(self) -> WireObject | None:
        """Return the snapshot, raising ApiError for a failed result."""
        if self.error is not None:
            raise ApiError(self.error)
        return self.snapshot

    def __str__(self) -> str:
        target = f"'{self.identifier}'" if self.identifier else "(unbound)"
        if self.error is not None:
            return f"{self.operation} {target} failed: {self.error}"
        if self.snapshot is None:
            return f"{self.operation} {target}: absent"
        return f"{self.operation} {target}: ok"


class Reconciler[S: DesiredState]:
    """Drives one resource type through its lifecycle against the platform.

    Every write is followed by a Read so server-computed fields are captured.
    NOT_FOUND is absence on Read and success on Delete; it is a failure on
    Import and on the read-back after a write. Nothing is retried.
    """

    def __init__(self, client: Client, resource: Resource[S]) -> None:
        self.client = client
        self.resource = resource

    @classmethod
    def for_type(cls, client: Client, name: str, **path_params: str) -> Reconciler:
        """Build a reconciler for a registered resource type."""
        return cls(client, get_resource(name, **path_params))

    # -- helpers --

    def _call(self, method: str, identifier: str | None, body: Any, ctx: Context | None) -> Any:
        return self.client.request(
            method,
            self.resource.endpoint_for(identifier),
            body,
            api_version=self.resource.api_version,
            ctx=ctx,
        )

    def _failed(
        self, operation: Operation, identifier: str, error: ClassifiedError
    ) -> OperationResult[S]:
        logger.warning(
            "%s %s '%s' failed: %s", operation, self.resource.label, identifier, error
        )
        return OperationResult(operation=operation, identifier=identifier, error=error)

    def _snapshot(
        self, operation: Operation, identifier: str, raw: Any
    ) -> OperationResult[S]:
        try:
            wire = self.resource.deserialize(raw)
            state = self.resource.to_state(wire)
        except (ValueError, TypeError) as exc:
            # covers pydantic ValidationError; field mapping failures are never dropped
            return self._failed(operation, identifier, invalid_response(str(exc)))
        return OperationResult(
            operation=operation,
            identifier=wire.id,
            snapshot=wire,
            state=state,
        )

    def _fetch(
        self,
        operation: Operation,
        identifier: str,
        ctx: Context | None,
        *,
        absent_ok: bool,
    ) -> OperationResult[S]:
        try:
            raw = self._call("GET", identifier, None, ctx)
        except ApiError as exc:
            if exc.kind is ErrorKind.NOT_FOUND and absent_ok:
                logger.debug("%s '%s' no longer exists", self.resource.label, identifier)
                return OperationResult(operation=operation, identifier=identifier)
            return self._failed(operation, identifier, exc.error)
        return self._snapshot(operation, identifier, raw)

    def _read_back(
        self, operation: Operation, identifier: str, ctx: Context | None
    ) -> OperationResult[S]:
        result = self._fetch(operation, identifier, ctx, absent_ok=False)
        if result.kind is ErrorKind.NOT_FOUND:
            logger.warning(
                "%s '%s' vanished after %s", self.resource.label, identifier, operation
            )
        return result

    @staticmethod
    def _require_identifier(operation: Operation, identifier: str) -> None:
        if not identifier:
            raise ValueError(f"{operation} requires a non-empty identifier")

    # -- lifecycle --

    def create(self, state: S, ctx: Context | None = None) -> OperationResult[S]:
        """Create the object, then read it back.

        ALREADY_EXISTS is returned as a failure; existing objects are never adopted.
        """
        missing = self.resource.missing_required(state)
        if missing:
            raise ValueError(
                f"{self.resource.label}: missing required field(s) {', '.join(missing)}"
            )

        payload = self.resource.serialize(state)
        logger.info("Creating %s", self.resource.label)
        try:
            raw = self._call("POST", None, payload, ctx)
            identifier = self.resource.deserialize(raw).id
        except ApiError as exc:
            return self._failed(Operation.CREATE, "", exc.error)
        except ValueError as exc:
            return self._failed(Operation.CREATE, "", invalid_response(str(exc)))

        logger.info("Created %s '%s'", self.resource.label, identifier)
        return self._read_back(Operation.CREATE, identifier, ctx)

    def read(self, identifier: str, ctx: Context | None = None) -> OperationResult[S]:
        """Read the current remote state; NOT_FOUND yields an absent result."""
        self._require_identifier(Operation.READ, identifier)
        logger.debug("Reading %s '%s'", self.resource.label, identifier)
        return self._fetch(Operation.READ, identifier, ctx, absent_ok=True)

    def update(
        self, identifier: str, state: S, ctx: Context | None = None
    ) -> OperationResult[S]:
        """Send only the fields present in `state`, then read back."""
        self._require_identifier(Operation.UPDATE, identifier)
        payload = self.resource.serialize(state)
        if not payload:
            logger.debug("Nothing to update for %s '%s'", self.resource.label, identifier)
            return self._read_back(Operation.UPDATE, identifier, ctx)

        logger.info(
            "Updating %s '%s' (%s)", self.resource.label, identifier, ", ".join(sorted(payload))
        )
        try:
            self._call(self.resource.update_method, identifier, payload, ctx)
        except ApiError as exc:
            return self._failed(Operation.UPDATE, identifier, exc.error)
        return self._read_back(Operation.UPDATE, identifier, ctx)

    def delete(self, identifier: str, ctx: Context | None = None) -> OperationResult[S]:
        """Delete the object; an already-missing object counts as deleted."""
        self._require_identifier(Operation.DELETE, identifier)
        logger.info("Deleting %s '%s'", self.resource.label, identifier)
        try:
            self._call("DELETE", identifier, None, ctx)
        except ApiError as exc:
            if exc.kind is not ErrorKind.NOT_FOUND:
                return self._failed(Operation.DELETE, identifier, exc.error)
            logger.debug("%s '%s' already deleted", self.resource.label, identifier)
        return OperationResult(operation=Operation.DELETE, identifier=identifier)

    def import_object(self, identifier: str, ctx: Context | None = None) -> OperationResult[S]:
        """Read an object not created here so a binding can adopt it."""
        self._require_identifier(Operation.IMPORT, identifier)
        logger.info("Importing %s '%s'", self.resource.label, identifier)
        return self._fetch(Operation.IMPORT, identifier, ctx, absent_ok=False)
