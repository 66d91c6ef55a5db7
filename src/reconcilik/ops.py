"""Bindings and the Present / Ensure / Absent reconciliation strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum

from .context import Context
from .engine import Operation, OperationResult, Reconciler
from .errors import ErrorKind
from .state import DesiredState, WireObject

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    ABSENT = "absent"
    CREATING = "creating"
    PRESENT = "present"
    READING = "reading"
    UPDATING = "updating"
    DELETING = "deleting"


_IN_FLIGHT = {
    Operation.CREATE: Phase.CREATING,
    Operation.READ: Phase.READING,
    Operation.UPDATE: Phase.UPDATING,
    Operation.DELETE: Phase.DELETING,
    Operation.IMPORT: Phase.READING,
}


@dataclass
class Binding[S: DesiredState]:
    """A desired state plus the externally-held identifier it is bound to."""

    state: S
    identifier: str = ""
    phase: Phase = Phase.ABSENT
    snapshot: WireObject | None = None
    last_result: OperationResult[S] | None = None

    @property
    def bound(self) -> bool:
        return bool(self.identifier)

    @classmethod
    def from_import(cls, result: OperationResult[S]) -> Binding[S]:
        """Seed a binding from a successful Import."""
        if result.operation is not Operation.IMPORT:
            raise ValueError(f"cannot bind from a {result.operation} result")
        if result.error is not None or result.state is None:
            raise ValueError(f"cannot bind from failed import: {result}")
        binding = cls(state=result.state)
        binding.record(result)
        return binding

    def begin(self, operation: Operation) -> None:
        self.phase = _IN_FLIGHT[operation]

    def _settle(self) -> None:
        self.phase = Phase.PRESENT if self.identifier else Phase.ABSENT

    def record(self, result: OperationResult[S]) -> OperationResult[S]:
        """Apply the outcome of an operation to this binding."""
        self.last_result = result
        if result.error is not None:
            # a create whose object exists but could not be read back still owns it
            if (
                result.operation is Operation.CREATE
                and result.identifier
                and result.kind is not ErrorKind.NOT_FOUND
            ):
                self.identifier = result.identifier
            self._settle()
            return result

        if result.absent:
            self.identifier = ""
            self.snapshot = None
        else:
            self.identifier = result.identifier
            self.snapshot = result.snapshot
        self._settle()
        return result


# -- Strategies --


class ReconcileOp[S: DesiredState](ABC):
    """Wraps a Reconciler with conditional execution logic."""

    def __init__(self, reconciler: Reconciler[S]) -> None:
        self.reconciler = reconciler

    @property
    def label(self) -> str:
        return self.reconciler.resource.label

    def _run(
        self, binding: Binding[S], operation: Operation, ctx: Context, *args
    ) -> OperationResult[S]:
        binding.begin(operation)
        method = {
            Operation.CREATE: self.reconciler.create,
            Operation.READ: self.reconciler.read,
            Operation.UPDATE: self.reconciler.update,
            Operation.DELETE: self.reconciler.delete,
        }[operation]
        try:
            result = method(*args, ctx)
        except Exception:
            binding._settle()
            raise
        return binding.record(result)

    def _create(self, binding: Binding[S], ctx: Context) -> OperationResult[S]:
        if binding.bound:
            raise ValueError(f"{self.label} is already bound to '{binding.identifier}'")
        return self._run(binding, Operation.CREATE, ctx, binding.state)

    def _refresh(self, binding: Binding[S], ctx: Context) -> OperationResult[S]:
        return self._run(binding, Operation.READ, ctx, binding.identifier)

    @abstractmethod
    def __call__(self, binding: Binding[S], ctx: Context | None = None) -> OperationResult[S]: ...


class Present[S: DesiredState](ReconcileOp[S]):
    """Create only if the object doesn't exist."""

    def __call__(self, binding: Binding[S], ctx: Context | None = None) -> OperationResult[S]:
        ctx = ctx or Context()
        if binding.bound:
            result = self._refresh(binding, ctx)
            if not result.ok:
                return result
            if not result.absent:
                logger.debug("Skipping %s; already exists", self.label)
                return result
        else:
            result = OperationResult(operation=Operation.READ, identifier="")

        if ctx.dry_run:
            logger.info("[DRY RUN] Would create %s", self.label)
            return result
        return self._create(binding, ctx)


class Ensure[S: DesiredState](ReconcileOp[S]):
    """Create if missing; update if the remote state drifted."""

    def __call__(self, binding: Binding[S], ctx: Context | None = None) -> OperationResult[S]:
        ctx = ctx or Context()
        if binding.bound:
            result = self._refresh(binding, ctx)
            if not result.ok:
                return result
        else:
            result = OperationResult(operation=Operation.READ, identifier="")

        if result.absent:
            if ctx.dry_run:
                logger.info("[DRY RUN] Would create %s", self.label)
                return result
            return self._create(binding, ctx)

        resource = self.reconciler.resource
        drift = binding.state.drift(
            result.state, ignore=resource.read_only | resource.write_only
        )
        if not drift:
            logger.debug("Skipping %s; up to date", self.label)
            return result

        logger.debug("%s drifted on %s", self.label, ", ".join(sorted(drift)))
        if ctx.dry_run:
            logger.info("[DRY RUN] Would update %s '%s'", self.label, binding.identifier)
            return result
        return self._run(binding, Operation.UPDATE, ctx, binding.identifier, binding.state)


class Absent[S: DesiredState](ReconcileOp[S]):
    """Delete if the object is bound."""

    def __call__(self, binding: Binding[S], ctx: Context | None = None) -> OperationResult[S]:
        ctx = ctx or Context()
        if not binding.bound:
            logger.debug("Skipping removal of %s; not present", self.label)
            return OperationResult(operation=Operation.DELETE, identifier="")
        if ctx.dry_run:
            logger.info("[DRY RUN] Would delete %s '%s'", self.label, binding.identifier)
            return OperationResult(
                operation=Operation.READ,
                identifier=binding.identifier,
                snapshot=binding.snapshot,
            )
        return self._run(binding, Operation.DELETE, ctx, binding.identifier)
