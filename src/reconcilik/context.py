"""Per-invocation execution context: dry run, deadline and cancellation."""

from __future__ import annotations

import threading
import time

from .errors import ErrorKind, TransportFailure


class Context:
    """Runtime state passed through each blocking call."""

    def __init__(
        self,
        *,
        dry_run: bool = False,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.dry_run = dry_run
        self.deadline = deadline
        self.cancel = cancel

    @classmethod
    def with_timeout(cls, seconds: float, **kwargs) -> Context:
        """Create a context whose deadline is `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds, **kwargs)

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def timeout(self, default: float) -> float:
        """Per-call timeout bounded by the remaining deadline.

        Raises TransportFailure instead of returning a zero timeout.
        """
        remaining = self.remaining()
        if remaining is None:
            return default
        if remaining <= 0:
            raise TransportFailure(ErrorKind.DEADLINE_EXCEEDED, "deadline exceeded")
        return min(default, remaining)

    def check(self) -> None:
        """Raise TransportFailure if the caller cancelled or the deadline passed."""
        if self.cancelled:
            raise TransportFailure(ErrorKind.DEADLINE_EXCEEDED, "operation cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise TransportFailure(ErrorKind.DEADLINE_EXCEEDED, "deadline exceeded")
