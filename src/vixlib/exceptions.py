"""Exception hierarchy for vixlib.

All exceptions inherit from VixError.

Hierarchy:
    VixError (base)
    ├── JobTimeoutError       ← job did not complete before its deadline
    │                           (also a built-in TimeoutError)
    ├── OperationFailure      ← native result code outside the caller's
    │                           tolerated set
    ├── JobConsumedError      ← streamed job results iterated twice
    └── SurfaceLoadError      ← opener import path could not be resolved

Nothing in vixlib retries automatically. A JobTimeoutError abandons the
native job; an OperationFailure carries the original VIX code so it can be
correlated with host-side logs.
"""

from __future__ import annotations

from typing import Any


class VixError(Exception):
    """Base exception for all vixlib errors with structured context.

    Attributes:
        message: Human-readable error message
        context: Dictionary of structured error context for logging/debugging
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class JobTimeoutError(VixError, TimeoutError):
    """A job did not signal completion within its timeout.

    The native operation may still complete later; its result is
    discarded. Catchable as the built-in TimeoutError.

    Attributes:
        operation: Native operation name of the abandoned job
        timeout: Timeout in seconds that elapsed
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        timeout: float,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        ctx.update({"operation": operation, "timeout": timeout})
        super().__init__(message, ctx)
        self.operation = operation
        self.timeout = timeout


class OperationFailure(VixError):
    """The automation surface reported a non-zero result code.

    The message is the surface's locale-specific description of the code.

    Attributes:
        code: Original VIX result code
    """

    def __init__(self, code: int, message: str, context: dict[str, Any] | None = None):
        ctx = context or {}
        ctx["code"] = code
        super().__init__(message, ctx)
        self.code = code

    def __str__(self) -> str:
        return f"{self.message} (code {self.code})"


class JobConsumedError(VixError):
    """Streamed job results can only be iterated once.

    Raised when Job.enumerate() is called on a job whose rows were
    already pulled.
    """


class SurfaceLoadError(VixError):
    """The opener import path is malformed or does not resolve.

    Raised by vixlib.surface.load_opener(), used by the CLI.
    """
