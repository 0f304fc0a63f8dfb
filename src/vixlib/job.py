"""Native asynchronous jobs.

A Job wraps the handle returned by AutomationSurface.submit() together with
the CompletionSignal its callback sets. It offers four ways to consume the
result, all bounded by a caller-supplied timeout:

- wait(): completion only
- wait_for(): a single property value
- wait_for_many(): a tuple of property values, in request order
- enumerate(): a lazy stream of property tuples, one per result row

Raw property values are converted at this boundary (see
PROPERTY_CONVERTERS) so callers never handle the surface's loosely typed
values. wait_async() and to_task() run the blocking wait on a worker
thread for asyncio callers.

Example:
    ```python
    job = Job.submit(surface, Operation.FILE_EXISTS_IN_GUEST, vm_handle, r"C:\\boot.ini")
    exists = job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_GUEST_OBJECT_EXISTS, timeout=60)
    ```
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Collection, Iterator, Sequence
from datetime import UTC, datetime
from typing import Any

from vixlib import constants, result_codes
from vixlib._logging import get_logger
from vixlib.completion import CompletionSignal, JobCallback
from vixlib.exceptions import JobConsumedError, JobTimeoutError, VixError
from vixlib.models import Operation, PowerState
from vixlib.surface import AutomationSurface, Handle

logger = get_logger(__name__)


def from_epoch_seconds(seconds: int) -> datetime:
    """Convert native epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(int(seconds), tz=UTC)


PROPERTY_CONVERTERS: dict[int, Callable[[Any], Any]] = {
    constants.VIX_PROPERTY_VM_NUM_VCPUS: int,
    constants.VIX_PROPERTY_VM_VMX_PATHNAME: str,
    constants.VIX_PROPERTY_VM_MEMORY_SIZE: int,
    constants.VIX_PROPERTY_VM_POWER_STATE: PowerState,
    constants.VIX_PROPERTY_VM_IS_RUNNING: bool,
    constants.VIX_PROPERTY_JOB_RESULT_GUEST_OBJECT_EXISTS: bool,
    constants.VIX_PROPERTY_JOB_RESULT_GUEST_PROGRAM_EXIT_CODE: int,
    constants.VIX_PROPERTY_JOB_RESULT_ITEM_NAME: str,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_ID: int,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_OWNER: str,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_COMMAND: str,
    constants.VIX_PROPERTY_JOB_RESULT_FILE_FLAGS: int,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_START_TIME: from_epoch_seconds,
    constants.VIX_PROPERTY_JOB_RESULT_VM_VARIABLE_STRING: str,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_BEING_DEBUGGED: bool,
    constants.VIX_PROPERTY_JOB_RESULT_SCREEN_IMAGE_DATA: bytes,
    constants.VIX_PROPERTY_SNAPSHOT_DISPLAYNAME: str,
    constants.VIX_PROPERTY_SNAPSHOT_DESCRIPTION: str,
    constants.VIX_PROPERTY_SNAPSHOT_POWERSTATE: PowerState,
}
"""Converter per property id. Unlisted ids (e.g. handles) pass through."""


def convert_properties(property_ids: Sequence[int], values: Sequence[Any]) -> tuple[Any, ...]:
    """Convert raw surface values to typed values, keyed by property id.

    None stays None.
    """
    if len(values) != len(property_ids):
        raise VixError(
            f"Surface returned {len(values)} values for {len(property_ids)} properties",
            {"property_ids": list(property_ids)},
        )
    converted = []
    for property_id, value in zip(property_ids, values, strict=True):
        converter = PROPERTY_CONVERTERS.get(property_id)
        converted.append(value if converter is None or value is None else converter(value))
    return tuple(converted)


def _operation_name(operation: Operation | str) -> str:
    return operation.value if isinstance(operation, Operation) else operation


class Job:
    """An in-flight native operation and its completion tracking.

    Not reusable: create a new Job for every submission.

    Attributes:
        handle: Native job handle
        operation: Operation name the job was submitted with
        submitted_at: time.monotonic() just before submission
        completed_at: time.monotonic() when a waiter observed completion
    """

    def __init__(
        self,
        surface: AutomationSurface,
        handle: Handle,
        callback: JobCallback,
        *,
        operation: str,
        locale: str = constants.DEFAULT_LOCALE,
        submitted_at: float | None = None,
    ) -> None:
        self.handle = handle
        self.operation = operation
        self.submitted_at = submitted_at if submitted_at is not None else time.monotonic()
        self.completed_at: float | None = None
        self._surface = surface
        self._callback = callback
        self._locale = locale
        self._consumed = False

    @classmethod
    def submit(
        cls,
        surface: AutomationSurface,
        operation: Operation | str,
        target: Handle,
        *args: Any,
        locale: str = constants.DEFAULT_LOCALE,
    ) -> Job:
        """Submit *operation* against *target* and wrap the returned handle."""
        name = _operation_name(operation)
        callback = JobCallback()
        submitted_at = time.monotonic()
        handle = surface.submit(name, target, args, callback)
        logger.debug("Job submitted", extra={"operation": name})
        return cls(surface, handle, callback, operation=name, locale=locale, submitted_at=submitted_at)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def signal(self) -> CompletionSignal:
        return self._callback.signal

    @property
    def is_complete(self) -> bool:
        return self._callback.signal.is_signaled

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _describe(self, code: int) -> str:
        return self._surface.get_error_text(code, self._locale)

    def _check(self, code: int, tolerated: Collection[int] = ()) -> bool:
        ok = result_codes.check(code, tolerated, describe=self._describe)
        if not ok:
            logger.debug(
                "Tolerated result code",
                extra={"operation": self.operation, "code": code},
            )
        return ok

    def _wait_for_completion(self, timeout: float) -> None:
        if not self._callback.signal.wait(timeout):
            logger.warning(
                "Job timed out",
                extra={"operation": self.operation, "timeout": timeout},
            )
            raise JobTimeoutError(
                f"{self.operation} did not complete within {timeout}s",
                operation=self.operation,
                timeout=timeout,
            )
        if self.completed_at is None:
            self.completed_at = time.monotonic()
            logger.debug(
                "Job completed",
                extra={"operation": self.operation, "elapsed_s": round(self.completed_at - self.submitted_at, 3)},
            )

    def _iter_rows(
        self,
        property_ids: Sequence[int],
        timeout: float,
        tolerated: Collection[int],
    ) -> Iterator[tuple[Any, ...]]:
        if not self.wait(timeout, tolerated=tolerated):
            return
        code, count = self._surface.get_num_properties(self.handle, property_ids[0])
        if not self._check(code, tolerated):
            return
        for index in range(count):
            code, values = self._surface.get_nth_properties(self.handle, index, property_ids)
            if not self._check(code, tolerated):
                return
            yield convert_properties(property_ids, values)

    # -------------------------------------------------------------------------
    # Blocking API
    # -------------------------------------------------------------------------

    def wait(self, timeout: float, *, tolerated: Collection[int] = ()) -> bool:
        """Block until the job completes and check its result code.

        Args:
            timeout: Seconds to wait. Completion observed at the deadline
                counts as success.
            tolerated: Job error codes that are not failures.

        Returns:
            True on VIX_OK, False if the job ended with a tolerated code.

        Raises:
            JobTimeoutError: The job did not complete in time.
            OperationFailure: The job failed with a non-tolerated code.
        """
        self._wait_for_completion(timeout)
        return self._check(self._surface.job_error(self.handle), tolerated)

    def wait_for(self, property_id: int, timeout: float) -> Any:
        """Wait, then return the value of one result property."""
        return self.wait_for_many((property_id,), timeout)[0]

    def wait_for_many(self, property_ids: Sequence[int], timeout: float) -> tuple[Any, ...]:
        """Wait, then return result property values in *property_ids* order."""
        self.wait(timeout)
        code, values = self._surface.get_properties(self.handle, property_ids)
        self._check(code)
        return convert_properties(property_ids, values)

    def enumerate(
        self,
        property_ids: Sequence[int],
        timeout: float,
        *,
        tolerated: Collection[int] = (),
    ) -> Iterator[tuple[Any, ...]]:
        """Stream result rows as property tuples.

        Rows are fetched one at a time as the iterator advances; nothing is
        requested from the surface before the first next(). The stream ends
        after the last row, or early and silently when the job error, the
        row count query or a row fetch returns a code in *tolerated*.

        Raises:
            JobConsumedError: enumerate() was already called on this job.
            JobTimeoutError, OperationFailure: while iterating.
        """
        if not property_ids:
            raise ValueError("enumerate() needs at least one property id")
        if self._consumed:
            raise JobConsumedError(
                f"Results of {self.operation} were already enumerated",
                {"operation": self.operation},
            )
        self._consumed = True
        return self._iter_rows(tuple(property_ids), timeout, tolerated)

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def wait_async(self, timeout: float, *, tolerated: Collection[int] = ()) -> bool:
        """wait() on a worker thread; the event loop is never blocked."""
        return await asyncio.to_thread(self.wait, timeout, tolerated=tolerated)

    async def wait_for_async(self, property_id: int, timeout: float) -> Any:
        return await asyncio.to_thread(self.wait_for, property_id, timeout)

    def to_task(self, timeout: float) -> asyncio.Task[bool]:
        """Schedule wait_async() on the running loop and return the task."""
        return asyncio.ensure_future(self.wait_async(timeout))

    def __repr__(self) -> str:
        state = "complete" if self.is_complete else "pending"
        return f"<Job {self.operation} {state}>"
