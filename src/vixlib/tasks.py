"""Sequential composition of native jobs.

Some operations only make sense once a previous one has taken effect on the
same VM: "wait for tools" after "power on", "login" after the guest is up.
Submitting them concurrently against one handle is undefined behavior in
the native library, so a chain never submits step N+1 before step N's job
has completed.

Steps are given as zero-argument factories. A factory is not called until
its turn, which is what defers submission. The first failing step ends
the chain and its exception becomes the chain's result.

Example:
    ```python
    task = start_jobs(
        [
            lambda: Job.submit(surface, Operation.POWER_ON, vm, options),
            lambda: Job.submit(surface, Operation.WAIT_FOR_TOOLS_IN_GUEST, vm, 60),
        ],
        timeout=60,
    )
    task.add_done_callback(report)  # or: await task
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

from vixlib._logging import get_logger

if TYPE_CHECKING:
    from vixlib.job import Job

logger = get_logger(__name__)

JobFactory = Callable[[], "Job"]
"""Submits one job when called."""

Step = Callable[[], Awaitable[Any]]
"""Starts one unit of async work when called."""


async def run_in_sequence(steps: Iterable[Step]) -> None:
    """Await each step to completion before starting the next."""
    for index, step in enumerate(steps):
        try:
            await step()
        except Exception:
            logger.debug("Chain aborted", extra={"step": index})
            raise


async def run_jobs(factories: Iterable[JobFactory], timeout: float) -> None:
    """Submit and await jobs one after another.

    Each job gets the full *timeout*; there is no aggregate deadline.
    """

    def _step(factory: JobFactory) -> Step:
        async def _run() -> None:
            job = factory()
            await job.wait_async(timeout)

        return _run

    await run_in_sequence(_step(factory) for factory in factories)


def start_jobs(factories: Iterable[JobFactory], timeout: float) -> asyncio.Task[None]:
    """Schedule run_jobs() on the running loop without waiting for it.

    Must be called from within a running event loop.
    """
    return asyncio.ensure_future(run_jobs(factories, timeout))


def wait_jobs(factories: Iterable[JobFactory], timeout: float) -> None:
    """Blocking counterpart of run_jobs() for synchronous callers."""
    for factory in factories:
        factory().wait(timeout)
