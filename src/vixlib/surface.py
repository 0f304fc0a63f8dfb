"""Interface to the native automation library.

vixlib does not talk to VMware itself. It drives an object implementing
AutomationSurface: a thin adapter over VixCOM, the VIX C API or a test
double. Every call on the surface returns immediately; asynchronous
operations report completion by calling ``callback.on_complete(job)`` exactly
once, on a thread the surface chooses.

Synchronous queries return ``(code, value)`` pairs instead of raising, so
that the caller decides which codes are failures (see result_codes).
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from vixlib.exceptions import SurfaceLoadError

Handle = Any
"""Opaque native object reference (VM, snapshot or job)."""


@runtime_checkable
class JobCallback(Protocol):
    def on_complete(self, job: Handle) -> None: ...


@runtime_checkable
class AutomationSurface(Protocol):
    """The native asynchronous automation API, as consumed by vixlib."""

    def submit(self, operation: str, target: Handle, args: Sequence[Any], callback: JobCallback) -> Handle:
        """Start an operation against *target*; return the in-flight job handle."""
        ...

    def job_error(self, job: Handle) -> int:
        """Result code of a completed job."""
        ...

    def get_properties(self, handle: Handle, property_ids: Sequence[int]) -> tuple[int, list[Any]]: ...

    def get_num_properties(self, job: Handle, property_id: int) -> tuple[int, int]: ...

    def get_nth_properties(self, job: Handle, index: int, property_ids: Sequence[int]) -> tuple[int, list[Any]]: ...

    def get_child_count(self, snapshot: Handle) -> tuple[int, int]: ...

    def get_child(self, snapshot: Handle, index: int) -> tuple[int, Handle]: ...

    def get_parent(self, snapshot: Handle) -> tuple[int, Handle | None]: ...

    def get_root_snapshot_count(self, vm: Handle) -> tuple[int, int]: ...

    def get_root_snapshot(self, vm: Handle, index: int) -> tuple[int, Handle]: ...

    def get_named_snapshot(self, vm: Handle, name: str) -> tuple[int, Handle | None]: ...

    def get_current_snapshot(self, vm: Handle) -> tuple[int, Handle | None]: ...

    def get_error_text(self, code: int, locale: str) -> str: ...


Opener = Callable[[str], tuple[AutomationSurface, Handle]]
"""Connects to the host and opens the VM at a .vmx path."""


def load_opener(path: str) -> Opener:
    """Import an opener from a ``"package.module:callable"`` path.

    Raises:
        SurfaceLoadError: Malformed path, missing module or attribute,
            or the attribute is not callable.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise SurfaceLoadError(
            f"Invalid opener path: {path!r}. Use 'package.module:callable'.",
            {"opener": path},
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SurfaceLoadError(f"Cannot import opener module {module_name!r}: {e}", {"opener": path}) from e

    opener = getattr(module, attr, None)
    if opener is None or not callable(opener):
        raise SurfaceLoadError(f"{attr!r} in {module_name!r} is not a callable", {"opener": path})
    return opener
