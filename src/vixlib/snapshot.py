"""Snapshot tree of a virtual machine.

The tree is materialized lazily. A VM's RootSnapshotCollection asks the
surface for its top-level snapshots on first access; each Snapshot asks
for its own children the first time ``children`` is read and caches them.

Ownership runs one way: a collection owns its snapshots, a snapshot owns
its children collection. The child → parent link is a weak reference and
never keeps a parent alive.

Removing a snapshot evicts it from the cached collection that held it. The
native library re-parents the removed snapshot's children to its parent;
the cache does not mimic that, call ``parent.invalidate()`` (or read a
fresh tree) to observe the new layout.

Example:
    ```python
    for snapshot in vm.snapshots:
        print(snapshot.path, len(snapshot.children))

    snapshot = vm.snapshots.find_snapshot("Clean install/Updates applied")
    snapshot.revert()
    ```
"""

from __future__ import annotations

import weakref
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from vixlib import constants, result_codes
from vixlib._logging import get_logger
from vixlib.job import Job, convert_properties
from vixlib.models import Operation, PowerState
from vixlib.surface import Handle

if TYPE_CHECKING:
    from vixlib.virtual_machine import VirtualMachine

logger = get_logger(__name__)


def join_snapshot_path(parent_path: str, name: str) -> str:
    if not parent_path:
        return name
    return f"{parent_path}{constants.SNAPSHOT_PATH_SEPARATOR}{name}"


class SnapshotCollection:
    """An ordered, cached set of sibling snapshots."""

    def __init__(self, snapshots: Iterable[Snapshot] = ()) -> None:
        self._items: list[Snapshot] | None = None
        self._adopt(list(snapshots))

    def _adopt(self, snapshots: list[Snapshot]) -> None:
        for snapshot in snapshots:
            snapshot._collection = weakref.ref(self)
        self._items = snapshots

    def _snapshots(self) -> list[Snapshot]:
        if self._items is None:
            self._adopt([])
        return self._items  # type: ignore[return-value]

    def _evict(self, snapshot: Snapshot) -> bool:
        if self._items is None:
            return False
        for index, item in enumerate(self._items):
            if item is snapshot:
                del self._items[index]
                return True
        return False

    def __len__(self) -> int:
        return len(self._snapshots())

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots()))

    def __getitem__(self, index: int) -> Snapshot:
        return self._snapshots()[index]

    def __contains__(self, snapshot: object) -> bool:
        return any(item is snapshot for item in self._snapshots())

    def get_named(self, name: str) -> Snapshot | None:
        """First snapshot in this collection with display name *name*."""
        for snapshot in self._snapshots():
            if snapshot.display_name == name:
                return snapshot
        return None


class Snapshot:
    """A node in a VM's snapshot tree.

    Attributes:
        handle: Native snapshot handle, owned by this object
    """

    def __init__(self, vm: VirtualMachine, handle: Handle, parent: Snapshot | None = None) -> None:
        self.handle = handle
        self._vm = vm
        self._parent_ref: weakref.ReferenceType[Snapshot] | None = (
            weakref.ref(parent) if parent is not None else None
        )
        self._collection: weakref.ReferenceType[SnapshotCollection] | None = None
        self._children: SnapshotCollection | None = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    def _property(self, property_id: int) -> Any:
        code, values = self._vm.surface.get_properties(self.handle, (property_id,))
        result_codes.check(code, describe=self._vm.describe_error)
        return convert_properties((property_id,), values)[0]

    @property
    def parent(self) -> Snapshot | None:
        """Parent snapshot in the cached tree; None for roots and detached nodes."""
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def display_name(self) -> str:
        return self._property(constants.VIX_PROPERTY_SNAPSHOT_DISPLAYNAME)

    @property
    def description(self) -> str:
        return self._property(constants.VIX_PROPERTY_SNAPSHOT_DESCRIPTION)

    @property
    def power_state(self) -> PowerState:
        """OR-ed power state bits recorded with the snapshot."""
        return self._property(constants.VIX_PROPERTY_SNAPSHOT_POWERSTATE)

    @property
    def children(self) -> SnapshotCollection:
        """Child snapshots, fetched on first access and cached."""
        if self._children is None:
            surface = self._vm.surface
            code, count = surface.get_child_count(self.handle)
            result_codes.check(code, describe=self._vm.describe_error)
            children = []
            for index in range(count):
                code, child = surface.get_child(self.handle, index)
                result_codes.check(code, describe=self._vm.describe_error)
                children.append(Snapshot(self._vm, child, parent=self))
            self._children = SnapshotCollection(children)
        return self._children

    @property
    def path(self) -> str:
        """Display names from the root down to this snapshot, joined by "/".

        The native parent query distinguishes two "no ancestor" answers:
        SNAPSHOT_NOTFOUND (a top-level snapshot, path is its own name) and
        INVALID_ARG (the VM's base state, path is empty). Both are kept as
        separate cases.
        """
        code, parent = self._vm.surface.get_parent(self.handle)
        if code == constants.VIX_OK:
            return join_snapshot_path(Snapshot(self._vm, parent).path, self.display_name)
        if code == constants.VIX_E_SNAPSHOT_NOTFOUND:
            return self.display_name
        if code == constants.VIX_E_INVALID_ARG:
            return ""
        result_codes.check(code, describe=self._vm.describe_error)
        raise AssertionError("unreachable")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _revert_job(self, options: int) -> Job:
        return self._vm.submit(Operation.REVERT_TO_SNAPSHOT, self.handle, options)

    def revert(self, options: int = constants.VIX_VMPOWEROP_NORMAL, timeout: float | None = None) -> None:
        """Restore the VM to the state captured by this snapshot.

        Args:
            options: VIX_VMPOWEROP_* flags applied if the snapshot was
                taken while powered on.
            timeout: Seconds. Default: config.timeouts.revert_to_snapshot.
        """
        timeout = timeout if timeout is not None else self._vm.config.timeouts.revert_to_snapshot
        self._revert_job(options).wait(timeout)

    async def revert_async(self, options: int = constants.VIX_VMPOWEROP_NORMAL, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self._vm.config.timeouts.revert_to_snapshot
        await self._revert_job(options).wait_async(timeout)

    def remove(self, timeout: float | None = None) -> None:
        """Delete this snapshot and evict it from the cached tree.

        Args:
            timeout: Seconds. Default: config.timeouts.remove_snapshot.
        """
        timeout = timeout if timeout is not None else self._vm.config.timeouts.remove_snapshot
        self._vm.submit(Operation.REMOVE_SNAPSHOT, self.handle, 0).wait(timeout)
        logger.info("Snapshot removed", extra={"snapshot": repr(self.handle)})
        self._detach()

    def invalidate(self) -> None:
        """Drop cached children so the next access re-queries the surface."""
        self._release_children()

    def _release_children(self) -> None:
        if self._children is not None and self._children._items is not None:
            for child in self._children._items:
                child._parent_ref = None
                child._collection = None
        self._children = None

    def _detach(self) -> None:
        evicted = False
        collection = self._collection() if self._collection is not None else None
        if collection is not None:
            evicted = collection._evict(self)
        parent = self.parent
        if parent is not None and parent._children is not None:
            evicted = parent._children._evict(self) or evicted
        if not evicted and parent is None:
            # Obtained outside the cached tree; location unknown
            self._vm.snapshots.invalidate()
        self._parent_ref = None
        self._collection = None
        self._release_children()

    def __repr__(self) -> str:
        return f"<Snapshot {self.handle!r}>"


class RootSnapshotCollection(SnapshotCollection):
    """Top-level snapshots of a VM, fetched on first access."""

    def __init__(self, vm: VirtualMachine) -> None:
        super().__init__()
        self._vm = vm
        self._items = None

    def _snapshots(self) -> list[Snapshot]:
        if self._items is None:
            surface = self._vm.surface
            code, count = surface.get_root_snapshot_count(self._vm.handle)
            result_codes.check(code, describe=self._vm.describe_error)
            roots = []
            for index in range(count):
                code, handle = surface.get_root_snapshot(self._vm.handle, index)
                result_codes.check(code, describe=self._vm.describe_error)
                roots.append(Snapshot(self._vm, handle))
            self._adopt(roots)
        return self._items  # type: ignore[return-value]

    def invalidate(self) -> None:
        """Drop the cached tree; the next access re-queries the surface."""
        if self._items is not None:
            for snapshot in self._items:
                snapshot._collection = None
                snapshot._release_children()
        self._items = None

    def create_snapshot(
        self,
        name: str,
        description: str = "",
        options: int = constants.VIX_SNAPSHOT_INCLUDE_MEMORY,
        timeout: float | None = None,
    ) -> Snapshot:
        """Snapshot the VM's current state.

        The cached tree is dropped since the new snapshot's position is
        decided by the host.

        Returns:
            The new snapshot, detached from the cached tree.
        """
        timeout = timeout if timeout is not None else self._vm.config.timeouts.create_snapshot
        job = self._vm.submit(Operation.CREATE_SNAPSHOT, name, description, options)
        handle = job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_HANDLE, timeout)
        logger.info("Snapshot created", extra={"snapshot": name})
        self.invalidate()
        return Snapshot(self._vm, handle)

    def get_named_snapshot(self, name: str) -> Snapshot | None:
        """Look up a snapshot by display name on the host.

        Returns:
            A detached Snapshot, or None if no snapshot has that name.
        """
        code, handle = self._vm.surface.get_named_snapshot(self._vm.handle, name)
        if not result_codes.check(
            code,
            (constants.VIX_E_SNAPSHOT_NOTFOUND,),
            describe=self._vm.describe_error,
        ):
            return None
        return Snapshot(self._vm, handle)

    def find_snapshot(self, path: str) -> Snapshot | None:
        """Walk the cached tree by display names, e.g. "Base/Patched"."""
        level: SnapshotCollection = self
        found: Snapshot | None = None
        for segment in path.split(constants.SNAPSHOT_PATH_SEPARATOR):
            if not segment:
                continue
            found = level.get_named(segment)
            if found is None:
                return None
            level = found.children
        return found

    @property
    def current_snapshot(self) -> Snapshot | None:
        """The snapshot the VM is currently based on, detached."""
        code, handle = self._vm.surface.get_current_snapshot(self._vm.handle)
        if not result_codes.check(
            code,
            (constants.VIX_E_SNAPSHOT_NOTFOUND,),
            describe=self._vm.describe_error,
        ):
            return None
        return Snapshot(self._vm, handle)

    def remove_snapshot(self, snapshot: Snapshot, timeout: float | None = None) -> None:
        snapshot.remove(timeout)

    def walk(self) -> Iterator[Snapshot]:
        """Depth-first pre-order traversal of the whole tree."""
        stack = list(reversed(list(self)))
        while stack:
            snapshot = stack.pop()
            yield snapshot
            stack.extend(reversed(list(snapshot.children)))
