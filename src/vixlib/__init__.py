"""vixlib: blocking and asyncio automation of VMware virtual machines.

vixlib drives a callback-based native automation library (VIX) and turns
its "submit, get a completion callback on some thread, poll properties"
protocol into ordinary blocking calls and asyncio tasks.

Quick Start:
    ```python
    from vixlib import VirtualMachine

    surface, handle = my_vix_adapter.open(r"C:\\VMs\\build\\build.vmx")
    vm = VirtualMachine(surface, handle)
    vm.power_on()
    vm.login("builder", "secret")
    print(vm.list_directory_in_guest(r"C:\\out", recurse=True))
    ```

Async chain (each step submitted after the previous completed):
    ```python
    await vm.power_on_async()
    await vm.login_async("builder", "secret")
    ```

Snapshots:
    ```python
    for snapshot in vm.snapshots.walk():
        print(snapshot.path)
    vm.snapshots.find_snapshot("Clean/Patched").revert()
    ```

The surface object is supplied by the caller; see vixlib.surface for the
interface it must implement.
"""

from vixlib.config import Timeouts, VixConfig
from vixlib.exceptions import (
    JobConsumedError,
    JobTimeoutError,
    OperationFailure,
    SurfaceLoadError,
    VixError,
)
from vixlib.job import Job
from vixlib.models import GuestProcess, Operation, PowerState, VariableType
from vixlib.snapshot import RootSnapshotCollection, Snapshot, SnapshotCollection
from vixlib.surface import AutomationSurface
from vixlib.variables import VariableNamespace
from vixlib.virtual_machine import VirtualMachine

__all__ = [
    "AutomationSurface",
    "GuestProcess",
    "Job",
    "JobConsumedError",
    "JobTimeoutError",
    "Operation",
    "OperationFailure",
    "PowerState",
    "RootSnapshotCollection",
    "Snapshot",
    "SnapshotCollection",
    "SurfaceLoadError",
    "Timeouts",
    "VariableNamespace",
    "VariableType",
    "VirtualMachine",
    "VixConfig",
    "VixError",
]

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vixlib")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
