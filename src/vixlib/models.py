"""Data models for vixlib."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum, IntFlag
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vixlib.virtual_machine import VirtualMachine


class Operation(str, Enum):
    """Native asynchronous operations submitted through the surface."""

    POWER_ON = "power_on"
    POWER_OFF = "power_off"
    SUSPEND = "suspend"
    WAIT_FOR_TOOLS_IN_GUEST = "wait_for_tools_in_guest"
    LOGIN_IN_GUEST = "login_in_guest"
    LOGOUT_FROM_GUEST = "logout_from_guest"
    COPY_FILE_FROM_HOST_TO_GUEST = "copy_file_from_host_to_guest"
    COPY_FILE_FROM_GUEST_TO_HOST = "copy_file_from_guest_to_host"
    DELETE_FILE_IN_GUEST = "delete_file_in_guest"
    DELETE_DIRECTORY_IN_GUEST = "delete_directory_in_guest"
    CREATE_DIRECTORY_IN_GUEST = "create_directory_in_guest"
    CREATE_TEMP_FILE_IN_GUEST = "create_temp_file_in_guest"
    FILE_EXISTS_IN_GUEST = "file_exists_in_guest"
    DIRECTORY_EXISTS_IN_GUEST = "directory_exists_in_guest"
    LIST_DIRECTORY_IN_GUEST = "list_directory_in_guest"
    RUN_PROGRAM_IN_GUEST = "run_program_in_guest"
    LIST_PROCESSES_IN_GUEST = "list_processes_in_guest"
    KILL_PROCESS_IN_GUEST = "kill_process_in_guest"
    READ_VARIABLE = "read_variable"
    WRITE_VARIABLE = "write_variable"
    CAPTURE_SCREEN_IMAGE = "capture_screen_image"
    CREATE_SNAPSHOT = "create_snapshot"
    REVERT_TO_SNAPSHOT = "revert_to_snapshot"
    REMOVE_SNAPSHOT = "remove_snapshot"


class VariableType(IntEnum):
    """Disjoint variable classes, values as in the VIX API."""

    GUEST_VARIABLE = 1
    CONFIG_RUNTIME_ONLY = 2
    GUEST_ENVIRONMENT_VARIABLE = 3


class PowerState(IntFlag):
    """OR-ed VIX_POWERSTATE_* bits of a VM or snapshot."""

    POWERING_OFF = 0x0001
    POWERED_OFF = 0x0002
    POWERING_ON = 0x0004
    POWERED_ON = 0x0008
    SUSPENDING = 0x0010
    SUSPENDED = 0x0020
    TOOLS_RUNNING = 0x0040
    RESETTING = 0x0080
    BLOCKED_ON_MSG = 0x0100
    PAUSED = 0x0200
    RESUMING = 0x0800


@dataclass(frozen=True, kw_only=True)
class GuestProcess:
    """A process in the guest operating system, as seen at query time.

    Descriptors are never refreshed; query the VM again for current state.
    """

    id: int
    name: str
    command: str
    owner: str = ""
    start_time: datetime | None = None
    is_being_debugged: bool = False
    exit_code: int = 0
    vm: VirtualMachine | None = field(default=None, repr=False, compare=False)

    def kill(self, timeout: float | None = None) -> None:
        """Kill this process in the guest of the VM that reported it."""
        if self.vm is None:
            raise ValueError(f"Process {self.id} is not bound to a virtual machine")
        self.vm.kill_process_in_guest(self.id, timeout=timeout)
