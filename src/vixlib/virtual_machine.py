"""VirtualMachine - blocking and asyncio access to one VM.

Each method submits one native job (or a chain of them) against the VM
handle and waits for it. ``*_async`` variants run the wait on a worker
thread so the event loop keeps running.

Example:
    ```python
    vm = VirtualMachine(surface, handle)
    await vm.power_on_async()
    await vm.login_async("builder", "secret")
    vm.copy_file_from_host_to_guest("setup.exe", r"C:\\setup.exe")
    process = vm.run_program_in_guest(r"C:\\setup.exe", "/quiet")
    print(process.exit_code)
    ```

Thread-safety: none. Operations against one VM must not overlap; use the
chained async methods or await each call before issuing the next.
"""

from __future__ import annotations

import ntpath
from typing import Any

from vixlib import constants, guest_fs, result_codes
from vixlib._logging import get_logger
from vixlib.config import VixConfig
from vixlib.job import Job, convert_properties
from vixlib.models import GuestProcess, Operation, PowerState, VariableType
from vixlib.snapshot import RootSnapshotCollection
from vixlib.surface import AutomationSurface, Handle
from vixlib.tasks import JobFactory, run_jobs, wait_jobs
from vixlib.variables import VariableNamespace

logger = get_logger(__name__)

_PROCESS_PROPERTIES = (
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_ID,
    constants.VIX_PROPERTY_JOB_RESULT_ITEM_NAME,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_OWNER,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_START_TIME,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_COMMAND,
    constants.VIX_PROPERTY_JOB_RESULT_PROCESS_BEING_DEBUGGED,
)


class VirtualMachine:
    """A VM opened on the automation surface.

    Attributes:
        surface: Native automation surface
        handle: Native VM handle, owned by this object
        config: Locale and default timeouts
        snapshots: Lazily loaded snapshot tree
        guest_variables: Runtime guest variables
        guest_environment_variables: Guest OS environment
        runtime_config_variables: Runtime .vmx configuration values
    """

    def __init__(self, surface: AutomationSurface, handle: Handle, config: VixConfig | None = None) -> None:
        self.surface = surface
        self.handle = handle
        self.config = config or VixConfig()
        self.snapshots = RootSnapshotCollection(self)
        self.guest_variables = VariableNamespace(self, VariableType.GUEST_VARIABLE)
        self.guest_environment_variables = VariableNamespace(self, VariableType.GUEST_ENVIRONMENT_VARIABLE)
        self.runtime_config_variables = VariableNamespace(self, VariableType.CONFIG_RUNTIME_ONLY)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def describe_error(self, code: int) -> str:
        """Localized error text for a VIX code."""
        return self.surface.get_error_text(code, self.config.locale)

    def submit(self, operation: Operation, *args: Any) -> Job:
        """Submit *operation* against this VM's handle."""
        return Job.submit(self.surface, operation, self.handle, *args, locale=self.config.locale)

    def _property(self, property_id: int) -> Any:
        code, values = self.surface.get_properties(self.handle, (property_id,))
        result_codes.check(code, describe=self.describe_error)
        return convert_properties((property_id,), values)[0]

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def path_name(self) -> str:
        """Path of the VM's .vmx configuration file on the host."""
        return self._property(constants.VIX_PROPERTY_VM_VMX_PATHNAME)

    @property
    def is_running(self) -> bool:
        return self._property(constants.VIX_PROPERTY_VM_IS_RUNNING)

    @property
    def memory_size(self) -> int:
        """Configured memory in MB."""
        return self._property(constants.VIX_PROPERTY_VM_MEMORY_SIZE)

    @property
    def cpu_count(self) -> int:
        return self._property(constants.VIX_PROPERTY_VM_NUM_VCPUS)

    @property
    def power_state(self) -> PowerState:
        return self._property(constants.VIX_PROPERTY_VM_POWER_STATE)

    # -------------------------------------------------------------------------
    # Power
    # -------------------------------------------------------------------------

    def _power_on_jobs(self, options: int, timeout: float) -> list[JobFactory]:
        return [
            lambda: self.submit(Operation.POWER_ON, options),
            # Booting is only over once the tools answer
            lambda: self.submit(Operation.WAIT_FOR_TOOLS_IN_GUEST, timeout),
        ]

    def power_on(
        self,
        options: int = constants.VIX_VMPOWEROP_NORMAL | constants.VIX_VMPOWEROP_LAUNCH_GUI,
        timeout: float | None = None,
    ) -> None:
        """Power on and wait until VMware tools run in the guest.

        Args:
            options: VIX_VMPOWEROP_* flags.
            timeout: Seconds for each of the two steps.
                Default: config.timeouts.power_on.
        """
        timeout = timeout if timeout is not None else self.config.timeouts.power_on
        wait_jobs(self._power_on_jobs(options, timeout), timeout)

    async def power_on_async(
        self,
        options: int = constants.VIX_VMPOWEROP_NORMAL | constants.VIX_VMPOWEROP_LAUNCH_GUI,
        timeout: float | None = None,
    ) -> None:
        """power_on() as a chain: wait-for-tools is submitted after power-on completes."""
        timeout = timeout if timeout is not None else self.config.timeouts.power_on
        await run_jobs(self._power_on_jobs(options, timeout), timeout)

    def power_off(self, options: int = constants.VIX_VMPOWEROP_NORMAL, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.power_off
        self.submit(Operation.POWER_OFF, options).wait(timeout)

    def suspend(self, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.suspend
        self.submit(Operation.SUSPEND, 0).wait(timeout)

    def wait_for_tools(self, timeout: float | None = None) -> None:
        """Wait until VMware tools are running in the guest."""
        timeout = timeout if timeout is not None else self.config.timeouts.wait_for_tools
        self.submit(Operation.WAIT_FOR_TOOLS_IN_GUEST, timeout).wait(timeout)

    # -------------------------------------------------------------------------
    # Guest session
    # -------------------------------------------------------------------------

    def _login_job(self, username: str, password: str, options: int) -> Job:
        return self.submit(Operation.LOGIN_IN_GUEST, username, password, options)

    def login(self, username: str, password: str, options: int = 0, timeout: float | None = None) -> None:
        """Establish the guest authentication context used by guest operations."""
        timeout = timeout if timeout is not None else self.config.timeouts.login
        self._login_job(username, password, options).wait(timeout)

    async def login_async(self, username: str, password: str, options: int = 0, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.login
        await self._login_job(username, password, options).wait_async(timeout)

    def logout(self, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.logout
        self.submit(Operation.LOGOUT_FROM_GUEST).wait(timeout)

    # -------------------------------------------------------------------------
    # Guest files
    # -------------------------------------------------------------------------

    def _copy_to_guest_job(self, host_path: str, guest_path: str) -> Job:
        return self.submit(Operation.COPY_FILE_FROM_HOST_TO_GUEST, host_path, guest_path, 0)

    def copy_file_from_host_to_guest(self, host_path: str, guest_path: str, timeout: float | None = None) -> None:
        """Copy a file or directory into the guest. Requires login().

        Use absolute guest paths; relative path resolution is unspecified.
        """
        timeout = timeout if timeout is not None else self.config.timeouts.copy_file
        self._copy_to_guest_job(host_path, guest_path).wait(timeout)

    async def copy_file_from_host_to_guest_async(
        self, host_path: str, guest_path: str, timeout: float | None = None
    ) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.copy_file
        await self._copy_to_guest_job(host_path, guest_path).wait_async(timeout)

    def copy_file_from_guest_to_host(self, guest_path: str, host_path: str, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.copy_file
        self.submit(Operation.COPY_FILE_FROM_GUEST_TO_HOST, guest_path, host_path, 0).wait(timeout)

    def delete_file_from_guest(self, guest_path: str, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.delete_file
        self.submit(Operation.DELETE_FILE_IN_GUEST, guest_path).wait(timeout)

    def delete_directory_from_guest(self, guest_path: str, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.delete_directory
        self.submit(Operation.DELETE_DIRECTORY_IN_GUEST, guest_path, 0).wait(timeout)

    def create_directory_in_guest(self, guest_path: str, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.create_directory
        self.submit(Operation.CREATE_DIRECTORY_IN_GUEST, guest_path).wait(timeout)

    def create_temp_file_in_guest(self, timeout: float | None = None) -> str:
        """Create a temporary file in the guest and return its path."""
        timeout = timeout if timeout is not None else self.config.timeouts.create_temp_file
        job = self.submit(Operation.CREATE_TEMP_FILE_IN_GUEST, 0)
        return job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_ITEM_NAME, timeout)

    def file_exists_in_guest(self, guest_path: str, timeout: float | None = None) -> bool:
        timeout = timeout if timeout is not None else self.config.timeouts.file_exists
        job = self.submit(Operation.FILE_EXISTS_IN_GUEST, guest_path)
        return job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_GUEST_OBJECT_EXISTS, timeout)

    def directory_exists_in_guest(self, guest_path: str, timeout: float | None = None) -> bool:
        timeout = timeout if timeout is not None else self.config.timeouts.directory_exists
        job = self.submit(Operation.DIRECTORY_EXISTS_IN_GUEST, guest_path)
        return job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_GUEST_OBJECT_EXISTS, timeout)

    def list_directory_in_guest(self, guest_path: str, recurse: bool = False, timeout: float | None = None) -> list[str]:
        """List files in a guest directory.

        Missing and empty directories both return []. See guest_fs for the
        tolerated result codes.

        Args:
            guest_path: Guest directory.
            recurse: Include files from subdirectories.
            timeout: Seconds per directory. Default: config.timeouts.list_directory.
        """
        timeout = timeout if timeout is not None else self.config.timeouts.list_directory
        return guest_fs.list_directory(
            lambda path: self.submit(Operation.LIST_DIRECTORY_IN_GUEST, path, 0),
            guest_path,
            recurse,
            timeout,
        )

    # -------------------------------------------------------------------------
    # Guest processes
    # -------------------------------------------------------------------------

    def run_program_in_guest(
        self,
        program: str,
        arguments: str = "",
        options: int = constants.VIX_RUNPROGRAM_ACTIVATE_WINDOW,
        timeout: float | None = None,
    ) -> GuestProcess:
        """Run a program in the guest. Requires login().

        Without VIX_RUNPROGRAM_RETURN_IMMEDIATELY in *options* the job
        completes when the program exits.

        Returns:
            Descriptor with the process id and exit code.
        """
        timeout = timeout if timeout is not None else self.config.timeouts.run_program
        job = self.submit(Operation.RUN_PROGRAM_IN_GUEST, program, arguments, options)
        exit_code, pid = job.wait_for_many(
            (
                constants.VIX_PROPERTY_JOB_RESULT_GUEST_PROGRAM_EXIT_CODE,
                constants.VIX_PROPERTY_JOB_RESULT_PROCESS_ID,
            ),
            timeout,
        )
        command = f"{program} {arguments}" if arguments else program
        return GuestProcess(
            id=pid,
            name=ntpath.basename(program),
            command=command,
            exit_code=exit_code or 0,
            vm=self,
        )

    def detach_program_in_guest(self, program: str, arguments: str = "", timeout: float | None = None) -> GuestProcess:
        """Start a program in the guest without waiting for it to exit."""
        return self.run_program_in_guest(
            program,
            arguments,
            constants.VIX_RUNPROGRAM_ACTIVATE_WINDOW | constants.VIX_RUNPROGRAM_RETURN_IMMEDIATELY,
            timeout,
        )

    def list_processes_in_guest(self, timeout: float | None = None) -> dict[int, GuestProcess]:
        """Processes running in the guest, keyed by process id."""
        timeout = timeout if timeout is not None else self.config.timeouts.list_processes
        job = self.submit(Operation.LIST_PROCESSES_IN_GUEST, 0)
        processes: dict[int, GuestProcess] = {}
        for pid, name, owner, start_time, command, debugged in job.enumerate(_PROCESS_PROPERTIES, timeout):
            processes[pid] = GuestProcess(
                id=pid,
                name=name or "",
                owner=owner or "",
                start_time=start_time,
                command=command or "",
                is_being_debugged=bool(debugged),
                vm=self,
            )
        return processes

    @property
    def guest_processes(self) -> dict[int, GuestProcess]:
        return self.list_processes_in_guest()

    def kill_process_in_guest(self, pid: int, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self.config.timeouts.kill_process
        self.submit(Operation.KILL_PROCESS_IN_GUEST, pid, 0).wait(timeout)

    # -------------------------------------------------------------------------
    # Screen
    # -------------------------------------------------------------------------

    def capture_screen_image(self, timeout: float | None = None) -> bytes:
        """Capture the guest screen as PNG bytes. Requires login()."""
        timeout = timeout if timeout is not None else self.config.timeouts.capture_screen_image
        job = self.submit(Operation.CAPTURE_SCREEN_IMAGE, constants.VIX_CAPTURESCREENFORMAT_PNG)
        return job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_SCREEN_IMAGE_DATA, timeout)

    def __repr__(self) -> str:
        return f"<VirtualMachine {self.handle!r}>"
