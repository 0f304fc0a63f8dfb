"""Keyed access to VM and guest variables.

VIX keeps three separate variable stores, selected by VariableType:

- GUEST_VARIABLE: runtime-only values shared with VMware tools in the
  guest (e.g. "ip"); never persisted.
- GUEST_ENVIRONMENT_VARIABLE: guest OS environment. Persistent on Windows
  NT guests, visible only to the tools process on Linux guests.
- CONFIG_RUNTIME_ONLY: the VM's .vmx configuration. Reads return persisted
  values; writes last until the VM powers off.

A VariableNamespace is bound to exactly one of them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vixlib import constants
from vixlib.models import Operation, VariableType

if TYPE_CHECKING:
    from vixlib.virtual_machine import VirtualMachine


class VariableNamespace:
    """Read/write view of one variable class of a VM.

    Example:
        ```python
        path = vm.guest_environment_variables["PATH"]
        vm.guest_variables["build"] = "1234"
        ```
    """

    def __init__(self, vm: VirtualMachine, variable_type: VariableType) -> None:
        self._vm = vm
        self.variable_type = VariableType(variable_type)

    def read(self, name: str, timeout: float | None = None) -> str:
        timeout = timeout if timeout is not None else self._vm.config.timeouts.read_variable
        job = self._vm.submit(Operation.READ_VARIABLE, int(self.variable_type), name, 0)
        value = job.wait_for(constants.VIX_PROPERTY_JOB_RESULT_VM_VARIABLE_STRING, timeout)
        return value if value is not None else ""

    def write(self, name: str, value: str, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self._vm.config.timeouts.write_variable
        self._vm.submit(Operation.WRITE_VARIABLE, int(self.variable_type), name, value, 0).wait(timeout)

    def __getitem__(self, name: str) -> str:
        return self.read(name)

    def __setitem__(self, name: str, value: str) -> None:
        self.write(name, value)

    def __repr__(self) -> str:
        return f"<VariableNamespace {self.variable_type.name}>"
