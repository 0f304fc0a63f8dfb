"""Configuration for vixlib.

VixConfig is passed explicitly to every VirtualMachine; nothing in the
library reads configuration from ambient or global state at call time.

Example:
    ```python
    from vixlib import VirtualMachine, VixConfig
    from vixlib.config import Timeouts

    # Default configuration: 60s for every operation
    vm = VirtualMachine(surface, handle)

    # Slow host: longer boot and copy timeouts
    config = VixConfig(timeouts=Timeouts(power_on=300, copy_file=600))
    vm = VirtualMachine(surface, handle, config)
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from vixlib import constants

if TYPE_CHECKING:
    from vixlib.settings import Settings


def _timeout(description: str) -> Any:
    return Field(
        default=constants.DEFAULT_TIMEOUT_SECONDS,
        ge=1,
        le=constants.MAX_TIMEOUT_SECONDS,
        description=description,
    )


class Timeouts(BaseModel):
    """Per-operation timeouts in seconds.

    Each field is the default used by the matching VirtualMachine or
    Snapshot method when the caller does not pass an explicit timeout.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    power_on: int = _timeout("Power on, including wait for tools")
    power_off: int = _timeout("Power off")
    suspend: int = _timeout("Suspend")
    wait_for_tools: int = _timeout("Wait for VMware tools in the guest")
    login: int = _timeout("Guest login")
    logout: int = _timeout("Guest logout")
    copy_file: int = _timeout("Host/guest file copy")
    delete_file: int = _timeout("Guest file delete")
    delete_directory: int = _timeout("Guest directory delete")
    create_directory: int = _timeout("Guest directory create")
    create_temp_file: int = _timeout("Guest temp file create")
    run_program: int = _timeout("Run a program in the guest")
    file_exists: int = _timeout("Guest file existence check")
    directory_exists: int = _timeout("Guest directory existence check")
    list_directory: int = _timeout("List one guest directory (per directory when recursing)")
    list_processes: int = _timeout("List guest processes")
    kill_process: int = _timeout("Kill a guest process")
    read_variable: int = _timeout("Read a VM/guest variable")
    write_variable: int = _timeout("Write a VM/guest variable")
    capture_screen_image: int = _timeout("Capture the guest screen")
    create_snapshot: int = _timeout("Create a snapshot")
    revert_to_snapshot: int = _timeout("Revert to a snapshot")
    remove_snapshot: int = _timeout("Remove a snapshot")

    @classmethod
    def uniform(cls, seconds: int) -> Timeouts:
        """Timeouts with the same value for every operation."""
        return cls(**dict.fromkeys(cls.model_fields, seconds))


class VixConfig(BaseModel):
    """Configuration for VirtualMachine and the objects it creates.

    Attributes:
        locale: Locale used to resolve error text for OperationFailure.
        timeouts: Default timeout for each operation.
    """

    model_config = ConfigDict(
        frozen=True,  # Immutable after creation
        extra="forbid",  # Reject unknown fields
    )

    locale: str = Field(
        default=constants.DEFAULT_LOCALE,
        min_length=1,
        description="Locale for native error descriptions",
    )
    timeouts: Timeouts = Field(
        default_factory=Timeouts,
        description="Per-operation default timeouts in seconds",
    )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> VixConfig:
        """Build a config from VIXLIB_* environment settings.

        Args:
            settings: Preloaded settings. Read from the environment if None.
        """
        from vixlib.settings import Settings  # noqa: PLC0415

        settings = settings or Settings()
        return cls(
            locale=settings.locale,
            timeouts=Timeouts.uniform(settings.default_timeout_seconds),
        )
