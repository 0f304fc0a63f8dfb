"""Command-line interface for vixlib.

The CLI needs an *opener*: a callable that connects to the virtualization
host and opens a VM, given as an import path.

Usage:
    vixlib --opener mysite.vix:open_vm --vmx /vms/build.vmx snapshots
    vixlib --vmx /vms/build.vmx ls -r 'C:\\out'       # opener from VIXLIB_OPENER
    vixlib --vmx /vms/build.vmx ps --json | jq .
    vixlib --vmx /vms/build.vmx getvar --kind env PATH
    vixlib --vmx /vms/build.vmx power-on
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass

import click
from pydantic import ValidationError

from vixlib import (
    GuestProcess,
    JobTimeoutError,
    OperationFailure,
    SurfaceLoadError,
    VirtualMachine,
    VixConfig,
    VixError,
    __version__,
    constants,
)
from vixlib._logging import configure_logging
from vixlib.config import Timeouts
from vixlib.settings import Settings
from vixlib.surface import load_opener

# Exit codes following Unix conventions
EXIT_SUCCESS = 0
EXIT_CLI_ERROR = 2
EXIT_TIMEOUT = 124  # Matches `timeout` command
EXIT_VIX_ERROR = 125

VARIABLE_KINDS = ("guest", "env", "runtime")


@dataclass(frozen=True)
class CliContext:
    opener: str
    vmx: str
    config: VixConfig


def format_error(title: str, message: str, suggestions: list[str] | None = None) -> str:
    """Format an error message following What → Why → Fix pattern.

    Args:
        title: Short error title
        message: Detailed explanation
        suggestions: Optional list of suggestions to fix the issue

    Returns:
        Formatted error string
    """
    lines = [
        click.style(f"Error: {title}", fg="red", bold=True),
        "",
        f"  {message}",
    ]

    if suggestions:
        lines.extend(["", "  Suggestions:"])
        lines.extend(f"    • {suggestion}" for suggestion in suggestions)

    return "\n".join(lines)


def format_processes_json(processes: dict[int, GuestProcess]) -> str:
    """Format a guest process table as JSON."""
    output = [
        {
            "pid": process.id,
            "name": process.name,
            "owner": process.owner,
            "start_time": process.start_time.isoformat() if process.start_time else None,
            "command": process.command,
            "being_debugged": process.is_being_debugged,
        }
        for process in sorted(processes.values(), key=lambda p: p.id)
    ]
    return json.dumps(output, indent=2)


def open_vm(obj: CliContext) -> VirtualMachine:
    opener = load_opener(obj.opener)
    surface, handle = opener(obj.vmx)
    return VirtualMachine(surface, handle, obj.config)


def run_command(obj: CliContext, action: Callable[[VirtualMachine], None]) -> int:
    """Open the VM, run *action* against it and map vixlib errors to exit codes.

    Opening the VM is covered as well: an opener that fails to connect
    reports like any other VIX failure.

    Returns:
        Exit code for sys.exit()
    """
    try:
        action(open_vm(obj))
        return EXIT_SUCCESS

    except SurfaceLoadError as e:
        click.echo(
            format_error(
                "Cannot load opener",
                e.message,
                ["Use --opener package.module:callable", "Check that the module is importable"],
            ),
            err=True,
        )
        return EXIT_CLI_ERROR

    except JobTimeoutError as e:
        click.echo(
            format_error(
                "Operation timed out",
                f"{e.operation} did not complete within {e.timeout}s.",
                ["Increase timeout with -t/--timeout", "Check that VMware tools run in the guest"],
            ),
            err=True,
        )
        return EXIT_TIMEOUT

    except OperationFailure as e:
        click.echo(format_error(f"VIX error {e.code}", e.message), err=True)
        return EXIT_VIX_ERROR

    except VixError as e:
        click.echo(format_error("vixlib error", e.message), err=True)
        return EXIT_VIX_ERROR


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--opener", envvar="VIXLIB_OPENER", help="Import path of the VM opener (package.module:callable)")
@click.option("--vmx", required=True, help="Path of the VM configuration file on the host")
@click.option(
    "-t",
    "--timeout",
    type=click.IntRange(1, constants.MAX_TIMEOUT_SECONDS),
    help="Timeout in seconds for every operation",
)
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output")
@click.version_option(__version__, "-V", "--version", prog_name="vixlib")
@click.pass_context
def main(
    ctx: click.Context,
    opener: str | None,
    vmx: str,
    timeout: int | None,
    quiet: bool,
    verbose: bool,
) -> None:
    """Automate a VMware virtual machine."""
    configure_logging(level="DEBUG" if verbose else None, quiet=quiet)

    try:
        settings = Settings()
    except ValidationError as exc:
        raise click.UsageError(f"Invalid VIXLIB_* environment settings: {exc}") from exc

    opener = opener or settings.opener
    if not opener:
        raise click.UsageError("No opener given. Use --opener or set VIXLIB_OPENER.")

    config = VixConfig.from_settings(settings)
    if timeout is not None:
        config = config.model_copy(update={"timeouts": Timeouts.uniform(timeout)})

    ctx.obj = CliContext(opener=opener, vmx=vmx, config=config)


@main.command()
@click.pass_obj
def snapshots(obj: CliContext) -> None:
    """Print the path of every snapshot, depth first."""

    def _print_tree(vm: VirtualMachine) -> None:
        for snapshot in vm.snapshots.walk():
            click.echo(snapshot.path)

    sys.exit(run_command(obj, _print_tree))


@main.command("ls")
@click.argument("path")
@click.option("-r", "--recurse", is_flag=True, help="Include files in subdirectories")
@click.pass_obj
def list_directory(obj: CliContext, path: str, recurse: bool) -> None:
    """List files in a guest directory."""

    def _list(vm: VirtualMachine) -> None:
        for entry in vm.list_directory_in_guest(path, recurse=recurse):
            click.echo(entry)

    sys.exit(run_command(obj, _list))


@main.command("ps")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_processes(obj: CliContext, json_output: bool) -> None:
    """List processes running in the guest."""

    def _print_processes(vm: VirtualMachine) -> None:
        processes = vm.list_processes_in_guest()
        if json_output:
            click.echo(format_processes_json(processes))
            return
        for process in sorted(processes.values(), key=lambda p: p.id):
            click.echo(f"{process.id:>8}  {process.owner:<16}  {process.command or process.name}")

    sys.exit(run_command(obj, _print_processes))


@main.command()
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice(VARIABLE_KINDS, case_sensitive=False),
    default="guest",
    show_default=True,
    help="Variable class: guest runtime, guest environment or VM runtime config",
)
@click.pass_obj
def getvar(obj: CliContext, name: str, kind: str) -> None:
    """Print the value of a VM or guest variable."""

    def _read(vm: VirtualMachine) -> None:
        namespace = {
            "guest": vm.guest_variables,
            "env": vm.guest_environment_variables,
            "runtime": vm.runtime_config_variables,
        }[kind.lower()]
        click.echo(namespace[name])

    sys.exit(run_command(obj, _read))


@main.command("power-on")
@click.pass_obj
def power_on(obj: CliContext) -> None:
    """Power on the VM and wait for VMware tools."""
    sys.exit(run_command(obj, lambda vm: asyncio.run(vm.power_on_async())))


if __name__ == "__main__":
    main()
