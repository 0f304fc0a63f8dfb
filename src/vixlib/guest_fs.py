"""Guest filesystem listing.

list_directory() lists the files below a guest directory by streaming a
LIST_DIRECTORY job's rows (item name + file flags) and, when asked,
descending into subdirectories depth-first. Every directory gets its own
job and its own full timeout.

Hosts disagree about empty or missing directories: Workstation returns no
rows, ESX fails the job with "file not found" or passes through the
guest's own not-found code, and a listing without rows can fail the row
count query with "unrecognized property". Those codes mean "empty" here.
Any other failure aborts the whole listing and discards what was gathered
so far.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Final

from vixlib import constants
from vixlib._logging import get_logger
from vixlib.job import Job

logger = get_logger(__name__)

LIST_DIRECTORY_TOLERATED: Final[frozenset[int]] = frozenset(
    {
        constants.GUEST_ERROR_FILE_NOT_FOUND,
        constants.VIX_E_FILE_NOT_FOUND,
        constants.VIX_E_UNRECOGNIZED_PROPERTY,
    }
)

_ENTRY_PROPERTIES: Final[tuple[int, int]] = (
    constants.VIX_PROPERTY_JOB_RESULT_ITEM_NAME,
    constants.VIX_PROPERTY_JOB_RESULT_FILE_FLAGS,
)

ListJobFactory = Callable[[str], Job]
"""Submits a LIST_DIRECTORY job for one guest path."""


def join_guest_path(path: str, name: str) -> str:
    """Join a guest directory and an entry name.

    Keeps the separator style of *path*: backslash for Windows-style paths
    that contain no forward slash, forward slash otherwise.
    """
    if not path:
        return name
    if path.endswith(("/", "\\")):
        return path + name
    separator = "\\" if "\\" in path and "/" not in path else "/"
    return f"{path}{separator}{name}"


def is_directory(flags: int) -> bool:
    return bool(flags & constants.VIX_FILE_ATTRIBUTES_DIRECTORY)


def list_directory(submit: ListJobFactory, path: str, recurse: bool, timeout: float) -> list[str]:
    """List files under a guest directory.

    Args:
        submit: Starts a LIST_DIRECTORY job for a guest path.
        path: Guest directory.
        recurse: Descend into subdirectories.
        timeout: Seconds allowed for each directory's job.

    Returns:
        Joined paths of the files found. Directories are descended into
        (when *recurse* is set) but not listed themselves.

    Raises:
        JobTimeoutError: A directory's job did not complete in time.
        OperationFailure: A non-tolerated code was reported.
    """
    results: list[str] = []
    rows = submit(path).enumerate(_ENTRY_PROPERTIES, timeout, tolerated=LIST_DIRECTORY_TOLERATED)
    for name, flags in rows:
        entry = join_guest_path(path, name)
        if is_directory(flags):
            if recurse:
                results.extend(list_directory(submit, entry, True, timeout))
        else:
            results.append(entry)
    logger.debug("Listed guest directory", extra={"path": path, "files": len(results)})
    return results
