"""Logging for vixlib.

The library only ever attaches a NullHandler to the ``vixlib`` logger.
Output is switched on by an entry point calling configure_logging(), or by
setting VIXLIB_LOG_LEVEL (e.g. "DEBUG") for an embedding application that
already has handlers of its own.

Job logging passes its context as ``extra`` fields (operation, result
code, timeout, ...). JobContextFormatter renders whichever of those a
record carries after the message:

    WARNING [2026-02-25 10:02:54] vixlib.job - Job timed out [operation=power_on timeout=60]

Completion callbacks fire on threads owned by the native automation
library, so CLI output goes through a bounded queue drained by a listener
thread. A full queue drops records rather than stall a callback thread.
"""

from __future__ import annotations

import atexit
import contextlib
import logging
import logging.handlers
import os
import queue

import click

LIBRARY_LOGGER_NAME: str = "vixlib"

CONTEXT_FIELDS: tuple[str, ...] = (
    "operation",
    "code",
    "timeout",
    "elapsed_s",
    "path",
    "files",
    "snapshot",
    "step",
    "job",
)
"""``extra`` keys rendered by JobContextFormatter, in output order."""

_FMT = "%(levelname)s [%(asctime)s] %(name)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"
_QUEUE_CAPACITY = 4096

_listener: logging.handlers.QueueListener | None = None


def level_from_env(value: str | None) -> int | None:
    """Parse a VIXLIB_LOG_LEVEL value; None for blank, unknown or NOTSET."""
    if not value:
        return None
    return logging.getLevelNamesMapping().get(value.strip().upper()) or None


logging.getLogger(LIBRARY_LOGGER_NAME).addHandler(logging.NullHandler())

if (_env_level := level_from_env(os.environ.get("VIXLIB_LOG_LEVEL"))) is not None:
    logging.getLogger(LIBRARY_LOGGER_NAME).setLevel(_env_level)


class JobContextFormatter(logging.Formatter):
    """Formatter that appends the job context carried in ``extra``."""

    def __init__(self, fmt: str = _FMT, datefmt: str = _DATEFMT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = " ".join(
            f"{name}={getattr(record, name)}" for name in CONTEXT_FIELDS if getattr(record, name, None) is not None
        )
        return f"{text} [{context}]" if context else text


class _EchoHandler(logging.Handler):
    """Writes formatted records to stderr, dimmed. Runs on the listener thread."""

    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(JobContextFormatter())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(click.style(self.format(record), dim=True), err=True)
        except BlockingIOError:
            pass  # stderr full
        except Exception:  # noqa: BLE001
            self.handleError(record)


class _DroppingQueueHandler(logging.handlers.QueueHandler):
    """QueueHandler whose enqueue never blocks the calling thread."""

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # Formatting happens on the listener thread.
        return record

    def enqueue(self, record: logging.LogRecord) -> None:
        with contextlib.suppress(queue.Full):
            self.queue.put_nowait(record)


def _stop_listener() -> None:
    """Flush queued records and stop the listener thread."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(
    *,
    level: int | str | None = None,
    quiet: bool = False,
) -> None:
    """Send vixlib log records to stderr for CLI / application entry points.

    Idempotent: the queue handler and its listener are installed once and
    flushed at interpreter exit.

    Args:
        level: Log level (e.g. logging.DEBUG, "WARNING"). Overrides VIXLIB_LOG_LEVEL.
        quiet: If True, set level to ERROR. Takes precedence over level.
    """
    global _listener
    lib_logger = logging.getLogger(LIBRARY_LOGGER_NAME)

    if _listener is None:
        for handler in [h for h in lib_logger.handlers if isinstance(h, _DroppingQueueHandler)]:
            lib_logger.removeHandler(handler)
        records: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=_QUEUE_CAPACITY)
        _listener = logging.handlers.QueueListener(records, _EchoHandler())
        _listener.start()
        lib_logger.addHandler(_DroppingQueueHandler(records))
        atexit.register(_stop_listener)

    if quiet:
        lib_logger.setLevel(logging.ERROR)
    elif level is not None:
        lib_logger.setLevel(level)
