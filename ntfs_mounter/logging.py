from __future__ import annotations

import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]: <12}</cyan> | "
    "{message}"
)

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{extra[source]: <12} | "
    "{extra[tags]} | "
    "{message}"
)


def _should_log_command_output(record) -> bool:
    """Hide raw command output unless running at TRACE."""
    tags = record["extra"].get("tags", [])
    if "output" in tags:
        return record["level"].no <= logger.level("TRACE").no or (
            record["level"].no >= logger.level("WARNING").no
        )
    return True


def setup_logging(
    *,
    debug: bool = False,
    trace: bool = False,
    log_dir: Path | None = None,
) -> Logger:
    """
    Configure loguru sinks for an interactive run.

    The console sink stays quiet (WARNING+) by default so that it does not
    interleave with the interactive prompts printed on stdout. File sinks are
    only added when a log directory is given.

    Log Files:
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when --debug or --trace is enabled (3 day retention)

    Args:
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (very verbose)
        log_dir: Directory for rotating log files; no files are written if None
    """
    logger.remove()
    logger.configure(extra={"tags": [], "source": "app"})

    if trace:
        console_level = "TRACE"
    elif debug:
        console_level = "DEBUG"
    else:
        console_level = "WARNING"

    logger.add(
        sys.stderr,
        level=console_level,
        backtrace=False,
        diagnose=False,
        filter=_should_log_command_output,
        colorize=True,
        format=_CONSOLE_FORMAT,
    )

    if log_dir is None:
        return logger

    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "operations.log",
        level="INFO",
        rotation="1 MB",
        retention="7 days",
        compression="zip",
        backtrace=False,
        diagnose=False,
        format=_FILE_FORMAT,
    )

    if debug or trace:
        logger.add(
            log_dir / "debug.log",
            level="TRACE" if trace else "DEBUG",
            rotation="5 MB",
            retention="3 days",
            compression="zip",
            backtrace=True,
            diagnose=True,
            format=_FILE_FORMAT,
        )

    return logger


def get_logger(
    *,
    tags: Iterable[str] | None = None,
    source: str | None = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        tags: Tags for filtering (e.g., ["mount", "storage"])
        source: Source component (e.g., "scan", "mount")

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


@contextmanager
def operation_context(operation: str, **details):
    """
    Track an operation with automatic timing.

    Logs operation start, completion and failure with the elapsed duration.
    Exceptions are re-raised unchanged.

    Example:
        with operation_context("mount", device="disk3s1") as log:
            log.debug("Creating mount point")
    """
    operation_id = f"{operation}-{uuid.uuid4().hex[:8]}"
    log = logger.bind(source=operation, tags=[operation], operation_id=operation_id)
    start_time = time.monotonic()
    log.info(f"{operation.capitalize()} started", **details)
    try:
        yield log
    except Exception as e:
        log.error(
            f"{operation.capitalize()} failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_seconds=round(time.monotonic() - start_time, 2),
        )
        raise
    log.success(
        f"{operation.capitalize()} completed",
        duration_seconds=round(time.monotonic() - start_time, 2),
    )


class LoggerFactory:
    """Domain-specific loggers with source and tags pre-bound."""

    @staticmethod
    def for_dependencies() -> Logger:
        return logger.bind(source="dependencies", tags=["dependencies", "brew"])

    @staticmethod
    def for_scan() -> Logger:
        return logger.bind(source="scan", tags=["scan", "diskutil"])

    @staticmethod
    def for_menu() -> Logger:
        return logger.bind(source="menu", tags=["ui", "menu"])

    @staticmethod
    def for_mount() -> Logger:
        return logger.bind(source="mount", tags=["mount", "storage"])

    @staticmethod
    def for_command() -> Logger:
        """Logger for subprocess invocations."""
        return logger.bind(source="command", tags=["command"])

    @staticmethod
    def for_system() -> Logger:
        """Logger for startup, shutdown and configuration."""
        return logger.bind(source="system", tags=["system"])
