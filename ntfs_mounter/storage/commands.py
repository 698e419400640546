"""Subprocess helpers shared by the dependency, scan and mount steps.

All commands are passed as argument lists; nothing goes through a shell.
"""

from __future__ import annotations

import shutil
import subprocess
from typing import Sequence

from ntfs_mounter.logging import LoggerFactory


log = LoggerFactory.for_command()
output_log = log.bind(tags=["command", "output"])


def run_command(
    command: Sequence[str],
    check: bool = True,
    log_output: bool = True,
    log_command: bool = True,
    capture_output: bool = True,
) -> subprocess.CompletedProcess:
    """Run a command synchronously and return the completed process.

    Args:
        command: Argument list, e.g. ["diskutil", "list", "external"]
        check: Raise CalledProcessError on a non-zero exit status
        log_output: Log stdout/stderr at TRACE even on success
        log_command: Log the command line and its return code at DEBUG
        capture_output: Capture stdout/stderr; when False the child inherits
            the terminal (used for brew and sudo, which may prompt)

    Raises:
        subprocess.CalledProcessError: If check=True and the command fails
        FileNotFoundError: If the executable does not exist
    """
    command = list(command)
    if log_command:
        log.debug(f"Running command: {' '.join(command)}")
    try:
        result = subprocess.run(
            command, check=check, text=True, capture_output=capture_output
        )
    except subprocess.CalledProcessError as error:
        log.debug(f"Command failed ({error.returncode}): {' '.join(command)}")
        if error.stdout:
            output_log.warning(f"stdout: {error.stdout.strip()}")
        if error.stderr:
            output_log.warning(f"stderr: {error.stderr.strip()}")
        raise
    if result.stdout and (log_output or result.returncode != 0):
        output_log.trace(f"stdout: {result.stdout.strip()}")
    if result.stderr and (log_output or result.returncode != 0):
        output_log.trace(f"stderr: {result.stderr.strip()}")
    if log_command:
        log.debug(f"Command completed with return code {result.returncode}")
    return result


def command_exists(name: str) -> bool:
    """Side-effect-free PATH lookup, the equivalent of `command -v`."""
    return shutil.which(name) is not None


def with_sudo(command: Sequence[str], use_sudo: bool = True) -> list[str]:
    if use_sudo:
        return ["sudo", *command]
    return list(command)


def launch_detached(command: Sequence[str]) -> bool:
    """Start a command without waiting for it; diagnostics are discarded.

    Returns:
        True if the process was started, False otherwise
    """
    try:
        subprocess.Popen(
            list(command),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as error:
        log.debug(f"Could not launch {' '.join(command)}: {error}")
        return False
    log.debug(f"Launched in background: {' '.join(command)}")
    return True
