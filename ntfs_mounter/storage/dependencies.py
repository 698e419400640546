"""Dependency checks and installs for Homebrew, macFUSE and ntfs-3g.

Check order matters: Homebrew is needed to install the other two, so its
absence is the only unrecoverable condition here. macFUSE needs a manual
System Extension approval after install; the run blocks until the user
acknowledges it (Ctrl-C or EOF cancels the wait).

Example:
    >>> installed = verify_dependencies(default_dependencies())
    >>> print(installed)
    ['ntfs-3g']
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, Optional

from ntfs_mounter.domain.models import ApprovalStep, Dependency
from ntfs_mounter.logging import LoggerFactory
from ntfs_mounter.storage import commands
from ntfs_mounter.storage.exceptions import (
    ApprovalCancelledError,
    DependencyInstallError,
    PackageManagerMissingError,
)
from ntfs_mounter.ui import console


log = LoggerFactory.for_dependencies()

PACKAGE_MANAGER = "Homebrew"
PACKAGE_MANAGER_URL = "https://brew.sh/"
SECURITY_SETTINGS_URL = "x-apple-systempreferences:com.apple.preference.security"
FUSE_BUNDLE_PATHS = (
    Path("/Library/Filesystems/macfuse.fs"),
    Path("/Library/Filesystems/osxfuse.fs"),  # pre-4.0 installs
)

MACFUSE_APPROVAL = ApprovalStep(
    title="ACTION REQUIRED: Approve the System Extension",
    instructions=(
        "In the window that opens, scroll down if needed.",
        "Click 'Allow' next to the message about system software from 'Benjamin Fleischer'.",
        "If your Mac asks you to restart, please do so and then run this script again.",
    ),
    settings_url=SECURITY_SETTINGS_URL,
)


def default_dependencies() -> list[Dependency]:
    """Homebrew, macFUSE and ntfs-3g, in check order."""
    return [
        Dependency(name=PACKAGE_MANAGER, executable="brew"),
        Dependency(
            name="macFUSE",
            bundle_paths=FUSE_BUNDLE_PATHS,
            install_command=("brew", "install", "--cask", "macfuse"),
            post_install_step=MACFUSE_APPROVAL,
        ),
        # The core formula is stale; this tap builds against current macFUSE.
        Dependency(
            name="ntfs-3g",
            executable="ntfs-3g",
            install_command=("brew", "install", "gromgit/fuse/ntfs-3g-mac"),
        ),
    ]


def is_present(dependency: Dependency) -> bool:
    if dependency.executable and commands.command_exists(dependency.executable):
        return True
    return any(path.exists() for path in dependency.bundle_paths)


def install_dependency(dependency: Dependency) -> None:
    """Install through the package manager, streaming its output to the terminal.

    Raises:
        DependencyInstallError: If the install command fails or cannot start
    """
    if dependency.install_command is None:
        raise DependencyInstallError(dependency.name, returncode=1, stderr="no install command")
    console.warn(f"{dependency.name} not found. Attempting to install...")
    try:
        commands.run_command(dependency.install_command, check=True, capture_output=False)
    except subprocess.CalledProcessError as error:
        raise DependencyInstallError(
            dependency.name, error.returncode, (error.stderr or "").strip()
        ) from error
    except FileNotFoundError as error:
        raise DependencyInstallError(dependency.name, 127, str(error)) from error
    log.info(f"Installed {dependency.name}")


def request_approval(
    step: ApprovalStep,
    acknowledge: Callable[[str], str] = input,
    name: str = "macFUSE",
) -> None:
    """Show the approval instructions and wait for the user.

    Raises:
        ApprovalCancelledError: If the user interrupts the wait (Ctrl-C/EOF)
    """
    console.say()
    console.warn(step.title)
    console.say(f"macOS requires your manual approval for {name} to work.")
    if step.settings_url:
        console.say("The 'Privacy & Security' settings will now open for you.")
        console.say()
        if not commands.launch_detached(["open", step.settings_url]):
            log.warning("Could not open System Settings; open Privacy & Security manually")
    console.warn("Please do the following:")
    console.numbered(step.instructions)
    log.info(f"Waiting for {name} approval")
    try:
        console.pause(
            "Press [Enter] to continue after approving the extension...",
            read=acknowledge,
        )
    except (KeyboardInterrupt, EOFError) as error:
        console.say()
        raise ApprovalCancelledError(name) from error
    log.info(f"{name} approval acknowledged")


def verify_dependencies(
    dependencies: Optional[Iterable[Dependency]] = None,
    acknowledge: Callable[[str], str] = input,
) -> list[str]:
    """Ensure every dependency is present, installing what can be installed.

    Returns:
        Names of the dependencies that were installed during this run

    Raises:
        PackageManagerMissingError: If a non-installable dependency is missing
        DependencyInstallError: If an install fails
        ApprovalCancelledError: If the approval wait is interrupted
    """
    if dependencies is None:
        dependencies = default_dependencies()
    console.say()
    console.info("Checking for dependencies...")
    installed: list[str] = []
    for dependency in dependencies:
        if is_present(dependency):
            log.debug(f"{dependency.name} found")
            continue
        if not dependency.installable:
            log.error(f"{dependency.name} is missing and cannot be installed automatically")
            raise PackageManagerMissingError(dependency.name, PACKAGE_MANAGER_URL)
        install_dependency(dependency)
        installed.append(dependency.name)
        if dependency.post_install_step is not None:
            request_approval(dependency.post_install_step, acknowledge, dependency.name)
    console.success("All dependencies are satisfied.")
    return installed
