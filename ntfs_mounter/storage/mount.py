"""Read-write NTFS mounting through ntfs-3g.

Mount Sequence:
    1. Build the MountRequest (volumes root + sanitized label)
    2. Unmount the device if macOS already auto-mounted it (read-only)
    3. Create the mount point directory (`mkdir -p`, idempotent)
    4. Run ntfs-3g with rw,auto_xattr,defer-permissions
    5. Open the mount point in Finder, detached and best-effort

The unmount must happen before the directory is created and the driver runs;
ntfs-3g cannot attach over an existing mount of the same device. Nothing is
rolled back on failure: a created mount point directory is left in place.

Functions:
    - sanitize_label(): Filesystem-safe directory name from a volume label
    - build_mount_request(): Resolve the mount point for a candidate
    - is_device_mounted(): Exact device match against `mount` output
    - unmount_device(): `diskutil unmount /dev/<id>`
    - create_mount_point(): `mkdir -p <path>`
    - resolve_driver_path(): Locate the ntfs-3g binary
    - mount_ntfs(): Run ntfs-3g
    - open_in_file_browser(): `open <path>` without waiting
    - mount_volume(): The full sequence above
"""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from ntfs_mounter.config.settings import DEFAULT_MOUNT_OPTIONS, DEFAULT_VOLUMES_ROOT
from ntfs_mounter.domain.models import MountRequest, VolumeCandidate
from ntfs_mounter.logging import LoggerFactory, operation_context
from ntfs_mounter.storage import commands
from ntfs_mounter.storage.exceptions import (
    DependencyMissingError,
    MountCommandFailedError,
    MountError,
    MountPointError,
    UnmountFailedError,
)
from ntfs_mounter.ui import console


log = LoggerFactory.for_mount()

DRIVER_NAME = "ntfs-3g"
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_label(label: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with an underscore."""
    return _UNSAFE_CHARS_RE.sub("_", label)


def build_mount_request(
    candidate: VolumeCandidate,
    volumes_root: str | Path = DEFAULT_VOLUMES_ROOT,
) -> MountRequest:
    """Derive the mount point for a candidate.

    >>> build_mount_request(VolumeCandidate("disk3s1", "Windows HD!")).mount_point
    PosixPath('/Volumes/Windows_HD_')
    """
    mount_point = Path(volumes_root) / sanitize_label(candidate.label)
    return MountRequest(device_identifier=candidate.device_identifier, mount_point=mount_point)


def is_device_mounted(device_identifier: str) -> bool:
    """Check `mount` output for /dev/<identifier> as a mounted source.

    Matches the first field exactly so disk3s1 does not match disk3s10.
    """
    device_path = f"/dev/{device_identifier}"
    try:
        result = commands.run_command(["mount"], check=True, log_output=False)
    except subprocess.CalledProcessError as error:
        raise MountError(
            f"Could not query mount state (exit status {error.returncode})"
        ) from error
    except FileNotFoundError as error:
        raise MountError(f"Could not query mount state: {error}") from error
    for line in result.stdout.splitlines():
        parts = line.split()
        if parts and parts[0] == device_path:
            log.debug(f"{device_path} is mounted: {line.strip()}")
            return True
    return False


def unmount_device(device_identifier: str, use_sudo: bool = True) -> None:
    """Unmount a device with diskutil.

    Raises:
        UnmountFailedError: If diskutil exits non-zero or cannot be run
    """
    device_path = f"/dev/{device_identifier}"
    try:
        commands.run_command(
            commands.with_sudo(["diskutil", "unmount", device_path], use_sudo),
            check=True,
            capture_output=False,
        )
    except subprocess.CalledProcessError as error:
        raise UnmountFailedError(
            device_path, error.returncode, (error.stderr or "").strip()
        ) from error
    except FileNotFoundError as error:
        raise UnmountFailedError(device_path, 127, str(error)) from error
    log.info(f"Unmounted {device_path}")


def create_mount_point(path: str | Path, use_sudo: bool = True) -> None:
    """Create the mount point directory; succeeds if it already exists.

    Raises:
        MountPointError: If mkdir exits non-zero or cannot be run
    """
    try:
        commands.run_command(
            commands.with_sudo(["mkdir", "-p", str(path)], use_sudo),
            check=True,
            capture_output=False,
        )
    except subprocess.CalledProcessError as error:
        raise MountPointError(str(path), error.returncode, (error.stderr or "").strip()) from error
    except FileNotFoundError as error:
        raise MountPointError(str(path), 127, str(error)) from error


def resolve_driver_path(configured: Optional[str] = None) -> str:
    """Return the ntfs-3g path from settings, or from PATH.

    Raises:
        DependencyMissingError: If ntfs-3g cannot be found
    """
    if configured:
        return configured
    path = shutil.which(DRIVER_NAME)
    if path is None:
        raise DependencyMissingError(DRIVER_NAME)
    return path


def build_mount_command(
    request: MountRequest,
    driver_path: str,
    options: str = DEFAULT_MOUNT_OPTIONS,
    use_sudo: bool = True,
) -> list[str]:
    return commands.with_sudo(
        [driver_path, request.device_path, str(request.mount_point), "-o", options],
        use_sudo,
    )


def mount_ntfs(
    request: MountRequest,
    driver_path: str,
    options: str = DEFAULT_MOUNT_OPTIONS,
    use_sudo: bool = True,
) -> None:
    """Run ntfs-3g for the request.

    Raises:
        MountCommandFailedError: If the driver exits non-zero, carrying its status
    """
    command = build_mount_command(request, driver_path, options, use_sudo)
    try:
        commands.run_command(command, check=True, capture_output=False)
    except subprocess.CalledProcessError as error:
        raise MountCommandFailedError(
            request.device_path,
            str(request.mount_point),
            error.returncode,
            (error.stderr or "").strip(),
        ) from error
    except FileNotFoundError as error:
        raise MountCommandFailedError(
            request.device_path, str(request.mount_point), 127, str(error)
        ) from error


def open_in_file_browser(path: str | Path) -> None:
    """Open the path in Finder without waiting; failures are ignored."""
    commands.launch_detached(["open", str(path)])


def mount_volume(
    candidate: VolumeCandidate,
    *,
    driver_path: str,
    volumes_root: str | Path = DEFAULT_VOLUMES_ROOT,
    options: str = DEFAULT_MOUNT_OPTIONS,
    use_sudo: bool = True,
    open_browser: bool = True,
) -> MountRequest:
    """Unmount, create the mount point, mount read-write, then open Finder.

    Returns:
        The MountRequest that was mounted

    Raises:
        UnmountFailedError, MountPointError, MountCommandFailedError
    """
    request = build_mount_request(candidate, volumes_root)
    with operation_context(
        "mount", device=request.device_path, mount_point=str(request.mount_point)
    ) as op_log:
        if is_device_mounted(request.device_identifier):
            console.warn("Unmounting current instance...")
            unmount_device(request.device_identifier, use_sudo)
        else:
            console.info("Drive is already unmounted.")

        op_log.debug(f"Creating mount point {request.mount_point}")
        create_mount_point(request.mount_point, use_sudo)

        console.info("Mounting with NTFS-3G...")
        mount_ntfs(request, driver_path, options, use_sudo)

    console.say()
    console.success(f"Success! Mounted at: {request.mount_point}")
    if open_browser:
        open_in_file_browser(request.mount_point)
    return request
