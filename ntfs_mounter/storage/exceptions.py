"""Custom exceptions for dependency, scan and mount operations.

This module defines a hierarchy of exceptions so the workflow can tell an
unrecoverable bootstrap failure from an expected empty scan or a cancelled
prompt, while still mapping every one of them to a clean abort.

Exception Hierarchy:
    NtfsMounterError (base)
        ├── DependencyError
        │   ├── PackageManagerMissingError
        │   ├── DependencyMissingError
        │   └── DependencyInstallError
        ├── ScanError
        │   ├── NoVolumesFoundError
        │   └── VolumeParseError
        ├── MountError
        │   ├── UnmountFailedError
        │   ├── MountPointError
        │   └── MountCommandFailedError
        └── CancelledError
            ├── ApprovalCancelledError
            └── SelectionCancelledError

Usage:
    from ntfs_mounter.storage.exceptions import NoVolumesFoundError

    if not candidates:
        raise NoVolumesFoundError()
"""

from __future__ import annotations

from typing import Optional


class NtfsMounterError(Exception):
    """Base exception for all ntfs-mounter failures."""


class DependencyError(NtfsMounterError):
    """Base exception for dependency checks and installs."""


class PackageManagerMissingError(DependencyError):
    """The package manager is absent and cannot be bootstrapped."""

    def __init__(self, name: str, install_url: str = "https://brew.sh/"):
        self.name = name
        self.install_url = install_url
        super().__init__(f"{name} not found. Please install it from {install_url}")


class DependencyMissingError(DependencyError):
    """A required tool is still missing after the dependency check."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} not found on PATH")


class DependencyInstallError(DependencyError):
    """Installing a dependency through the package manager failed."""

    def __init__(self, name: str, returncode: int, stderr: str = ""):
        self.name = name
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Failed to install {name} (exit status {returncode})"
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class ScanError(NtfsMounterError):
    """Listing or parsing external disks failed."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


class NoVolumesFoundError(ScanError):
    """No external NTFS partitions were found. An expected outcome."""

    def __init__(self):
        super().__init__("No external NTFS partitions found.")


class VolumeParseError(ScanError):
    """A partition line did not match the expected diskutil layout."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Could not parse disk listing line ({reason}): {line.strip()!r}")


class MountError(NtfsMounterError):
    """Base exception for mount-related errors."""


class UnmountFailedError(MountError):
    """Failed to unmount the existing read-only instance."""

    def __init__(self, device: str, returncode: int, stderr: str = ""):
        self.device = device
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Failed to unmount {device} (exit status {returncode})"
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class MountPointError(MountError):
    """The mount point directory could not be created."""

    def __init__(self, path: str, returncode: int, stderr: str = ""):
        self.path = path
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Failed to create mount point {path} (exit status {returncode})"
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class MountCommandFailedError(MountError):
    """The NTFS driver exited with a non-zero status."""

    def __init__(self, device: str, mount_point: str, returncode: int, stderr: str = ""):
        self.device = device
        self.mount_point = mount_point
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Failed to mount {device} at {mount_point} (exit status {returncode})"
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class CancelledError(NtfsMounterError):
    """The user cancelled an interactive step."""


class ApprovalCancelledError(CancelledError):
    """The system extension approval wait was interrupted."""

    def __init__(self, name: str = "macFUSE"):
        self.name = name
        super().__init__(f"Cancelled while waiting for {name} approval")


class SelectionCancelledError(CancelledError):
    """The drive selection prompt was interrupted."""

    def __init__(self):
        super().__init__("Drive selection cancelled")
