"""Domain model for the NTFS mount workflow.

Type-safe records passed between the dependency check, the volume scan, the
selection prompt and the mount step. Everything here lives for a single run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


# ==============================================================================
# Dependency Domain
# ==============================================================================


@dataclass(frozen=True)
class ApprovalStep:
    """A manual, user-driven step the host OS requires after an install."""

    title: str
    instructions: tuple[str, ...]
    settings_url: Optional[str] = None  # Opened with `open` before waiting


@dataclass(frozen=True)
class Dependency:
    """An external tool the mount workflow relies on.

    A dependency is present when its executable resolves on PATH, or when
    any of its bundle paths exists (macFUSE ships a filesystem bundle rather
    than a command).
    """

    name: str  # e.g., "ntfs-3g"
    executable: Optional[str] = None  # e.g., "ntfs-3g"
    bundle_paths: tuple[Path, ...] = ()  # e.g., /Library/Filesystems/macfuse.fs
    install_command: Optional[tuple[str, ...]] = None  # None: cannot auto-install
    post_install_step: Optional[ApprovalStep] = None

    @property
    def installable(self) -> bool:
        return self.install_command is not None


# ==============================================================================
# Volume Domain
# ==============================================================================


@dataclass(frozen=True)
class VolumeCandidate:
    """An external NTFS partition discovered by `diskutil list external`."""

    device_identifier: str  # e.g., "disk3s1"
    label: str  # e.g., "Windows HD"

    @property
    def device_path(self) -> str:
        """Device node path (e.g., /dev/disk3s1)."""
        return f"/dev/{self.device_identifier}"


@dataclass(frozen=True)
class MountRequest:
    """Where and how a selected volume gets mounted read-write."""

    device_identifier: str
    mount_point: Path  # e.g., /Volumes/Windows_HD_

    @property
    def device_path(self) -> str:
        return f"/dev/{self.device_identifier}"


def split_candidates(
    candidates: list[VolumeCandidate],
) -> tuple[list[str], list[str]]:
    """Return index-aligned (identifiers, labels) lists."""
    identifiers = [candidate.device_identifier for candidate in candidates]
    labels = [candidate.label for candidate in candidates]
    return identifiers, labels


# ==============================================================================
# Run Domain
# ==============================================================================


class RunState(Enum):
    """Linear run progression; each run passes through it once."""

    START = "start"
    DEPENDENCIES_CHECKED = "dependencies_checked"
    VOLUMES_SCANNED = "volumes_scanned"
    SELECTION_MADE = "selection_made"
    MOUNTED = "mounted"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.MOUNTED, RunState.ABORTED)


@dataclass
class RunResult:
    """Outcome of one pass through the workflow."""

    state: RunState
    exit_code: int
    request: Optional[MountRequest] = None
    installed: list[str] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.MOUNTED
