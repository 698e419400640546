"""Domain models for the NTFS mount workflow."""

from __future__ import annotations

from .models import (
    ApprovalStep,
    Dependency,
    MountRequest,
    RunResult,
    RunState,
    VolumeCandidate,
    split_candidates,
)


__all__ = [
    "ApprovalStep",
    "Dependency",
    "MountRequest",
    "RunResult",
    "RunState",
    "VolumeCandidate",
    "split_candidates",
]
