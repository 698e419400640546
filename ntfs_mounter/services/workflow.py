"""One pass through the mount workflow.

Start -> DependenciesChecked -> VolumesScanned -> SelectionMade -> Mounted | Aborted

Each step receives what it needs as arguments and returns its result; every
NtfsMounterError raised along the way ends the run in the Aborted state with
exit code 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ntfs_mounter.config import settings
from ntfs_mounter.domain.models import Dependency, RunResult, RunState
from ntfs_mounter.logging import LoggerFactory
from ntfs_mounter.storage import dependencies, devices, mount
from ntfs_mounter.storage.exceptions import (
    CancelledError,
    NoVolumesFoundError,
    NtfsMounterError,
)
from ntfs_mounter.ui import console, menus


log = LoggerFactory.for_system()

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class WorkflowOptions:
    volumes_root: str = settings.DEFAULT_VOLUMES_ROOT
    partition_marker: str = settings.DEFAULT_PARTITION_MARKER
    mount_options: str = settings.DEFAULT_MOUNT_OPTIONS
    ntfs_3g_path: Optional[str] = None
    use_sudo: bool = True
    open_file_browser: bool = True

    @classmethod
    def from_settings(cls) -> WorkflowOptions:
        return cls(
            volumes_root=settings.get_setting("volumes_root", settings.DEFAULT_VOLUMES_ROOT),
            partition_marker=settings.get_setting(
                "partition_marker", settings.DEFAULT_PARTITION_MARKER
            ),
            mount_options=settings.get_setting("mount_options", settings.DEFAULT_MOUNT_OPTIONS),
            ntfs_3g_path=settings.get_setting("ntfs_3g_path"),
            use_sudo=settings.get_bool("use_sudo", True),
            open_file_browser=settings.get_bool("open_file_browser", True),
        )


def _abort(state: RunState, error: NtfsMounterError, installed: list[str]) -> RunResult:
    if isinstance(error, NoVolumesFoundError):
        console.error(str(error))
    elif isinstance(error, CancelledError):
        console.warn(f"{error}. Nothing was mounted.")
    else:
        console.error(f"Error: {error}")
    returncode = getattr(error, "returncode", None)
    log.warning(
        f"Run aborted after {state.value}: {type(error).__name__}"
        + (f" (exit status {returncode})" if returncode is not None else "")
    )
    return RunResult(
        state=RunState.ABORTED,
        exit_code=EXIT_FAILURE,
        installed=installed,
        error=error,
    )


def run(
    options: Optional[WorkflowOptions] = None,
    *,
    read: Callable[[str], str] = input,
    acknowledge: Callable[[str], str] = input,
    required: Optional[Sequence[Dependency]] = None,
) -> RunResult:
    """Check dependencies, scan, prompt and mount.

    Args:
        options: Mount settings; defaults to the loaded settings
        read: Reads the menu selection
        acknowledge: Blocks for the macFUSE approval step
        required: Dependencies to verify; defaults to Homebrew, macFUSE, ntfs-3g

    Returns:
        RunResult in either the MOUNTED or ABORTED state
    """
    options = options or WorkflowOptions.from_settings()
    state = RunState.START
    installed: list[str] = []
    console.banner()
    try:
        installed = dependencies.verify_dependencies(required, acknowledge=acknowledge)
        state = RunState.DEPENDENCIES_CHECKED

        console.say()
        console.info("Scanning for external NTFS drives...")
        candidates = devices.scan_ntfs_volumes(options.partition_marker)
        state = RunState.VOLUMES_SCANNED

        choice = menus.prompt_for_volume(candidates, read=read)
        state = RunState.SELECTION_MADE

        driver_path = mount.resolve_driver_path(options.ntfs_3g_path)
        request = mount.mount_volume(
            choice,
            driver_path=driver_path,
            volumes_root=options.volumes_root,
            options=options.mount_options,
            use_sudo=options.use_sudo,
            open_browser=options.open_file_browser,
        )
    except NtfsMounterError as error:
        return _abort(state, error, installed)

    return RunResult(
        state=RunState.MOUNTED,
        exit_code=EXIT_SUCCESS,
        request=request,
        installed=installed,
    )
