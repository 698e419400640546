"""
Pytest configuration and shared fixtures for ntfs-mounter tests.

This module provides captured diskutil/mount output and subprocess mocks so
tests never touch the host's disks.
"""

import subprocess
from pathlib import Path
from typing import List
from unittest.mock import Mock

import pytest

from ntfs_mounter.config import settings
from ntfs_mounter.ui import console


# ==============================================================================
# Captured Command Output Fixtures
# ==============================================================================


@pytest.fixture
def diskutil_two_ntfs() -> str:
    """`diskutil list external` with two NTFS partitions on two disks."""
    return """/dev/disk3 (external, physical):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:     FDisk_partition_scheme                        *500.1 GB   disk3
   1:       Microsoft Basic Data Windows HD              500.1 GB   disk3s1

/dev/disk4 (external, physical):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:      GUID_partition_scheme                        *1.0 TB     disk4
   1:                        EFI EFI                     209.7 MB   disk4s1
   2:       Microsoft Basic Data Backup Drive            999.9 GB   disk4s2
"""


@pytest.fixture
def diskutil_no_ntfs() -> str:
    """`diskutil list external` with only an APFS/exFAT disk attached."""
    return """/dev/disk5 (external, physical):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:      GUID_partition_scheme                        *64.0 GB    disk5
   1:                        EFI EFI                     209.7 MB   disk5s1
   2:                 Apple_APFS Container disk6         63.8 GB    disk5s2
"""


@pytest.fixture
def mount_output_with_disk3s1() -> str:
    """`mount` output where macOS auto-mounted disk3s1 read-only."""
    return """/dev/disk1s1 on / (apfs, local, read-only, journaled)
devfs on /dev (devfs, local, nobrowse)
/dev/disk3s1 on /Volumes/Windows HD (ntfs, local, read-only, noowners)
"""


@pytest.fixture
def mount_output_without_disk3s1() -> str:
    return """/dev/disk1s1 on / (apfs, local, read-only, journaled)
devfs on /dev (devfs, local, nobrowse)
/dev/disk3s10 on /Volumes/Other (ntfs, local, read-only, noowners)
"""


# ==============================================================================
# Subprocess Mock Fixtures
# ==============================================================================


def _result(stdout: str = "", stderr: str = "", returncode: int = 0) -> Mock:
    result = Mock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


@pytest.fixture
def mock_subprocess_success(mocker) -> Mock:
    """
    Fixture providing a mock subprocess.run that always succeeds.

    Returns:
        Mock object for subprocess.run.
    """
    return mocker.patch("subprocess.run", return_value=_result())


@pytest.fixture
def mock_subprocess_failure(mocker) -> Mock:
    """
    Fixture providing a mock subprocess.run that always fails.

    Returns:
        Mock object for subprocess.run that raises CalledProcessError.
    """

    def raise_error(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0], stderr="Mock error")

    return mocker.patch("subprocess.run", side_effect=raise_error)


@pytest.fixture
def capture_subprocess_calls(mocker) -> List[List]:
    """
    Fixture that captures all subprocess.run calls for inspection.

    Returns:
        List that will contain all subprocess command arguments.
    """
    calls = []

    def track_call(cmd, **kwargs):
        calls.append(cmd)
        return _result()

    mocker.patch("subprocess.run", side_effect=track_call)
    return calls


@pytest.fixture
def mock_popen(mocker) -> Mock:
    """Fixture replacing subprocess.Popen for detached launches."""
    return mocker.patch("subprocess.Popen")


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def temp_settings_file(tmp_path) -> Path:
    """
    Fixture providing a temporary settings file path.

    Args:
        tmp_path: pytest's built-in temporary directory fixture.

    Returns:
        Path to a temporary settings file.
    """
    settings_dir = tmp_path / ".config" / "ntfs-mounter"
    settings_dir.mkdir(parents=True, exist_ok=True)
    return settings_dir / "settings.json"


@pytest.fixture(autouse=True)
def reset_global_state(tmp_path):
    """
    Auto-use fixture giving each test plain console output and default settings.
    """
    console.configure(color=False)
    settings.load_settings(path=tmp_path / "missing-settings.json", environ={})
    yield
    console.configure(color=False)


@pytest.fixture
def make_result():
    """Factory for fake CompletedProcess objects."""
    return _result
