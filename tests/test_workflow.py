"""Integration tests for the end-to-end workflow with all commands mocked."""

import subprocess
from pathlib import Path

import pytest

from ntfs_mounter.domain.models import Dependency, RunState
from ntfs_mounter.services import workflow
from ntfs_mounter.storage.exceptions import (
    ApprovalCancelledError,
    NoVolumesFoundError,
    PackageManagerMissingError,
    SelectionCancelledError,
)


@pytest.fixture
def all_tools_present(mocker):
    mocker.patch("shutil.which", side_effect=lambda name: f"/opt/homebrew/bin/{name}")


@pytest.fixture
def no_dependencies():
    """An empty dependency list so tests focus on scan/select/mount."""
    return []


@pytest.fixture
def host(mocker, make_result, diskutil_two_ntfs, mount_output_with_disk3s1, mock_popen):
    """Fake macOS host: every command succeeds, output comes from captures."""
    calls = []
    outputs = {
        ("diskutil", "list", "external"): diskutil_two_ntfs,
        ("mount",): mount_output_with_disk3s1,
    }

    def track_call(cmd, **kwargs):
        calls.append(cmd)
        return make_result(stdout=outputs.get(tuple(cmd), ""))

    mocker.patch("subprocess.run", side_effect=track_call)
    return outputs, calls


OPTIONS = workflow.WorkflowOptions(ntfs_3g_path="/opt/homebrew/bin/ntfs-3g")


class TestRun:
    def test_happy_path(self, host, no_dependencies, mock_popen):
        _, calls = host

        result = workflow.run(OPTIONS, read=lambda prompt: "1", required=no_dependencies)

        assert result.state == RunState.MOUNTED
        assert result.exit_code == 0
        assert result.request.mount_point == Path("/Volumes/Windows_HD")
        assert calls.index(["sudo", "diskutil", "unmount", "/dev/disk3s1"]) < calls.index(
            ["sudo", "mkdir", "-p", "/Volumes/Windows_HD"]
        )
        mock_popen.assert_called_once()

    def test_second_entry(self, host, no_dependencies):
        result = workflow.run(OPTIONS, read=lambda prompt: "2", required=no_dependencies)

        assert result.request.device_identifier == "disk4s2"
        assert result.request.mount_point == Path("/Volumes/Backup_Drive")

    def test_no_volumes_aborts_without_menu(self, host, no_dependencies, diskutil_no_ntfs, capsys):
        outputs, _ = host
        outputs[("diskutil", "list", "external")] = diskutil_no_ntfs

        def read(prompt):
            raise AssertionError("menu must not be shown")

        result = workflow.run(OPTIONS, read=read, required=no_dependencies)

        assert result.state == RunState.ABORTED
        assert result.exit_code == 1
        assert isinstance(result.error, NoVolumesFoundError)
        out = capsys.readouterr().out
        assert "No external NTFS partitions found." in out
        assert "Please select" not in out

    def test_missing_brew_aborts(self, mocker, host):
        mocker.patch("shutil.which", return_value=None)
        required = [Dependency(name="Homebrew", executable="brew")]

        result = workflow.run(OPTIONS, read=lambda prompt: "1", required=required)

        assert result.exit_code == 1
        assert isinstance(result.error, PackageManagerMissingError)

    def test_selection_cancelled(self, host, no_dependencies):
        def read(prompt):
            raise EOFError

        result = workflow.run(OPTIONS, read=read, required=no_dependencies)

        assert result.state == RunState.ABORTED
        assert isinstance(result.error, SelectionCancelledError)

    def test_approval_cancelled(self, host, tmp_path, all_tools_present):
        required = [
            Dependency(
                name="macFUSE",
                bundle_paths=(tmp_path / "missing.fs",),
                install_command=("brew", "install", "--cask", "macfuse"),
                post_install_step=workflow.dependencies.MACFUSE_APPROVAL,
            )
        ]

        def acknowledge(prompt):
            raise KeyboardInterrupt

        result = workflow.run(OPTIONS, acknowledge=acknowledge, required=required)

        assert result.exit_code == 1
        assert isinstance(result.error, ApprovalCancelledError)

    def test_driver_failure_exits_one(self, mocker, make_result, diskutil_two_ntfs, no_dependencies):
        def track_call(cmd, **kwargs):
            if cmd[:3] == ["diskutil", "list", "external"]:
                return make_result(stdout=diskutil_two_ntfs)
            if "/opt/homebrew/bin/ntfs-3g" in cmd:
                raise subprocess.CalledProcessError(2, cmd)
            return make_result()

        mocker.patch("subprocess.run", side_effect=track_call)

        result = workflow.run(OPTIONS, read=lambda prompt: "1", required=no_dependencies)

        assert result.state == RunState.ABORTED
        assert result.exit_code == 1
        assert result.error.returncode == 2

    def test_missing_sudo_exits_one(self, mocker, make_result, diskutil_two_ntfs, no_dependencies):
        def track_call(cmd, **kwargs):
            if cmd[0] == "sudo":
                raise FileNotFoundError(cmd[0])
            if cmd[:3] == ["diskutil", "list", "external"]:
                return make_result(stdout=diskutil_two_ntfs)
            return make_result()

        mocker.patch("subprocess.run", side_effect=track_call)

        result = workflow.run(OPTIONS, read=lambda prompt: "1", required=no_dependencies)

        assert result.state == RunState.ABORTED
        assert result.exit_code == 1
        assert result.error.returncode == 127


class TestWorkflowOptions:
    def test_from_settings_defaults(self):
        options = workflow.WorkflowOptions.from_settings()

        assert options.volumes_root == "/Volumes"
        assert options.partition_marker == "Microsoft Basic Data"
        assert options.mount_options == "rw,auto_xattr,defer-permissions"
        assert options.use_sudo is True
