"""External NTFS partition discovery using diskutil.

Runs `diskutil list external` and keeps the partition lines whose TYPE column
carries the NTFS marker ("Microsoft Basic Data" on GPT disks). A typical
listing looks like:

    /dev/disk4 (external, physical):
       #:                       TYPE NAME                    SIZE       IDENTIFIER
       0:      GUID_partition_scheme                        *1.0 TB     disk4
       1:                        EFI EFI                     209.7 MB   disk4s1
       2:       Microsoft Basic Data Backup Drive            999.9 GB   disk4s2

Parsing Contract:
    - The device identifier is the last whitespace-delimited token and must
      look like a partition identifier (disk<N>s<M>).
    - The label is the text after the marker with the trailing identifier and
      SIZE column removed. A size-like suffix separated from the name by a
      single space is part of the name ("Backup 2 TB").
    - A matching line that breaks the contract raises VolumeParseError instead
      of producing a wrong device; diskutil's layout is not a stable API.

Operations:
    - list_external_disks(): Raw `diskutil list external` output
    - parse_disk_list(): Parse listing text into VolumeCandidate records
    - scan_ntfs_volumes(): List and parse, raising if nothing was found

Example:
    >>> candidates = scan_ntfs_volumes()
    >>> [candidate.device_identifier for candidate in candidates]
    ['disk4s2']
"""

from __future__ import annotations

import re
import subprocess

from ntfs_mounter.config.settings import DEFAULT_PARTITION_MARKER
from ntfs_mounter.domain.models import VolumeCandidate
from ntfs_mounter.logging import LoggerFactory
from ntfs_mounter.storage import commands
from ntfs_mounter.storage.exceptions import (
    NoVolumesFoundError,
    ScanError,
    VolumeParseError,
)


log = LoggerFactory.for_scan()

LIST_EXTERNAL_COMMAND = ("diskutil", "list", "external")
UNTITLED_LABEL = "Untitled"

_IDENTIFIER_RE = re.compile(r"^disk\d+(?:s\d+)+$")
# SIZE column, e.g. "999.9 GB" or "*1.0 TB"; it sits two or more spaces after
# NAME, or alone when NAME is empty.
_SIZE_SUFFIX_RE = re.compile(r"(?:^|\s{2,})\*?\d+(?:\.\d+)?\s+[KMGTPE]?B$")


def list_external_disks() -> str:
    """Return the raw text of `diskutil list external`.

    Raises:
        ScanError: If diskutil is missing or exits non-zero
    """
    try:
        result = commands.run_command(LIST_EXTERNAL_COMMAND, log_output=True)
    except subprocess.CalledProcessError as error:
        raise ScanError(
            f"diskutil failed: {(error.stderr or '').strip()}", error.returncode
        ) from error
    except FileNotFoundError as error:
        raise ScanError(f"diskutil not available: {error}", 127) from error
    return result.stdout


def parse_partition_line(line: str, marker: str = DEFAULT_PARTITION_MARKER) -> VolumeCandidate:
    """Parse one matching listing line.

    Raises:
        VolumeParseError: If the line does not follow the diskutil layout
    """
    tokens = line.split()
    if not tokens:
        raise VolumeParseError(line, "empty line")
    identifier = tokens[-1]
    if not _IDENTIFIER_RE.match(identifier):
        raise VolumeParseError(line, f"unexpected device identifier {identifier!r}")

    _, _, remainder = line.partition(marker)
    remainder = remainder.strip()
    if remainder.endswith(identifier):
        remainder = remainder[: -len(identifier)].rstrip()
    label = _SIZE_SUFFIX_RE.sub("", remainder).strip()
    if not label:
        label = UNTITLED_LABEL
    return VolumeCandidate(device_identifier=identifier, label=label)


def parse_disk_list(output: str, marker: str = DEFAULT_PARTITION_MARKER) -> list[VolumeCandidate]:
    """Parse `diskutil list` text into candidates, preserving listing order."""
    candidates = [
        parse_partition_line(line, marker)
        for line in output.splitlines()
        if marker in line
    ]
    log.debug(f"Parsed {len(candidates)} NTFS partition(s)")
    return candidates


def scan_ntfs_volumes(marker: str = DEFAULT_PARTITION_MARKER) -> list[VolumeCandidate]:
    """List external disks and return their NTFS partitions.

    Raises:
        NoVolumesFoundError: If no matching partitions exist
        ScanError: If listing fails
        VolumeParseError: If a matching line cannot be parsed
    """
    candidates = parse_disk_list(list_external_disks(), marker)
    if not candidates:
        log.info("No external NTFS partitions found")
        raise NoVolumesFoundError()
    names = ", ".join(candidate.device_identifier for candidate in candidates)
    log.info(f"Found {len(candidates)} NTFS partition(s): {names}")
    return candidates
