"""Numbered drive selection menu."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ntfs_mounter.domain.models import VolumeCandidate
from ntfs_mounter.logging import LoggerFactory
from ntfs_mounter.storage.exceptions import SelectionCancelledError
from ntfs_mounter.ui import console


log = LoggerFactory.for_menu()

MENU_HEADER = "Please select the drive you want to mount:"
PROMPT = "Enter a number: "
INVALID_SELECTION = "Invalid selection. Please try again."


def render_menu(candidates: Sequence[VolumeCandidate]) -> list[str]:
    return [f"{index}) {candidate.label}" for index, candidate in enumerate(candidates, start=1)]


def parse_choice(raw: str, count: int) -> Optional[int]:
    """Map a 1-based menu entry to a 0-based index, or None if invalid."""
    try:
        number = int(raw.strip())
    except ValueError:
        return None
    if number < 1 or number > count:
        return None
    return number - 1


def prompt_for_volume(
    candidates: Sequence[VolumeCandidate],
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = console.say,
) -> VolumeCandidate:
    """Show the menu and keep asking until a valid entry is chosen.

    Invalid input re-prompts indefinitely. Ctrl-C or end of input cancels.

    Raises:
        SelectionCancelledError: If reading input is interrupted
        ValueError: If there is nothing to choose from
    """
    if not candidates:
        raise ValueError("No volumes to select from")
    console.info(MENU_HEADER)
    for line in render_menu(candidates):
        write(line)
    while True:
        try:
            raw = read(PROMPT)
        except (KeyboardInterrupt, EOFError) as error:
            write("")
            raise SelectionCancelledError() from error
        index = parse_choice(raw, len(candidates))
        if index is None:
            log.debug(f"Rejected selection {raw!r}")
            console.error(INVALID_SELECTION)
            continue
        choice = candidates[index]
        console.success(f"You selected: {choice.label} ({choice.device_path})")
        log.info(f"Selected {choice.device_identifier}")
        return choice
