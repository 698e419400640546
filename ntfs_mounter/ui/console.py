"""User-facing terminal output.

Messages shown to the user go to stdout in colour; diagnostics go through
loguru on stderr. Colour is dropped when stdout is not a terminal or when
NO_COLOR is set.
"""

from __future__ import annotations

import os
import sys
from typing import Callable, Iterable, Optional, TextIO

GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
RED = "\033[0;31m"
RESET = "\033[0m"

TITLE = "Interactive NTFS Mount Script"

_color_enabled = True
_stream: Optional[TextIO] = None


def configure(color: Optional[bool] = None, stream: Optional[TextIO] = None) -> None:
    """Set the output stream and whether ANSI colours are emitted.

    With color=None, colour is enabled only for a TTY without NO_COLOR.
    """
    global _color_enabled, _stream
    _stream = stream
    if color is None:
        target = stream or sys.stdout
        color = target.isatty() and "NO_COLOR" not in os.environ
    _color_enabled = color


def colorize(text: str, color: str) -> str:
    if not _color_enabled:
        return text
    return f"{color}{text}{RESET}"


def say(message: str = "") -> None:
    print(message, file=_stream or sys.stdout, flush=True)


def info(message: str) -> None:
    say(colorize(message, BLUE))


def success(message: str) -> None:
    say(colorize(message, GREEN))


def warn(message: str) -> None:
    say(colorize(message, YELLOW))


def error(message: str) -> None:
    say(colorize(message, RED))


def banner() -> None:
    info(TITLE)
    say("=" * (len(TITLE) + 1))


def numbered(lines: Iterable[str], write: Callable[[str], None] = say) -> None:
    for index, line in enumerate(lines, start=1):
        write(f"{index}. {line}")


def pause(
    prompt: str = "Press [Enter] to continue...",
    read: Callable[[str], str] = input,
) -> str:
    """Block until the user presses Enter. Ctrl-C and EOF propagate."""
    return read(prompt)
