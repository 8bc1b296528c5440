"""Console output for PacFamily rounds.

Every line carries a short tag so the categories stay readable without color:

    [•] scheduler and pickups    [!] chaser overrides    [x] lost lives, failures
    [✓] points and outcomes      [i] pathfinding debug
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"

    BOLD = "\033[1m"
    RESET = "\033[0m"


LOG_TAG_ROUTINE = "[•]"
LOG_TAG_OVERRIDE = "[!]"
LOG_TAG_LOSS = "[x]"
LOG_TAG_SCORE = "[✓]"
LOG_TAG_DEBUG = "[i]"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes unless PACFAMILY_NO_COLOR is set."""
    if os.getenv("PACFAMILY_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def _emit(tag: str, message: str, color: Color, bold: bool = False) -> None:
    print(colored(f"  {tag} {message}", color, bold=bold))


def log_routine(message: str) -> None:
    """Phase changes and dot pickups."""
    _emit(LOG_TAG_ROUTINE, message, Color.BLUE)


def log_override(message: str) -> None:
    """Frighten triggers and power tiles."""
    _emit(LOG_TAG_OVERRIDE, message, Color.YELLOW)


def log_loss(message: str) -> None:
    """Caught pedestrian, lost lives, listener failures."""
    _emit(LOG_TAG_LOSS, message, Color.RED)


def log_score(message: str, bold: bool = False) -> None:
    """Points and a cleared maze."""
    _emit(LOG_TAG_SCORE, message, Color.GREEN, bold=bold)


def log_debug(message: str) -> None:
    _emit(LOG_TAG_DEBUG, message, Color.CYAN)
