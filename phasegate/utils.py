"""
Utility functions for the Phasegate CLI application.
"""

import re
import subprocess
from pathlib import Path
from typing import Iterable, Optional

KEBAB_CASE_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def is_kebab_case(value: str) -> bool:
    """
    Check whether a string is kebab-case.

    Lowercase letters and digits separated by single hyphens, with no
    leading or trailing hyphen.

    Examples:
        >>> is_kebab_case("add-auth")
        True
        >>> is_kebab_case("Add-Auth")
        False
        >>> is_kebab_case("add--auth")
        False
    """
    return bool(value) and KEBAB_CASE_PATTERN.match(value) is not None


def format_sequence_id(number: int, width: int) -> str:
    """
    Zero-pad a sequence number.

    Args:
        number: Sequence number to format.
        width: Minimum number of digits.

    Returns:
        The padded string, e.g. format_sequence_id(20, 3) -> "020".
    """
    return str(number).zfill(width)


def next_gap_id(existing_ids: Iterable[str], step: int, width: int) -> str:
    """
    Compute the next gap-numbered ID.

    The next ID is the highest numeric ID seen so far plus the step, so an
    ID is never reused even when earlier records were removed by hand.

    Args:
        existing_ids: IDs already assigned.
        step: Increment between consecutive IDs.
        width: Zero-padding width.

    Returns:
        The next ID string.
    """
    highest = 0
    for existing in existing_ids:
        if existing.isdigit():
            highest = max(highest, int(existing))
    return format_sequence_id(highest + step, width)


def current_branch(root: Optional[Path] = None) -> Optional[str]:
    """
    Return the checked-out git branch of a working tree.

    Returns:
        The branch name, or None when the directory is not a git work tree,
        git is unavailable, or HEAD is detached.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=str(root) if root else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    branch = result.stdout.strip()
    if result.returncode != 0 or not branch or branch == "HEAD":
        return None
    return branch
