"""Version and sprint grouping keys.

Free-text fix-version and sprint names ("6.12.0 (16. 9. - 29. 9)") are
reduced to a "major.minor" key. Anything that does not carry such a number
lands in the UNGROUPED bucket, which always sorts last.
"""

import re
from enum import Enum
from typing import Optional

UNGROUPED = "Ungrouped"

VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)")
_DIGITS = re.compile(r"(\d+)")


class GroupBy(str, Enum):
    FIX_VERSION = "fix_version"
    SPRINT = "sprint"

    @classmethod
    def parse(cls, value) -> "GroupBy":
        """Resolve a grouping selector, failing loudly on anything unknown."""
        if isinstance(value, cls):
            return value
        for option in cls:
            if option.value == value:
                return option
        options = ", ".join(option.value for option in cls)
        raise ValueError(f"Invalid group_by value: {value!r}. Must be one of: {options}")


def natural_key(text: str) -> list:
    """Split text into a numeric-aware sort key, so "6.9" < "6.10"."""
    parts = _DIGITS.split(text)
    return [int(part) if i % 2 else part.lower() for i, part in enumerate(parts)]


def extract_version_number(name: Optional[str]) -> str:
    """Extract the normalized "major.minor" key from a version or sprint name.

    Only the token before the first space is inspected. Malformed or empty
    names fall back to UNGROUPED instead of raising.
    """
    if not name:
        return UNGROUPED

    token = name.strip().split(" ")[0]
    match = VERSION_PATTERN.search(token)
    if not match:
        return UNGROUPED

    major, minor = match.groups()
    return f"{int(major)}.{int(minor)}"


def latest_label(names) -> Optional[str]:
    """Return the latest name under natural ordering, or None if there are none.

    The comparison is made on the whole label text, not on the parsed
    version, so "Sprint 6.10" beats "Sprint 6.9". Blank names are ignored
    and the first of several equal names wins.
    """
    candidates = [name for name in names or () if name]
    if not candidates:
        return None
    return max(candidates, key=natural_key)


def extract_group_key(issue, group_by) -> str:
    """Group key of an issue for the given grouping mode."""
    group_by = GroupBy.parse(group_by)
    if group_by is GroupBy.SPRINT:
        names = issue.sprints
    else:
        names = issue.fix_versions
    return extract_version_number(latest_label(names))


def fix_version_key(issue) -> str:
    return extract_group_key(issue, GroupBy.FIX_VERSION)


def group_key_fn(group_by):
    """Return a one-argument key function for the validated grouping mode."""
    group_by = GroupBy.parse(group_by)

    def key_fn(issue):
        return extract_group_key(issue, group_by)

    return key_fn


def group_sort_key(key: str) -> tuple:
    if key == UNGROUPED:
        return (1, [])
    return (0, natural_key(key))


def sort_groups(keys) -> list:
    """Sort group keys in ascending natural order with UNGROUPED last."""
    return sorted(keys, key=group_sort_key)


def newest_groups(keys, count: int) -> list:
    """Return the `count` newest numeric group keys, oldest first."""
    numeric = [key for key in sort_groups(set(keys)) if key != UNGROUPED]
    if count <= 0:
        return []
    return numeric[-count:]
