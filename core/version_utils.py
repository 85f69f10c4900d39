"""
Utility functions for normalizing and comparing versions captured from user agents.
"""
import re
from typing import Optional, Tuple

# Only plain dotted numeric versions take part in comparisons (4, 4.0, 2.3.7)
DOTTED_VERSION_PATTERN = re.compile(r'^\d+(?:\.\d+)*$')


def normalize_version(version: Optional[str]) -> str:
    """
    Normalize a version string built from a rule template.

    Examples:
        - "10_15_7" -> "10.15.7"
        - "4.4." -> "4.4"   (template '$1.$2' with an empty second group)
        - " 9 " -> "9"

    Args:
        version: Version string to normalize

    Returns:
        Normalized version, empty string when nothing is left
    """
    if not version:
        return ""

    version = version.replace('_', '.').strip()
    return version.rstrip('.').strip()


def parse_version(version: Optional[str]) -> Optional[Tuple[int, ...]]:
    """
    Parse a dotted numeric version into a tuple of integers.

    Examples:
        - "2.3.7" -> (2, 3, 7)
        - "4" -> (4,)
        - "4.0b1", "", "UNK" -> None

    Args:
        version: The version string

    Returns:
        Tuple of components or None if the string is not dotted numeric
    """
    if not version:
        return None

    version = version.strip()
    if not DOTTED_VERSION_PATTERN.match(version):
        return None

    return tuple(int(part) for part in version.split('.'))


def version_compare(left: Optional[str], right: Optional[str]) -> Optional[int]:
    """
    Compare two dotted numeric versions.

    Missing trailing components count as zero, so "2" == "2.0".

    Returns:
        -1, 0 or 1, or None if either side cannot be parsed
    """
    left_parts = parse_version(left)
    right_parts = parse_version(right)
    if left_parts is None or right_parts is None:
        return None

    length = max(len(left_parts), len(right_parts))
    left_parts += (0,) * (length - len(left_parts))
    right_parts += (0,) * (length - len(right_parts))
    return (left_parts > right_parts) - (left_parts < right_parts)


def version_in_range(version: Optional[str], lower: Optional[str] = None, upper: Optional[str] = None) -> Optional[bool]:
    """
    Check lower <= version < upper. Either bound may be omitted.

    Returns:
        True/False, or None if the version cannot be parsed
    """
    if parse_version(version) is None:
        return None

    if lower is not None and version_compare(version, lower) < 0:
        return False
    if upper is not None and version_compare(version, upper) >= 0:
        return False
    return True
