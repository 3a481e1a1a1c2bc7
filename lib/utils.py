# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common helpers used across the application.
# =============================================================================

from collections.abc import Iterable
from pathlib import PurePosixPath, PureWindowsPath


# =============================================================================
# Label Utilities
# =============================================================================

def dedupe_labels(labels: Iterable[str] | None) -> list[str]:
    """
    Remove duplicate labels, keeping the first occurrence of each.

    Comparison is exact (case-sensitive, no trimming), so "React" and
    "react" are both kept.

    Example:
        dedupe_labels(["AWS", "Cloud", "AWS"])  # ["AWS", "Cloud"]
    """
    seen: set[str] = set()
    result: list[str] = []
    for label in labels or []:
        if label in seen:
            continue
        seen.add(label)
        result.append(label)
    return result


# =============================================================================
# Filename Utilities
# =============================================================================

def safe_basename(filename: str | None, default: str = "file") -> str:
    """
    Strip any directory part from a client-supplied filename.

    Handles both "/" and "\\" separators since browsers on Windows may send
    full paths.

    Example:
        safe_basename("C:\\Users\\me\\cv.pdf")  # "cv.pdf"
    """
    if not filename:
        return default
    name = PureWindowsPath(PurePosixPath(filename).name).name.strip()
    return name or default
