"""Skip single-child wrapper directories before copying a template tree."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ValidationError


@dataclass(frozen=True)
class DiscardResult:
    path: Path
    copy_only_content: bool


def discard_leading_directories(root: Path, max_depth: int) -> DiscardResult:
    """Descend through at most ``max_depth`` single-entry directories.

    Descent stops early at a directory holding anything but exactly one
    subdirectory. ``copy_only_content`` is true only when every requested
    level was consumed, in which case the caller copies the directory content
    instead of the directory itself.
    """

    if max_depth < 0:
        raise ValidationError("The directory depth can not have a negative value")
    current = Path(root)
    remaining = max_depth
    for _ in range(max_depth):
        with os.scandir(current) as entries:
            first = next(entries, None)
            has_another = next(entries, None) is not None
        if first is None or has_another or not first.is_dir():
            break
        current = current / first.name
        remaining -= 1
    return DiscardResult(path=current, copy_only_content=max_depth > 0 and remaining == 0)


__all__ = ["DiscardResult", "discard_leading_directories"]
