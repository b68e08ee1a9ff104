"""The angular range, in tenths of a degree, in which the scanner measures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class ScanRange:
    """Closed interval ``[start, end]`` of angles in tenths of a degree.

    Angles are counted from the scanner zero on the left. Both ends must lie
    within ``[MIN_ANGLE, MAX_ANGLE]`` and ``start`` must be smaller than ``end``.
    """

    start: int
    end: int

    MIN_ANGLE: ClassVar[int] = 1
    MAX_ANGLE: ClassVar[int] = 2749

    def __post_init__(self) -> None:
        if not self.MIN_ANGLE <= self.start <= self.MAX_ANGLE:
            raise ValueError("Start angle out of range")
        if not self.MIN_ANGLE <= self.end <= self.MAX_ANGLE:
            raise ValueError("End angle out of range")
        if self.start >= self.end:
            raise ValueError("Start angle must be smaller than end angle")

    @classmethod
    def invalid(cls) -> "ScanRange":
        """Return a placeholder range with both angles zero, bypassing validation."""
        obj = object.__new__(cls)
        object.__setattr__(obj, "start", 0)
        object.__setattr__(obj, "end", 0)
        return obj