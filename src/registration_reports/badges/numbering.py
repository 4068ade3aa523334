"""
Badge numbers: <prefix>-<4-digit sequence>, e.g. GD2025-0001.

All allocation goes through one ``BadgeNumberAllocator`` per process. The
read of the highest stored number and the increment happen under one lock,
and the allocator remembers the last number it handed out, so a number is
never reissued while the previous one is still unsaved.
"""

from __future__ import annotations

import re
import threading
from typing import Iterable, Optional, Protocol

from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

SEQUENCE_WIDTH = 4


class IssuedBadgeSource(Protocol):
    def issued_badge_numbers(self, prefix: str) -> Iterable[str]:
        ...


def format_badge_number(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_badge_sequence(badge_number: Optional[str], prefix: str) -> Optional[int]:
    """Sequence part of a badge number, or None if it doesn't match the prefix."""
    if not badge_number:
        return None
    match = re.fullmatch(rf"{re.escape(prefix)}-(\d+)", badge_number.strip())
    return int(match.group(1)) if match else None


def highest_sequence(badge_numbers: Iterable[str], prefix: str) -> int:
    sequences = [parse_badge_sequence(n, prefix) for n in badge_numbers]
    return max((s for s in sequences if s is not None), default=0)


class BadgeNumberAllocator:
    def __init__(self, source: IssuedBadgeSource, prefix: str):
        self._source = source
        self._prefix = prefix
        self._lock = threading.Lock()
        self._last_allocated = 0

    @property
    def prefix(self) -> str:
        return self._prefix

    def next_number(self) -> str:
        with self._lock:
            stored = highest_sequence(self._source.issued_badge_numbers(self._prefix), self._prefix)
            sequence = max(stored, self._last_allocated) + 1
            self._last_allocated = sequence

        number = format_badge_number(self._prefix, sequence)
        logger.info("Allocated badge number %s", number)
        return number
