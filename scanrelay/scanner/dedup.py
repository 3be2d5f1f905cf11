"""
Scan deduplication.

A camera keeps reporting the same symbol for as long as it stays in view.
ScanDeduplicator collapses those repeats into one logical scan: a decode is
dropped only when it equals the last accepted code and arrives less than
the cooldown after it. A repeat at exactly the cooldown is accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 2.0


@dataclass(frozen=True)
class DedupGuard:
    """Last accepted decode and when it was accepted."""

    last_code: Optional[str] = None
    last_accepted_at: Optional[float] = None


class ScanDeduplicator:
    """
    Suppress identical decodes inside the cooldown window.

    Calls must arrive in decode order from a single producer.

    Example:
        >>> dedup = ScanDeduplicator()
        >>> dedup.should_accept("A123", 0.0)
        True
        >>> dedup.should_accept("A123", 1.5)
        False
        >>> dedup.should_accept("A123", 2.1)
        True
    """

    def __init__(self, cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS) -> None:
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds cannot be negative")
        self._cooldown = cooldown_seconds
        self._guard = DedupGuard()

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    @property
    def guard(self) -> DedupGuard:
        return replace(self._guard)

    def is_repeat(self, code: str, observed_at: float) -> bool:
        """Check a decode against the guard without changing it."""
        guard = self._guard
        if guard.last_code is None or guard.last_accepted_at is None:
            return False
        if code != guard.last_code:
            return False
        return (observed_at - guard.last_accepted_at) < self._cooldown

    def should_accept(self, code: str, observed_at: float) -> bool:
        """
        Decide whether a decode is a new logical scan.

        On accept the guard is replaced in one assignment so last_code and
        last_accepted_at always belong to the same decode.

        Args:
            code: Decoded string
            observed_at: Decode time in seconds

        Returns:
            True if the decode starts a new scan
        """
        if self.is_repeat(code, observed_at):
            logger.debug(f"Duplicate decode ignored: {code}")
            return False

        self._guard = DedupGuard(last_code=code, last_accepted_at=observed_at)
        return True

    def reset(self) -> None:
        """Forget the last accepted decode."""
        self._guard = DedupGuard()
