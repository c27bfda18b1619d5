"""
Failure taxonomy of a monitor run.

Every failure is terminal: the monitor never retries and never downgrades a
failure to a warning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from algorithms.invariants import Violation


class MonitorFailure(Exception):
    """Base class for all monitor failures."""


class InvariantViolation(MonitorFailure):
    """A block imported more bridged headers than its regime allows."""

    def __init__(self, violation: "Violation", block_number: Optional[int] = None, block_hash: Optional[str] = None):
        self.violation = violation
        self.block_number = block_number
        self.block_hash = block_hash
        where = f" at block #{block_number}" if block_number is not None else ""
        super().__init__(f"Unexpected {violation.description}{where}")


class TimeoutExpired(MonitorFailure):
    """The observation window elapsed before all conditions were met."""

    def __init__(self, missing: Sequence[str], timeout_seconds: Optional[float] = None):
        self.missing: List[str] = list(missing)
        self.timeout_seconds = timeout_seconds
        super().__init__("; ".join(self.missing) or "Observation window elapsed")


class SourceError(MonitorFailure):
    """The block source failed while the monitor was observing."""
