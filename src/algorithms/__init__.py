"""
Bridge event algorithms for the relay monitor.

- classify: summarizes the bridge events of one block as EventCounts
- InvariantEnforcer: checks header import bounds for one block

Both are pure per-block functions; cross-block memory lives in the engine.
"""

from .classification import classify, count_consensus_header_imports, count_parachain_header_imports
from .invariants import (
    IdleBlockCheck,
    InvariantCheck,
    InvariantEnforcer,
    MessageActivityCheck,
    Violation,
    enforce,
)

__all__ = [
    "classify",
    "count_consensus_header_imports",
    "count_parachain_header_imports",
    "IdleBlockCheck",
    "InvariantCheck",
    "InvariantEnforcer",
    "MessageActivityCheck",
    "Violation",
    "enforce",
]
